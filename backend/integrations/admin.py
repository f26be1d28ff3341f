from django.contrib import admin

from core.admin import TenantSafeAdmin
from .models import Integration, MessageTemplate


@admin.register(Integration)
class IntegrationAdmin(TenantSafeAdmin):
    list_display = ('provider', 'tenant', 'enabled', 'status', 'last_tested_at')
    list_filter = ('provider', 'enabled', 'status')


@admin.register(MessageTemplate)
class MessageTemplateAdmin(TenantSafeAdmin):
    list_display = ('name', 'tenant', 'category', 'language', 'status')
    list_filter = ('category', 'status')
    search_fields = ('name', 'content')

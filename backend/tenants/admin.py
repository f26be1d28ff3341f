from django.contrib import admin

from .models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'tenant_type', 'plan', 'custom_plan', 'status', 'created_at')
    list_filter = ('tenant_type', 'status')
    search_fields = ('name', 'slug', 'subdomain')

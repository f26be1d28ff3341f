from django.contrib import admin

from .models import PlanConfig


@admin.register(PlanConfig)
class PlanConfigAdmin(admin.ModelAdmin):
    list_display = ('display_name', 'plan', 'tenant_type', 'is_custom', 'tenant', 'price', 'is_active')
    list_filter = ('tenant_type', 'is_custom', 'is_active')
    search_fields = ('display_name', 'plan', 'tenant__name')

from django.contrib import admin

from core.admin import TenantSafeAdmin
from .models import BioimpedanceMeasurement, ClientProfile, CRMAutomation, CRMTask


@admin.register(ClientProfile)
class ClientProfileAdmin(TenantSafeAdmin):
    list_display = ('name', 'email', 'status', 'professional', 'last_interaction_at', 'tenant')
    list_filter = ('status',)
    search_fields = ('name', 'email', 'phone')


@admin.register(CRMTask)
class CRMTaskAdmin(TenantSafeAdmin):
    list_display = ('title', 'client', 'priority', 'status', 'due_date', 'automated')
    list_filter = ('status', 'priority', 'automated')


@admin.register(CRMAutomation)
class CRMAutomationAdmin(TenantSafeAdmin):
    list_display = ('key', 'tenant', 'enabled', 'last_run_at')
    list_filter = ('key', 'enabled')


@admin.register(BioimpedanceMeasurement)
class BioimpedanceMeasurementAdmin(TenantSafeAdmin):
    list_display = ('client', 'measured_at', 'weight', 'body_fat_percentage', 'bmi')

from django.contrib import admin

from core.admin import TenantSafeAdmin
from .models import Appointment, AppointmentReminder, AvailabilitySlot


@admin.register(Appointment)
class AppointmentAdmin(TenantSafeAdmin):
    list_display = ('title', 'client_name', 'professional', 'scheduled_at', 'status', 'tenant')
    list_filter = ('status',)
    search_fields = ('title', 'client_name', 'client_email')


@admin.register(AvailabilitySlot)
class AvailabilitySlotAdmin(TenantSafeAdmin):
    list_display = ('professional', 'day_of_week', 'start_time', 'end_time', 'is_active')
    list_filter = ('day_of_week', 'is_active')


@admin.register(AppointmentReminder)
class AppointmentReminderAdmin(TenantSafeAdmin):
    list_display = ('appointment', 'reminder_type', 'status', 'scheduled_for', 'enabled')
    list_filter = ('status', 'reminder_type')

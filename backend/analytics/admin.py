from django.contrib import admin

from .models import DashboardSnapshot


@admin.register(DashboardSnapshot)
class DashboardSnapshotAdmin(admin.ModelAdmin):
    list_display = ('key', 'generated_at', 'duration_ms')
    readonly_fields = ('key', 'payload', 'generated_at', 'duration_ms')

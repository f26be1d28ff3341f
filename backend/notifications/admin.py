from django.contrib import admin
from django.utils import timezone

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "recipient", "tenant", "notification_type", "is_read", "emailed_at", "created_at")
    list_filter = ("notification_type", "is_read")
    search_fields = ("title", "recipient__username", "recipient__email", "tenant__name")
    readonly_fields = ("read_at", "emailed_at", "created_at")
    list_select_related = ("recipient", "tenant")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser and not request.user.tenant_id:
            return qs
        return qs.filter(tenant_id=request.user.tenant_id)

    @admin.action(description="Mark as read")
    def mark_read(self, request, queryset):
        updated = queryset.filter(is_read=False).update(is_read=True, read_at=timezone.now())
        self.message_user(request, f"{updated} marked as read.")

    actions = ["mark_read"]

from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    """In-app message for one tenant user; optionally mirrored by e-mail."""
    TYPE_PLAN = "plan"
    TYPE_SCHEDULING = "scheduling"
    TYPE_INTEGRATION = "integration"
    TYPE_SYSTEM = "system"
    TYPE_CHOICES = [
        (TYPE_PLAN, "Plan"),
        (TYPE_SCHEDULING, "Scheduling"),
        (TYPE_INTEGRATION, "Integration"),
        (TYPE_SYSTEM, "System"),
    ]

    tenant = models.ForeignKey("tenants.Tenant", on_delete=models.CASCADE, related_name="notifications")
    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    notification_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_SYSTEM)
    title = models.CharField(max_length=255)
    message = models.TextField()
    # Path inside the web app, e.g. "/settings/plan"
    link = models.CharField(max_length=255, blank=True, default="")

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    emailed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)
        indexes = [models.Index(fields=["recipient", "is_read"], name="notif_recipient_unread_idx")]

    def __str__(self):
        return f"[{self.notification_type}] {self.title} -> {self.recipient}"

    @property
    def url(self):
        return f"{settings.FRONTEND_BASE_URL}{self.link}" if self.link else ""

    def mark_read(self):
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])
        return True

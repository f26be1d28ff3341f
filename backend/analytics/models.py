from django.db import models


class DashboardSnapshot(models.Model):
    """Last computed state of a dashboard. Rebuilt wholesale, never patched."""
    USER_ANALYTICS = "user_analytics"
    PLATFORM_OVERVIEW = "platform_overview"
    KEY_CHOICES = [
        (USER_ANALYTICS, "User analytics"),
        (PLATFORM_OVERVIEW, "Platform overview"),
    ]

    key = models.CharField(max_length=50, choices=KEY_CHOICES, unique=True)
    payload = models.JSONField(default=dict)
    generated_at = models.DateTimeField()
    duration_ms = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return f"{self.key} @ {self.generated_at:%Y-%m-%d %H:%M:%S}"

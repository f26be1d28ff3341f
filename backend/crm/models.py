from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import TenantAwareModel, TimeStampedModel

PRIORITY_CHOICES = [
    ("low", "Low"),
    ("normal", "Normal"),
    ("high", "High"),
    ("urgent", "Urgent"),
]


class ClientProfile(TenantAwareModel, TimeStampedModel):
    """A lead or client followed up by a professional of the tenant."""
    STATUS_CHOICES = [
        ("prospect", "Prospect"),
        ("active", "Active"),
        ("at_risk", "At risk"),
        ("inactive", "Inactive"),
        ("churned", "Churned"),
    ]

    name = models.CharField(max_length=150)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    # Set when the client also has a member account
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="client_profiles",
    )
    professional = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="crm_clients",
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="prospect")
    lead_source = models.CharField(max_length=50, blank=True)
    tags = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)
    last_interaction_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_status_display()})"


class CRMTask(TenantAwareModel, TimeStampedModel):
    TYPE_CHOICES = [
        ("follow_up", "Follow-up"),
        ("call", "Call"),
        ("email", "E-mail"),
        ("meeting", "Meeting"),
    ]
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
    ]

    client = models.ForeignKey(ClientProfile, on_delete=models.CASCADE, related_name="tasks")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    task_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="follow_up")
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default="normal")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    due_date = models.DateTimeField()
    completed_at = models.DateTimeField(null=True, blank=True)
    # Created by an automation rather than by hand
    automated = models.BooleanField(default=False)

    class Meta:
        ordering = ["due_date"]

    def __str__(self):
        return f"{self.title} ({self.client.name})"


class CRMAutomation(TenantAwareModel, TimeStampedModel):
    """Per-tenant switch for one of the built-in CRM automations."""
    KEY_AT_RISK_FOLLOW_UP = "at_risk_follow_up"
    KEY_OVERDUE_TASKS = "overdue_tasks"
    KEY_CHOICES = [
        (KEY_AT_RISK_FOLLOW_UP, "Urgent follow-up for at-risk clients"),
        (KEY_OVERDUE_TASKS, "Overdue task digest"),
    ]

    key = models.CharField(max_length=40, choices=KEY_CHOICES)
    enabled = models.BooleanField(default=False)
    # Days without contact before an at-risk client gets a follow-up
    inactivity_days = models.PositiveSmallIntegerField(default=7, validators=[MinValueValidator(1)])
    last_run_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["key"]
        constraints = [
            models.UniqueConstraint(fields=["tenant", "key"], name="unique_crm_automation_per_tenant"),
        ]

    def __str__(self):
        return f"{self.get_key_display()} ({'on' if self.enabled else 'off'})"


class BioimpedanceMeasurement(TenantAwareModel, TimeStampedModel):
    client = models.ForeignKey(ClientProfile, on_delete=models.CASCADE, related_name="measurements")
    measured_at = models.DateTimeField()
    weight = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(Decimal("10")), MaxValueValidator(Decimal("500"))],
    )
    height = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(Decimal("50")), MaxValueValidator(Decimal("300"))],
    )
    body_fat_percentage = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    skeletal_muscle_mass = models.DecimalField(
        max_digits=5, decimal_places=2, validators=[MinValueValidator(Decimal("0"))],
    )
    visceral_fat_level = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(59)],
    )
    basal_metabolic_rate = models.PositiveIntegerField(null=True, blank=True)
    bmi = models.DecimalField(max_digits=5, decimal_places=2, editable=False)
    equipment = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-measured_at"]

    def compute_bmi(self):
        meters = Decimal(self.height) / 100
        return (Decimal(self.weight) / (meters * meters)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def save(self, *args, **kwargs):
        self.bmi = self.compute_bmi()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {"bmi"}
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.client.name} @ {self.measured_at:%Y-%m-%d}"

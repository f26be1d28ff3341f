from datetime import timedelta

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import TenantAwareModel, TimeStampedModel


class Appointment(TenantAwareModel, TimeStampedModel):
    STATUS_CHOICES = [
        ("scheduled", "Scheduled"),
        ("confirmed", "Confirmed"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
        ("no_show", "No show"),
    ]

    professional = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="appointments",
    )
    client_name = models.CharField(max_length=150)
    client_email = models.EmailField(blank=True)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    scheduled_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=60, validators=[MinValueValidator(5)])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="scheduled")

    class Meta:
        ordering = ["scheduled_at"]

    @property
    def ends_at(self):
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)

    def __str__(self):
        return f"{self.title} with {self.client_name} @ {self.scheduled_at:%Y-%m-%d %H:%M}"


class AvailabilitySlot(TenantAwareModel, TimeStampedModel):
    """Weekly working hours of a professional: one slot per weekday."""
    DAYS_OF_WEEK = [
        (0, "Sunday"),
        (1, "Monday"),
        (2, "Tuesday"),
        (3, "Wednesday"),
        (4, "Thursday"),
        (5, "Friday"),
        (6, "Saturday"),
    ]

    professional = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="availability_slots",
    )
    day_of_week = models.PositiveSmallIntegerField(choices=DAYS_OF_WEEK, validators=[MaxValueValidator(6)])
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["day_of_week", "start_time"]
        constraints = [
            models.UniqueConstraint(fields=["professional", "day_of_week"], name="unique_slot_per_professional_day"),
        ]

    def __str__(self):
        return f"{self.get_day_of_week_display()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class AppointmentReminder(TenantAwareModel, TimeStampedModel):
    TYPE_CHOICES = [
        ("24h_before", "24 hours before"),
        ("1h_before", "1 hour before"),
        ("30min_before", "30 minutes before"),
        ("custom", "Custom"),
    ]
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("sent", "Sent"),
        ("failed", "Failed"),
        ("cancelled", "Cancelled"),
    ]
    OFFSETS = {
        "24h_before": timedelta(hours=24),
        "1h_before": timedelta(hours=1),
        "30min_before": timedelta(minutes=30),
    }

    appointment = models.ForeignKey(Appointment, on_delete=models.CASCADE, related_name="reminders")
    reminder_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    custom_hours = models.PositiveIntegerField(default=0, validators=[MaxValueValidator(168)])
    custom_minutes = models.PositiveIntegerField(default=0, validators=[MaxValueValidator(59)])
    message = models.TextField(blank=True)
    enabled = models.BooleanField(default=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    scheduled_for = models.DateTimeField()
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-scheduled_for"]
        constraints = [
            models.UniqueConstraint(fields=["appointment", "reminder_type"], name="unique_reminder_type_per_appointment"),
        ]

    def offset(self):
        if self.reminder_type == "custom":
            return timedelta(hours=self.custom_hours, minutes=self.custom_minutes)
        return self.OFFSETS[self.reminder_type]

    def compute_scheduled_for(self):
        return self.appointment.scheduled_at - self.offset()

    def save(self, *args, **kwargs):
        self.scheduled_for = self.compute_scheduled_for()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.get_reminder_type_display()} for {self.appointment_id}"

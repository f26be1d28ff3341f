import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Appointment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("client_name", models.CharField(max_length=150)),
                ("client_email", models.EmailField(blank=True, max_length=254)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("scheduled_at", models.DateTimeField()),
                ("duration_minutes", models.PositiveIntegerField(
                    default=60, validators=[django.core.validators.MinValueValidator(5)],
                )),
                ("status", models.CharField(
                    choices=[
                        ("scheduled", "Scheduled"),
                        ("confirmed", "Confirmed"),
                        ("completed", "Completed"),
                        ("cancelled", "Cancelled"),
                        ("no_show", "No show"),
                    ],
                    default="scheduled",
                    max_length=20,
                )),
                ("professional", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="appointments",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["scheduled_at"]},
        ),
        migrations.CreateModel(
            name="AvailabilitySlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("day_of_week", models.PositiveSmallIntegerField(
                    choices=[
                        (0, "Sunday"), (1, "Monday"), (2, "Tuesday"), (3, "Wednesday"),
                        (4, "Thursday"), (5, "Friday"), (6, "Saturday"),
                    ],
                    validators=[django.core.validators.MaxValueValidator(6)],
                )),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("is_active", models.BooleanField(default=True)),
                ("professional", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="availability_slots",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["day_of_week", "start_time"]},
        ),
        migrations.CreateModel(
            name="AppointmentReminder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("reminder_type", models.CharField(
                    choices=[
                        ("24h_before", "24 hours before"),
                        ("1h_before", "1 hour before"),
                        ("30min_before", "30 minutes before"),
                        ("custom", "Custom"),
                    ],
                    max_length=20,
                )),
                ("custom_hours", models.PositiveIntegerField(
                    default=0, validators=[django.core.validators.MaxValueValidator(168)],
                )),
                ("custom_minutes", models.PositiveIntegerField(
                    default=0, validators=[django.core.validators.MaxValueValidator(59)],
                )),
                ("message", models.TextField(blank=True)),
                ("enabled", models.BooleanField(default=True)),
                ("status", models.CharField(
                    choices=[
                        ("pending", "Pending"),
                        ("sent", "Sent"),
                        ("failed", "Failed"),
                        ("cancelled", "Cancelled"),
                    ],
                    default="pending",
                    max_length=20,
                )),
                ("scheduled_for", models.DateTimeField()),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("appointment", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="reminders",
                    to="scheduling.appointment",
                )),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["-scheduled_for"]},
        ),
        migrations.AddConstraint(
            model_name="availabilityslot",
            constraint=models.UniqueConstraint(
                fields=("professional", "day_of_week"), name="unique_slot_per_professional_day",
            ),
        ),
        migrations.AddConstraint(
            model_name="appointmentreminder",
            constraint=models.UniqueConstraint(
                fields=("appointment", "reminder_type"), name="unique_reminder_type_per_appointment",
            ),
        ),
    ]

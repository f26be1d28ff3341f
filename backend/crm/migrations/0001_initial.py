from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

PRIORITY_CHOICES = [("low", "Low"), ("normal", "Normal"), ("high", "High"), ("urgent", "Urgent")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ClientProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=150)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("status", models.CharField(
                    choices=[
                        ("prospect", "Prospect"),
                        ("active", "Active"),
                        ("at_risk", "At risk"),
                        ("inactive", "Inactive"),
                        ("churned", "Churned"),
                    ],
                    default="prospect",
                    max_length=20,
                )),
                ("lead_source", models.CharField(blank=True, max_length=50)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("notes", models.TextField(blank=True)),
                ("last_interaction_at", models.DateTimeField(blank=True, null=True)),
                ("member", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="client_profiles",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("professional", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="crm_clients",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="CRMTask",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("task_type", models.CharField(
                    choices=[("follow_up", "Follow-up"), ("call", "Call"), ("email", "E-mail"), ("meeting", "Meeting")],
                    default="follow_up",
                    max_length=20,
                )),
                ("priority", models.CharField(choices=PRIORITY_CHOICES, default="normal", max_length=10)),
                ("status", models.CharField(
                    choices=[("pending", "Pending"), ("completed", "Completed"), ("cancelled", "Cancelled")],
                    default="pending",
                    max_length=20,
                )),
                ("due_date", models.DateTimeField()),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("automated", models.BooleanField(default=False)),
                ("client", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="tasks",
                    to="crm.clientprofile",
                )),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["due_date"]},
        ),
        migrations.CreateModel(
            name="CRMAutomation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("key", models.CharField(
                    choices=[
                        ("at_risk_follow_up", "Urgent follow-up for at-risk clients"),
                        ("overdue_tasks", "Overdue task digest"),
                    ],
                    max_length=40,
                )),
                ("enabled", models.BooleanField(default=False)),
                ("inactivity_days", models.PositiveSmallIntegerField(
                    default=7, validators=[django.core.validators.MinValueValidator(1)],
                )),
                ("last_run_at", models.DateTimeField(blank=True, null=True)),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["key"]},
        ),
        migrations.CreateModel(
            name="BioimpedanceMeasurement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("measured_at", models.DateTimeField()),
                ("weight", models.DecimalField(
                    decimal_places=2, max_digits=5,
                    validators=[
                        django.core.validators.MinValueValidator(Decimal("10")),
                        django.core.validators.MaxValueValidator(Decimal("500")),
                    ],
                )),
                ("height", models.DecimalField(
                    decimal_places=2, max_digits=5,
                    validators=[
                        django.core.validators.MinValueValidator(Decimal("50")),
                        django.core.validators.MaxValueValidator(Decimal("300")),
                    ],
                )),
                ("body_fat_percentage", models.DecimalField(
                    decimal_places=2, max_digits=5,
                    validators=[
                        django.core.validators.MinValueValidator(Decimal("0")),
                        django.core.validators.MaxValueValidator(Decimal("100")),
                    ],
                )),
                ("skeletal_muscle_mass", models.DecimalField(
                    decimal_places=2, max_digits=5,
                    validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                )),
                ("visceral_fat_level", models.PositiveSmallIntegerField(
                    blank=True, null=True,
                    validators=[
                        django.core.validators.MinValueValidator(1),
                        django.core.validators.MaxValueValidator(59),
                    ],
                )),
                ("basal_metabolic_rate", models.PositiveIntegerField(blank=True, null=True)),
                ("bmi", models.DecimalField(decimal_places=2, editable=False, max_digits=5)),
                ("equipment", models.CharField(blank=True, max_length=100)),
                ("notes", models.TextField(blank=True)),
                ("client", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="measurements",
                    to="crm.clientprofile",
                )),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["-measured_at"]},
        ),
        migrations.AddConstraint(
            model_name="crmautomation",
            constraint=models.UniqueConstraint(fields=("tenant", "key"), name="unique_crm_automation_per_tenant"),
        ),
    ]

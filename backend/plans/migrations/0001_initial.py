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
            name="PlanConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("plan", models.SlugField(max_length=100)),
                ("display_name", models.CharField(max_length=150)),
                ("tenant_type", models.CharField(
                    choices=[("individual", "Individual"), ("business", "Business")],
                    default="business",
                    max_length=20,
                )),
                ("is_custom", models.BooleanField(default=False)),
                ("limits", models.JSONField(default=dict)),
                ("price", models.DecimalField(decimal_places=2, default=0, help_text="Monthly price", max_digits=10)),
                ("extra_slot_price", models.JSONField(blank=True, default=dict)),
                ("features", models.JSONField(blank=True, default=dict)),
                ("contract_terms", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="created_plans",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("tenant", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="custom_plans",
                    to="tenants.tenant",
                )),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddConstraint(
            model_name="planconfig",
            constraint=models.UniqueConstraint(
                condition=models.Q(("is_custom", False)),
                fields=("plan", "tenant_type"),
                name="unique_base_plan_per_tenant_type",
            ),
        ),
    ]

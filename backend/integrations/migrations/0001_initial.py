import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Integration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("provider", models.CharField(
                    choices=[
                        ("whatsapp", "WhatsApp Business"),
                        ("stripe", "Stripe"),
                        ("mercadopago", "Mercado Pago"),
                        ("openai", "OpenAI"),
                        ("anthropic", "Anthropic"),
                        ("google_calendar", "Google Calendar"),
                    ],
                    max_length=30,
                )),
                ("enabled", models.BooleanField(default=False)),
                ("config", models.JSONField(blank=True, default=dict)),
                ("status", models.CharField(
                    choices=[
                        ("not_configured", "Not configured"),
                        ("connected", "Connected"),
                        ("error", "Error"),
                    ],
                    default="not_configured",
                    max_length=20,
                )),
                ("last_tested_at", models.DateTimeField(blank=True, null=True)),
                ("last_error", models.TextField(blank=True)),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["provider"]},
        ),
        migrations.CreateModel(
            name="MessageTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                ("category", models.CharField(
                    choices=[
                        ("marketing", "Marketing"),
                        ("utility", "Utility"),
                        ("authentication", "Authentication"),
                    ],
                    default="utility",
                    max_length=20,
                )),
                ("language", models.CharField(default="pt_BR", max_length=10)),
                ("content", models.TextField()),
                ("status", models.CharField(
                    choices=[
                        ("draft", "Draft"),
                        ("pending", "Pending approval"),
                        ("approved", "Approved"),
                        ("rejected", "Rejected"),
                    ],
                    default="draft",
                    max_length=20,
                )),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tenants.tenant")),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.AddConstraint(
            model_name="integration",
            constraint=models.UniqueConstraint(
                fields=("tenant", "provider"), name="unique_integration_per_tenant_provider",
            ),
        ),
        migrations.AddConstraint(
            model_name="messagetemplate",
            constraint=models.UniqueConstraint(
                fields=("tenant", "name", "language"), name="unique_template_name_language",
            ),
        ),
    ]

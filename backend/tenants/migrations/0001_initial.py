from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Tenant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
                ("slug", models.SlugField(max_length=100, unique=True)),
                ("tenant_type", models.CharField(
                    choices=[("individual", "Individual"), ("business", "Business"), ("system", "System")],
                    default="business",
                    max_length=20,
                )),
                ("subdomain", models.CharField(blank=True, max_length=63, null=True, unique=True)),
                ("plan", models.CharField(blank=True, max_length=50)),
                ("extra_slots", models.JSONField(blank=True, default=dict)),
                ("enabled_features", models.JSONField(blank=True, default=dict)),
                ("status", models.CharField(
                    choices=[("active", "Active"), ("suspended", "Suspended"), ("cancelled", "Cancelled")],
                    default="active",
                    max_length=20,
                )),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["name"]},
        ),
    ]

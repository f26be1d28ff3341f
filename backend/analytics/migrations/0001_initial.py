from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DashboardSnapshot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(
                    choices=[("user_analytics", "User analytics"), ("platform_overview", "Platform overview")],
                    max_length=50,
                    unique=True,
                )),
                ("payload", models.JSONField(default=dict)),
                ("generated_at", models.DateTimeField()),
                ("duration_ms", models.PositiveIntegerField(default=0)),
            ],
            options={"ordering": ["key"]},
        ),
    ]

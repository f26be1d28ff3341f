from django.db import migrations

from plans.constants import DEFAULT_PLAN_CONFIGS


def seed_base_plans(apps, schema_editor):
    PlanConfig = apps.get_model("plans", "PlanConfig")
    for config in DEFAULT_PLAN_CONFIGS:
        defaults = {key: value for key, value in config.items() if key not in ("plan", "tenant_type")}
        PlanConfig.objects.get_or_create(
            plan=config["plan"],
            tenant_type=config["tenant_type"],
            is_custom=False,
            defaults=defaults,
        )


def unseed_base_plans(apps, schema_editor):
    PlanConfig = apps.get_model("plans", "PlanConfig")
    PlanConfig.objects.filter(
        is_custom=False,
        plan__in=[config["plan"] for config in DEFAULT_PLAN_CONFIGS],
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("plans", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_base_plans, unseed_base_plans),
    ]

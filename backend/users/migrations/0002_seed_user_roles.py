from django.db import migrations

ROLES = [
    ("owner", "Account owner with full access to the tenant"),
    ("admin", "Manages team members, plans usage and settings"),
    ("trainer", "Professional who runs appointments and client programs"),
    ("member", "Client or staff seat with personal access only"),
]


def seed_user_roles(apps, schema_editor):
    UserRole = apps.get_model("users", "UserRole")
    for name, description in ROLES:
        UserRole.objects.get_or_create(name=name, defaults={"description": description})


def unseed_user_roles(apps, schema_editor):
    UserRole = apps.get_model("users", "UserRole")
    UserRole.objects.filter(name__in=[name for name, _ in ROLES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_user_roles, unseed_user_roles),
    ]

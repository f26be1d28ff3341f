from django.contrib.auth import get_user_model

from tenants.models import Tenant
from users.models import UserRole

User = get_user_model()


def make_tenant(name="Iron Gym", tenant_type=Tenant.TYPE_BUSINESS, **extra):
    return Tenant.objects.create(name=name, tenant_type=tenant_type, **extra)


def make_user(tenant, role="owner", username=None, **extra):
    username = username or f"{role}-{tenant.slug}"
    extra.setdefault("email", f"{username}@example.com")
    return User.objects.create_user(
        username=username,
        password="Str0ng-pass!",
        tenant=tenant,
        role=UserRole.objects.get(name=role),
        **extra,
    )


def make_super_admin(username="root"):
    return User.objects.create_superuser(username=username, email=f"{username}@fitos.local", password="Str0ng-pass!")

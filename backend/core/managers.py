from django.db import models
from core.tenant_context import get_current_tenant, TenantNotSetError


class TenantQuerySet(models.QuerySet):
    def for_tenant(self, tenant):
        return self.filter(tenant=tenant)

    def for_user(self, user):
        """Super-admins see every tenant; tenant users only their own rows."""
        if user.is_superuser and not getattr(user, "tenant_id", None):
            return self
        tenant_id = getattr(user, "tenant_id", None)
        if tenant_id:
            return self.filter(tenant_id=tenant_id)
        return self.none()


class TenantManager(models.Manager.from_queryset(TenantQuerySet)):
    """
    Scopes querysets to the tenant bound by TenantMiddleware.
    With no tenant bound (admin, migrations, Celery, super-admin requests)
    the full queryset is returned and views filter explicitly.
    """

    def get_queryset(self):
        qs = super().get_queryset()
        try:
            tenant = get_current_tenant()
        except TenantNotSetError:
            return qs
        return qs.filter(tenant=tenant)

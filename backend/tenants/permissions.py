from rest_framework.permissions import BasePermission, SAFE_METHODS


def acting_tenant(request):
    """A tenant-bound user always acts on their own tenant; others on the X-Tenant one."""
    user = request.user
    if user and user.is_authenticated and user.tenant_id:
        return user.tenant
    return getattr(request, "tenant", None)


class IsTenantActiveOrReadOnly(BasePermission):
    """
    Allow safe methods for everyone (GET, HEAD, OPTIONS).
    Unsafe methods are only allowed while the acting tenant is active.
    Requests without a tenant (super-admin, public) are not restricted here.
    """

    message = "Your tenant is suspended or cancelled. Write operations are disabled."

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True

        tenant = acting_tenant(request)
        if tenant is None:
            return True

        return tenant.is_active

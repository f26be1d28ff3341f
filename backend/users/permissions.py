from rest_framework import permissions


def _role_name(user):
    return getattr(getattr(user, "role", None), "name", None)


class IsSuperAdmin(permissions.BasePermission):
    """
    Allows access only to platform superusers who are not linked to any tenant.
    Prevents tenant-bound admins from reaching /api/super-admin/ endpoints.
    """
    message = "Super-admin access required."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_superuser and not getattr(user, "tenant_id", None)


class IsTenantOwnerOrAdmin(permissions.BasePermission):
    """Allow access to the Owner and Admin roles."""
    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True  # ✅ Always allow superusers
        return _role_name(user) in ["owner", "admin"]


class IsTrainerOrAbove(permissions.BasePermission):
    """Owners, admins and trainers; members are read-only elsewhere."""
    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True  # ✅ Always allow superusers
        return _role_name(user) in ["owner", "admin", "trainer"]

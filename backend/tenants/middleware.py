import logging

from django.http import JsonResponse
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken

from core import tenant_context
from tenants.models import Tenant

logger = logging.getLogger(__name__)

SAFE_METHODS = ("GET", "HEAD", "OPTIONS")


def _error(message, status):
    return JsonResponse({"success": False, "error": {"message": message}}, status=status)


def request_user(request):
    """
    The session user, else the user of a valid bearer token. DRF has not
    authenticated the request yet; an invalid token is left for DRF to reject.
    """
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return user
    try:
        result = JWTAuthentication().authenticate(request)
    except (InvalidToken, AuthenticationFailed):
        return None
    return result[0] if result else None


def header_tenant_mismatch(user, tenant):
    """Only platform super-admins may act on another tenant through X-Tenant."""
    return (
        tenant is not None
        and user is not None
        and user.is_authenticated
        and user.tenant_id is not None
        and tenant.pk != user.tenant_id
    )


class TenantMiddleware:
    """
    Resolve the current tenant for each request.

    Resolution order:
    1) Tenant-bound user (session or JWT): always their own tenant. An
       X-Tenant header naming another tenant is rejected.
    2) X-Tenant header (tenant slug), for super-admins and public routes
    3) None

    Stores the tenant on request.tenant and in core.tenant_context.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        tenant = None
        user = request_user(request)

        slug = request.headers.get("X-Tenant")
        if slug:
            tenant = Tenant.objects.filter(slug=slug).first()
            if tenant is None:
                logger.warning("🚫 Unknown tenant in X-Tenant header: %s", slug)
                return _error("Tenant not found", 404)

        if header_tenant_mismatch(user, tenant):
            logger.warning("🚫 %s sent X-Tenant '%s' outside their tenant", user.username, slug)
            return _error("X-Tenant does not match your tenant.", 403)

        if user is not None and user.tenant_id:
            tenant = user.tenant

        request.tenant = tenant
        tenant_context.set_current_tenant(tenant)
        try:
            return self.get_response(request)
        finally:
            tenant_context.clear_current_tenant()


class BlockWriteIfTenantSuspendedMiddleware:
    """Rejects write requests made on behalf of a suspended or cancelled tenant."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.method in SAFE_METHODS:
            return self.get_response(request)

        tenant = getattr(request, "tenant", None)
        if tenant is not None and not tenant.is_active:
            logger.info("🚫 Blocking %s %s for %s tenant '%s'", request.method, request.path, tenant.status, tenant.slug)
            return _error(f"Tenant '{tenant.name}' is {tenant.status}. Write operations are disabled.", 403)

        return self.get_response(request)

import logging

from django.utils import timezone

from notifications.utils import notify_user
from plans.limits import require_feature
from .models import PROVIDER_FEATURES

logger = logging.getLogger(__name__)


def require_provider_feature(tenant, provider):
    """Providers tied to a plan feature are refused when the plan lacks it."""
    feature = PROVIDER_FEATURES.get(provider)
    if feature:
        require_feature(tenant, feature)


def check_integration(integration, tested_by=None):
    """
    Check that every configuration key the provider needs is present and
    record the outcome on the integration. No request leaves the server.
    Returns {success, status, missing_keys, message}.
    """
    missing = integration.missing_keys()
    integration.last_tested_at = timezone.now()

    if missing:
        integration.status = "error"
        integration.last_error = f"Missing configuration: {', '.join(missing)}"
        logger.warning(
            "⚠️ Integration %s of tenant '%s' failed its check: %s",
            integration.provider, integration.tenant.slug, integration.last_error,
        )
    else:
        integration.status = "connected"
        integration.last_error = ""
        logger.info("✅ Integration %s of tenant '%s' is configured", integration.provider, integration.tenant.slug)

    integration.save(update_fields=["status", "last_error", "last_tested_at", "updated_at"])

    if missing and tested_by is not None and tested_by.tenant_id == integration.tenant_id:
        notify_user(
            tenant=integration.tenant,
            recipient=tested_by,
            title=f"{integration.get_provider_display()} needs attention",
            message=integration.last_error,
            notification_type="integration",
            send_email=False,
        )

    return {
        "success": not missing,
        "status": integration.status,
        "missing_keys": missing,
        "message": integration.last_error or "Configuration looks complete.",
    }

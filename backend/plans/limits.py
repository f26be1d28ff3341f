import logging

from django.db.models import Count
from rest_framework.exceptions import PermissionDenied, ValidationError

from plans.constants import ROLES, UNLIMITED
from plans.models import PlanConfig

logger = logging.getLogger(__name__)


def get_plan_config(tenant):
    """
    Return the PlanConfig that governs `tenant`:
    its assigned custom plan first, else the active base plan for
    (tenant.plan, tenant.tenant_type). None for system tenants or when
    nothing matches.
    """
    if tenant is None or tenant.is_system:
        return None

    custom = tenant.custom_plan
    if custom is not None and custom.is_active:
        return custom

    return PlanConfig.objects.filter(
        plan=tenant.plan,
        tenant_type=tenant.tenant_type,
        is_custom=False,
        is_active=True,
    ).first()


def _add_slots(limit, extra):
    if limit == UNLIMITED:
        return UNLIMITED
    return limit + extra


def get_plan_limits(tenant):
    """Plan limits per role plus the tenant's purchased extra slots. System tenants are unlimited."""
    if tenant is None or tenant.is_system:
        return {role: UNLIMITED for role in ROLES}

    config = get_plan_config(tenant)
    base = dict(config.limits) if config else {}
    extra = tenant.extra_slots or {}

    limits = {}
    for role in ROLES:
        limits[role] = _add_slots(int(base.get(role, 0)), int(extra.get(role, 0)))
    return limits


def get_enabled_features(tenant):
    """Plan features overridden by the tenant's own enabled_features."""
    if tenant is None:
        return {}
    config = get_plan_config(tenant)
    features = dict(config.features) if config else {}
    features.update(tenant.enabled_features or {})
    return features


def has_feature(tenant, feature: str) -> bool:
    """Check if the tenant's plan includes a feature. System tenants have everything."""
    if tenant is not None and tenant.is_system:
        return True
    return bool(get_enabled_features(tenant).get(feature, False))


def require_feature(tenant, feature: str):
    """Raise PermissionDenied if tenant does not have the feature."""
    # Super-admins act without a tenant
    if tenant is None:
        return

    if not has_feature(tenant, feature):
        raise PermissionDenied(f"Your current plan does not include '{feature}'. Upgrade to access this feature.")


def get_user_count_by_role(tenant):
    counts = {role: 0 for role in ROLES}
    rows = (
        tenant.users.filter(is_active=True, role__isnull=False)
        .values("role__name")
        .annotate(total=Count("id"))
    )
    for row in rows:
        counts[row["role__name"]] = row["total"]
    return counts


def check_user_limit(tenant, role):
    """
    Can `tenant` take one more active user with `role`?
    Returns {allowed, current, limit, available}; a limit of -1 is unlimited.
    Individual tenants are capped at one user in total whatever the role.
    """
    if tenant.is_system:
        return {"allowed": True, "current": 0, "limit": UNLIMITED, "available": UNLIMITED}

    if tenant.is_individual:
        current = tenant.users.filter(is_active=True).count()
        return {"allowed": current < 1, "current": current, "limit": 1, "available": max(1 - current, 0)}

    counts = get_user_count_by_role(tenant)
    limit = get_plan_limits(tenant).get(role, 0)
    current = counts.get(role, 0)

    if limit == UNLIMITED:
        return {"allowed": True, "current": current, "limit": UNLIMITED, "available": UNLIMITED}

    available = max(limit - current, 0)
    return {"allowed": current < limit, "current": current, "limit": limit, "available": available}


def enforce_user_limit(tenant, role):
    result = check_user_limit(tenant, role)
    if not result["allowed"]:
        logger.warning(
            "⚠️ Seat limit reached for tenant '%s' role=%s (%s/%s)",
            tenant.slug, role, result["current"], result["limit"],
        )
        raise ValidationError(
            f"You've reached your plan limit for {role} users ({result['limit']})."
        )
    return result


def add_extra_slots(tenant, role, quantity):
    """Buy `quantity` extra seats of `role`. Business tenants only."""
    if role not in ROLES:
        raise ValidationError({"role": f"Unknown role '{role}'."})
    if quantity < 1:
        raise ValidationError({"quantity": "Quantity must be at least 1."})
    if not tenant.tenant_type == tenant.TYPE_BUSINESS:
        raise ValidationError("Extra slots are only available to business tenants.")

    slots = dict(tenant.extra_slots or {})
    slots[role] = int(slots.get(role, 0)) + quantity
    tenant.extra_slots = slots
    tenant.save(update_fields=["extra_slots", "updated_at"])
    logger.info("✅ Added %s extra %s slot(s) to tenant '%s'", quantity, role, tenant.slug)
    return slots


def can_convert_to_business(tenant, subdomain):
    """Return (ok, reason)."""
    from tenants.models import Tenant

    if not tenant.is_individual:
        return False, "Only individual tenants can be converted."
    if not subdomain:
        return False, "A subdomain is required."
    if Tenant.objects.filter(subdomain=subdomain).exclude(pk=tenant.pk).exists():
        return False, "Subdomain is already in use."
    return True, None


def convert_to_business(tenant, subdomain):
    ok, reason = can_convert_to_business(tenant, subdomain)
    if not ok:
        raise ValidationError(reason)

    tenant.tenant_type = tenant.TYPE_BUSINESS
    tenant.subdomain = subdomain
    tenant.plan = tenant.DEFAULT_PLAN_BY_TYPE[tenant.TYPE_BUSINESS]
    tenant.save(update_fields=["tenant_type", "subdomain", "plan", "updated_at"])
    logger.info("🏢 Tenant '%s' converted to business (subdomain=%s)", tenant.slug, subdomain)
    return tenant

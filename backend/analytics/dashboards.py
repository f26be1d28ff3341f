"""
Dashboard builders.

Each dashboard is recomputed from scratch and stored as one DashboardSnapshot
row. Refreshes may overlap (periodic task and manual refresh); the last one to
write wins.
"""
import logging
import time
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Count
from django.utils import timezone

from plans.constants import ROLES
from plans.models import PlanConfig
from tenants.models import Tenant
from .models import DashboardSnapshot

logger = logging.getLogger(__name__)

ACTIVITY_LEVELS = ("very_high", "high", "medium", "low")

# upper bound in days since last login -> level
ACTIVITY_THRESHOLDS = (
    (1, "very_high"),
    (7, "high"),
    (30, "medium"),
)

RECENT_DAYS = 30


def activity_level(last_login, now=None):
    """Bucket a user by how recently they signed in. Never signed in is 'low'."""
    if last_login is None:
        return "low"
    now = now or timezone.now()
    elapsed = now - last_login
    for days, level in ACTIVITY_THRESHOLDS:
        if elapsed <= timedelta(days=days):
            return level
    return "low"


def _days_since(moment, now):
    if moment is None:
        return None
    return max((now - moment).days, 0)


# ----------------------------------------------------------
#  User analytics
# ----------------------------------------------------------
def build_user_rows(now=None):
    now = now or timezone.now()
    User = get_user_model()
    users = User.objects.select_related("role", "tenant").order_by("username")

    rows = []
    for user in users:
        rows.append({
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "full_name": user.get_full_name(),
            "role": user.role_name,
            "tenant_id": user.tenant_id,
            "tenant_name": user.tenant.name if user.tenant_id else None,
            "is_active": user.is_active,
            "date_joined": user.date_joined.isoformat(),
            "last_login": user.last_login.isoformat() if user.last_login else None,
            "days_since_login": _days_since(user.last_login, now),
            "days_since_joined": _days_since(user.date_joined, now),
            "activity_level": activity_level(user.last_login, now),
        })
    return rows


def summarize_users(rows):
    """Metrics over a list of user rows, so tenant views can summarize their own slice."""
    by_role = {role: 0 for role in ROLES}
    by_activity = {level: 0 for level in ACTIVITY_LEVELS}
    active = recent = new = 0

    for row in rows:
        if row["role"]:
            by_role[row["role"]] = by_role.get(row["role"], 0) + 1
        by_activity[row["activity_level"]] += 1
        if row["is_active"]:
            active += 1
        if row["days_since_login"] is not None and row["days_since_login"] <= RECENT_DAYS:
            recent += 1
        if row["days_since_joined"] is not None and row["days_since_joined"] <= RECENT_DAYS:
            new += 1

    return {
        "total_users": len(rows),
        "active_users": active,
        "inactive_users": len(rows) - active,
        "active_last_30_days": recent,
        "new_last_30_days": new,
        "by_role": by_role,
        "by_activity_level": by_activity,
    }


def build_user_analytics(now=None):
    rows = build_user_rows(now)
    return {"users": rows, "metrics": summarize_users(rows)}


# ----------------------------------------------------------
#  Platform overview
# ----------------------------------------------------------
def _count_by(queryset, field, choices):
    counts = {value: 0 for value, _ in choices}
    for row in queryset.values(field).annotate(total=Count("id")):
        counts[row[field]] = row["total"]
    return counts


def build_platform_overview():
    User = get_user_model()
    tenants = Tenant.objects.all()
    plans = PlanConfig.objects.filter(is_active=True)

    return {
        "tenants": {
            "total": tenants.count(),
            "by_type": _count_by(tenants, "tenant_type", Tenant.TENANT_TYPES),
            "by_status": _count_by(tenants, "status", Tenant.STATUS_CHOICES),
            "with_custom_plan": tenants.filter(custom_plan__isnull=False).count(),
        },
        "plans": {
            "active_base_plans": plans.filter(is_custom=False).count(),
            "custom_plans": plans.filter(is_custom=True).count(),
        },
        "users": {
            "total": User.objects.count(),
            "active": User.objects.filter(is_active=True).count(),
        },
    }


BUILDERS = {
    DashboardSnapshot.USER_ANALYTICS: build_user_analytics,
    DashboardSnapshot.PLATFORM_OVERVIEW: build_platform_overview,
}


# ----------------------------------------------------------
#  Snapshots
# ----------------------------------------------------------
def refresh_snapshot(key):
    started = time.monotonic()
    payload = BUILDERS[key]()
    duration_ms = int((time.monotonic() - started) * 1000)

    snapshot, _ = DashboardSnapshot.objects.update_or_create(
        key=key,
        defaults={"payload": payload, "generated_at": timezone.now(), "duration_ms": duration_ms},
    )
    logger.info("📊 Dashboard '%s' rebuilt in %sms", key, duration_ms)
    return snapshot


def refresh_all():
    return [refresh_snapshot(key) for key in BUILDERS]


def get_snapshot(key):
    """Stored snapshot, built on first use."""
    snapshot = DashboardSnapshot.objects.filter(key=key).first()
    if snapshot is None:
        logger.info("📊 No '%s' snapshot yet, building it now", key)
        snapshot = refresh_snapshot(key)
    return snapshot

import logging

from rest_framework import permissions, viewsets
from rest_framework.response import Response

from core.mixins import EnvelopeMixin
from core.query import ListQuery, filter_items, paginate, sort_items
from users.permissions import IsSuperAdmin, IsTenantOwnerOrAdmin
from .dashboards import get_snapshot, refresh_all, summarize_users
from .models import DashboardSnapshot
from .serializers import DashboardSnapshotSerializer

logger = logging.getLogger(__name__)

ACTIVITY_RANK = {"very_high": 0, "high": 1, "medium": 2, "low": 3}


class UserAnalyticsViewSet(EnvelopeMixin, viewsets.ViewSet):
    """
    User engagement dashboard served from the latest snapshot.
    - Super-admin: every user on the platform
    - Tenant owner/admin: the users of their own tenant
    Rows are searched, filtered, sorted and paginated in memory.
    """
    permission_classes = [permissions.IsAuthenticated, IsTenantOwnerOrAdmin]

    search_fields = ("username", "email", "full_name", "tenant_name")
    filter_fields = ("role", "activity_level", "tenant_id", "is_active")
    sort_options = {
        "name": ("username", False),
        "newest": ("date_joined", True),
        "last_login": ("days_since_login", False),
        "activity": ("activity_rank", False),
    }

    def list(self, request):
        snapshot = get_snapshot(DashboardSnapshot.USER_ANALYTICS)
        rows = snapshot.payload.get("users", [])

        user = request.user
        if user.tenant_id:
            rows = [row for row in rows if row["tenant_id"] == user.tenant_id]
        rows = [dict(row, activity_rank=ACTIVITY_RANK.get(row["activity_level"], 99)) for row in rows]

        query = ListQuery.from_params(request.query_params, filter_fields=self.filter_fields, default_sort="name")
        items = filter_items(rows, query, search_fields=self.search_fields)
        items = sort_items(items, query.sort_by, self.sort_options)
        page = paginate(items, query.page, query.per_page)

        return Response({
            "success": True,
            "data": {
                "users": page.items,
                "metrics": summarize_users(rows),
                "generated_at": snapshot.generated_at,
            },
            "pagination": page.meta(),
        })


class PlatformAnalyticsViewSet(EnvelopeMixin, viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated, IsSuperAdmin]

    def overview(self, request):
        snapshot = get_snapshot(DashboardSnapshot.PLATFORM_OVERVIEW)
        return Response({**snapshot.payload, "generated_at": snapshot.generated_at})

    def refresh(self, request):
        """Rebuild every dashboard now instead of waiting for the next tick."""
        snapshots = refresh_all()
        logger.info("📊 Dashboards refreshed on demand by %s", request.user.username)
        return Response(DashboardSnapshotSerializer(snapshots, many=True).data)

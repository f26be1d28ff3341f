import logging

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import Conflict
from core.mixins import EnvelopeMixin, ListQueryMixin
from core.query import ListQuery
from plans.constants import UNLIMITED
from plans.limits import (
    check_user_limit,
    get_enabled_features,
    get_plan_config,
    get_plan_limits,
    get_user_count_by_role,
)
from plans.models import PlanConfig
from plans.serializers import (
    AssignPlanSerializer,
    CustomPlanCreateSerializer,
    CustomPlanStatsSerializer,
    CustomPlanUpdateSerializer,
    DuplicatePlanSerializer,
    PlanConfigSerializer,
)
from plans.services import CustomPlanService
from tenants.models import Tenant
from users.permissions import IsSuperAdmin

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# 1️⃣ Plan configs (super-admin)
# -------------------------------------------------------------------
class PlanConfigViewSet(EnvelopeMixin, ListQueryMixin, viewsets.ModelViewSet):
    """
    Every plan, base and custom. Creating here always creates a base plan;
    deleting deactivates and is refused while tenants still use the plan.
    """
    queryset = PlanConfig.objects.select_related("tenant").all()
    serializer_class = PlanConfigSerializer
    permission_classes = [IsAuthenticated, IsSuperAdmin]

    search_fields = ("display_name", "plan")
    filter_fields = ("is_custom", "tenant_type", "is_active")
    sort_options = {
        "newest": ("created_at", True),
        "name": ("display_name", False),
        "price": ("price", False),
        "price_desc": ("price", True),
    }
    default_sort = "price"

    def perform_create(self, serializer):
        serializer.save(is_custom=False, created_by=self.request.user)
        logger.info("✅ Base plan '%s' created by %s", serializer.instance.plan, self.request.user)

    def destroy(self, request, *args, **kwargs):
        plan = self.get_object()
        if plan.is_custom:
            in_use = plan.assigned_tenants.count()
        else:
            in_use = Tenant.objects.filter(
                plan=plan.plan, tenant_type=plan.tenant_type, custom_plan__isnull=True,
            ).count()
        if in_use:
            raise Conflict(f"Plan is used by {in_use} tenant(s) and cannot be deactivated.")

        plan.is_active = False
        plan.save(update_fields=["is_active", "updated_at"])
        logger.info("🗑️ Plan %s deactivated", plan.id)
        return Response(self.get_serializer(plan).data)


# -------------------------------------------------------------------
# 2️⃣ Custom plans (super-admin)
# -------------------------------------------------------------------
class CustomPlanViewSet(EnvelopeMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = PlanConfig.objects.filter(is_custom=True).select_related("tenant")
    serializer_class = PlanConfigSerializer
    permission_classes = [IsAuthenticated, IsSuperAdmin]

    def list(self, request):
        query = ListQuery.from_params(request.query_params, filter_fields=("tenant_id", "is_active"), per_page=50)
        page = CustomPlanService.list(
            tenant_id=query.filters.get("tenant_id"),
            is_active=query.filters.get("is_active"),
            search=query.search,
            page=query.page,
            per_page=query.per_page,
        )
        return Response({
            "success": True,
            "data": PlanConfigSerializer(page.items, many=True).data,
            "pagination": page.meta(),
        })

    @extend_schema(request=CustomPlanCreateSerializer, responses=PlanConfigSerializer)
    def create(self, request):
        serializer = CustomPlanCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        plan = CustomPlanService.create(created_by=request.user, **serializer.validated_data)
        return Response(PlanConfigSerializer(plan).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=CustomPlanUpdateSerializer, responses=PlanConfigSerializer)
    def partial_update(self, request, pk=None):
        serializer = CustomPlanUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        plan = CustomPlanService.update(pk, serializer.validated_data)
        return Response(PlanConfigSerializer(plan).data)

    def update(self, request, pk=None):
        return self.partial_update(request, pk)

    def destroy(self, request, pk=None):
        plan = CustomPlanService.deactivate(pk)
        return Response(PlanConfigSerializer(plan).data)

    @extend_schema(request=DuplicatePlanSerializer, responses=PlanConfigSerializer)
    @action(detail=False, methods=["post"])
    def duplicate(self, request):
        serializer = DuplicatePlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        plan = CustomPlanService.duplicate_base(created_by=request.user, **serializer.validated_data)
        return Response(PlanConfigSerializer(plan).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AssignPlanSerializer)
    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        serializer = AssignPlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tenant = CustomPlanService.assign(serializer.validated_data["tenant_id"], pk)
        return Response({
            "tenant_id": tenant.id,
            "custom_plan": tenant.custom_plan_id,
            "enabled_features": tenant.enabled_features,
        })

    @extend_schema(responses=CustomPlanStatsSerializer)
    @action(detail=True, methods=["get"])
    def stats(self, request, pk=None):
        return Response(CustomPlanStatsSerializer(CustomPlanService.stats(pk)).data)


# -------------------------------------------------------------------
# 3️⃣ Plan limits (tenant-facing)
# -------------------------------------------------------------------
class PlanLimitsViewSet(EnvelopeMixin, viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def _tenant(self, request):
        return getattr(request.user, "tenant", None) or getattr(request, "tenant", None)

    @action(detail=False, methods=["get"])
    def usage(self, request):
        tenant = self._tenant(request)
        if tenant is None:
            return Response({"tenant": None, "limits": {}, "usage": {}})

        limits = get_plan_limits(tenant)
        counts = get_user_count_by_role(tenant)
        usage = {}
        for role, limit in limits.items():
            check = check_user_limit(tenant, role)
            usage[role] = {
                "current": counts.get(role, 0),
                "limit": limit,
                "available": check["available"],
                "unlimited": limit == UNLIMITED,
                "can_add": check["allowed"],
            }

        config = get_plan_config(tenant)
        return Response({
            "tenant": tenant.slug,
            "plan": config.plan if config else tenant.plan,
            "plan_name": config.display_name if config else None,
            "is_custom_plan": bool(config and config.is_custom),
            "limits": limits,
            "usage": usage,
        })

    @action(detail=False, methods=["get"])
    def features(self, request):
        tenant = self._tenant(request)
        return Response({"features": get_enabled_features(tenant)})

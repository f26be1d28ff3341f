import logging

from django.db import transaction
from django.db.models import Count
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.mixins import EnvelopeMixin, ListQueryMixin
from plans.limits import add_extra_slots, convert_to_business
from plans.models import PlanConfig
from plans.services import CustomPlanService
from users.permissions import IsSuperAdmin
from .models import Tenant
from .serializers import (
    ChangePlanSerializer,
    ConvertTypeSerializer,
    ExtraSlotsSerializer,
    FeaturesSerializer,
    TenantDetailSerializer,
    TenantRegistrationSerializer,
    TenantSerializer,
    TenantStatusSerializer,
    TenantUserSerializer,
)

logger = logging.getLogger(__name__)


# ----------------------------------------------------------
#  Public registration
# ----------------------------------------------------------
class TenantRegistrationViewSet(EnvelopeMixin, viewsets.ViewSet):
    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = TenantRegistrationSerializer

    def create(self, request):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = serializer.save()

        logger.info("✅ Tenant '%s' registered with owner %s", result["tenant"].slug, result["owner"].username)
        return Response({
            "message": "Tenant and owner created successfully.",
            "tenant": TenantSerializer(result["tenant"]).data,
            "owner": result["owner"].username,
        }, status=status.HTTP_201_CREATED)


# ----------------------------------------------------------
#  Super-admin tenant management
# ----------------------------------------------------------
class TenantViewSet(
    EnvelopeMixin,
    ListQueryMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Tenant.objects.select_related("custom_plan").annotate(user_total=Count("users"))
    serializer_class = TenantSerializer
    permission_classes = [IsAuthenticated, IsSuperAdmin]

    search_fields = ("name", "subdomain")
    filter_fields = ("tenant_type", "status", "plan")
    sort_options = {
        "name": ("name", False),
        "newest": ("created_at", True),
        "oldest": ("created_at", False),
        "users": ("user_total", True),
    }
    default_sort = "name"

    def get_queryset(self):
        qs = super().get_queryset()
        has_custom = self.request.query_params.get("has_custom_plan")
        if has_custom in ("true", "false"):
            qs = qs.filter(custom_plan__isnull=(has_custom == "false"))
        return qs

    def get_serializer_class(self):
        if self.action == "retrieve":
            return TenantDetailSerializer
        return TenantSerializer

    def _detail(self, tenant):
        return Response(TenantDetailSerializer(tenant).data)

    @extend_schema(request=ChangePlanSerializer, responses=TenantDetailSerializer)
    @action(detail=True, methods=["post"])
    def plan(self, request, pk=None):
        tenant = self.get_object()
        serializer = ChangePlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data.get("custom_plan_id") is not None:
            CustomPlanService.assign(tenant.id, data["custom_plan_id"])
            tenant.refresh_from_db()
            return self._detail(tenant)

        base_exists = PlanConfig.objects.filter(
            plan=data["plan"], tenant_type=tenant.tenant_type, is_custom=False, is_active=True,
        ).exists()
        if not base_exists:
            raise ValidationError({"plan": f"No active '{data['plan']}' plan for {tenant.tenant_type} tenants."})

        tenant.plan = data["plan"]
        tenant.custom_plan = None
        tenant.save(update_fields=["plan", "custom_plan", "updated_at"])
        logger.info("📌 Tenant '%s' moved to base plan '%s'", tenant.slug, tenant.plan)
        return self._detail(tenant)

    @extend_schema(request=ExtraSlotsSerializer, responses=TenantDetailSerializer)
    @action(detail=True, methods=["post"], url_path="extra-slots")
    def extra_slots(self, request, pk=None):
        tenant = self.get_object()
        serializer = ExtraSlotsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        add_extra_slots(tenant, serializer.validated_data["role"], serializer.validated_data["quantity"])
        return self._detail(tenant)

    @extend_schema(request=FeaturesSerializer, responses=TenantDetailSerializer)
    @action(detail=True, methods=["post"])
    def features(self, request, pk=None):
        tenant = self.get_object()
        serializer = FeaturesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        merged = dict(tenant.enabled_features or {})
        merged.update(serializer.validated_data["features"])
        tenant.enabled_features = merged
        tenant.save(update_fields=["enabled_features", "updated_at"])
        logger.info("🧩 Feature overrides updated for tenant '%s'", tenant.slug)
        return self._detail(tenant)

    @extend_schema(request=ConvertTypeSerializer, responses=TenantDetailSerializer)
    @action(detail=True, methods=["post"], url_path="type")
    def convert_type(self, request, pk=None):
        tenant = self.get_object()
        serializer = ConvertTypeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        convert_to_business(tenant, serializer.validated_data["subdomain"])
        return self._detail(tenant)

    @extend_schema(request=TenantStatusSerializer, responses=TenantDetailSerializer)
    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):
        tenant = self.get_object()
        serializer = TenantStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tenant.status = serializer.validated_data["status"]
        tenant.save(update_fields=["status", "updated_at"])
        logger.info("🔁 Tenant '%s' status -> %s", tenant.slug, tenant.status)
        return self._detail(tenant)

    @extend_schema(responses=TenantUserSerializer(many=True))
    @action(detail=True, methods=["get"])
    def users(self, request, pk=None):
        tenant = self.get_object()
        return Response(TenantUserSerializer(tenant.users.select_related("role").order_by("username"), many=True).data)

    @transaction.atomic
    def perform_destroy(self, instance):
        logger.warning("🗑️ Deleting tenant '%s' and all its data", instance.slug)
        instance.delete()

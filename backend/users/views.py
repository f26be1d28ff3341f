import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.mixins import EnvelopeMixin, TenantFilteredViewSet
from plans.limits import enforce_user_limit
from .models import UserRole
from .permissions import IsTenantOwnerOrAdmin
from .serializers import (
    AssignRoleSerializer,
    UserCreateSerializer,
    UserRoleSerializer,
    UserSerializer,
    UserUpdateSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


# ----------------------------------------------------------
#  User ViewSet
# ----------------------------------------------------------
class UserViewSet(TenantFilteredViewSet):
    queryset = User.objects.select_related("role", "tenant")
    serializer_class = UserSerializer

    search_fields = ("username", "email", "first_name", "last_name")
    filter_fields = ("role", "is_active")
    filter_lookups = {"role": "role__name"}
    sort_options = {
        "username": ("username", False),
        "newest": ("date_joined", True),
        "last_login": ("last_login", True),
    }
    default_sort = "username"

    def get_permissions(self):
        if self.action in ["list", "retrieve", "me"]:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsTenantOwnerOrAdmin()]

    def get_serializer_class(self):
        if self.action == "create":
            return UserCreateSerializer
        if self.action in ["update", "partial_update"]:
            return UserUpdateSerializer
        return UserSerializer

    @transaction.atomic
    def perform_create(self, serializer):
        tenant = self.get_tenant()
        if tenant is None:
            raise PermissionDenied("Users can only be created inside a tenant.")

        enforce_user_limit(tenant, serializer.validated_data["role"].name)
        user = serializer.save()
        logger.info("✅ User %s created in tenant '%s' as %s", user.username, tenant.slug, user.role_name)

    def perform_update(self, serializer):
        user = serializer.instance
        # Reactivating takes a seat back
        if serializer.validated_data.get("is_active") and not user.is_active and user.tenant and user.role:
            enforce_user_limit(user.tenant, user.role.name)
        serializer.save()

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise PermissionDenied("You cannot delete your own account.")
        instance.delete()

    @action(detail=False, methods=["get"])
    def me(self, request):
        return Response(UserSerializer(request.user).data)

    @extend_schema(request=AssignRoleSerializer, responses=UserSerializer)
    @action(detail=True, methods=["post"], url_path="assign-role")
    def assign_role(self, request, pk=None):
        user = self.get_object()
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = serializer.validated_data["role"]

        if user.role_id != role.id and user.tenant is not None:
            enforce_user_limit(user.tenant, role.name)

        user.role = role
        user.save(update_fields=["role"])
        logger.info("🔁 Role of %s changed to %s", user.username, role.name)
        return Response(UserSerializer(user).data)


# ----------------------------------------------------------
#  UserRole ViewSet
# ----------------------------------------------------------
class UserRoleViewSet(
    EnvelopeMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = UserRole.objects.all().order_by("id")
    serializer_class = UserRoleSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

import logging

from rest_framework import permissions
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from core.exceptions import Conflict
from core.mixins import TenantFilteredViewSet
from users.permissions import IsTenantOwnerOrAdmin, IsTrainerOrAbove
from .models import Integration, MessageTemplate
from .serializers import IntegrationSerializer, MessageTemplateSerializer, RenderTemplateSerializer
from .services import check_integration, require_provider_feature

logger = logging.getLogger(__name__)


# ============================================================
# INTEGRATIONS
# ============================================================
class IntegrationViewSet(TenantFilteredViewSet):
    """
    Provider credentials of the current tenant.
    - Owner & Admin: configure, toggle and test
    - Everyone else: no access (configs hold secrets)
    """
    queryset = Integration.all_objects.select_related("tenant")
    serializer_class = IntegrationSerializer
    permission_classes = [permissions.IsAuthenticated, IsTenantOwnerOrAdmin]

    search_fields = ("provider",)
    filter_fields = ("provider", "enabled", "status")
    sort_options = {
        "provider": ("provider", False),
        "tested": ("last_tested_at", True),
        "newest": ("created_at", True),
    }
    default_sort = "provider"

    def perform_create(self, serializer):
        tenant = self.get_tenant()
        provider = serializer.validated_data["provider"]
        if tenant is not None:
            require_provider_feature(tenant, provider)
            if Integration.all_objects.filter(tenant=tenant, provider=provider).exists():
                raise Conflict(f"The {provider} integration is already configured.")
        super().perform_create(serializer)
        logger.info("🔌 Integration %s added for tenant '%s'", provider, getattr(tenant, "slug", None))

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        integration = self.get_object()
        if not integration.enabled:
            require_provider_feature(integration.tenant, integration.provider)
        integration.enabled = not integration.enabled
        integration.save(update_fields=["enabled", "updated_at"])
        logger.info(
            "🔌 Integration %s of tenant '%s' %s",
            integration.provider, integration.tenant.slug, "enabled" if integration.enabled else "disabled",
        )
        return Response(self.get_serializer(integration).data)

    @action(detail=True, methods=["post"])
    def test(self, request, pk=None):
        integration = self.get_object()
        result = check_integration(integration, tested_by=request.user)
        return Response({**result, "integration": self.get_serializer(integration).data})


# ============================================================
# MESSAGE TEMPLATES
# ============================================================
class MessageTemplateViewSet(TenantFilteredViewSet):
    """
    WhatsApp templates of the current tenant.
    - Owner, Admin & Trainer: full CRUD
    - Member: read-only
    """
    queryset = MessageTemplate.all_objects.all()
    serializer_class = MessageTemplateSerializer

    search_fields = ("name", "content")
    filter_fields = ("category", "status", "language")
    sort_options = {
        "name": ("name", False),
        "newest": ("created_at", True),
        "oldest": ("created_at", False),
        "updated": ("updated_at", True),
    }
    default_sort = "name"

    def get_permissions(self):
        if self.action in ["list", "retrieve", "render_preview"]:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsTrainerOrAbove()]

    def _ensure_unique(self, tenant, name, language, exclude_pk=None):
        taken = MessageTemplate.all_objects.filter(tenant=tenant, name=name, language=language)
        if exclude_pk is not None:
            taken = taken.exclude(pk=exclude_pk)
        if taken.exists():
            raise Conflict(f"A template named '{name}' already exists for {language}.")

    def perform_create(self, serializer):
        tenant = self.get_tenant()
        if tenant is not None:
            require_provider_feature(tenant, "whatsapp")
            data = serializer.validated_data
            self._ensure_unique(tenant, data["name"], data.get("language", "pt_BR"))
        super().perform_create(serializer)

    def perform_update(self, serializer):
        template = serializer.instance
        data = serializer.validated_data
        self._ensure_unique(
            template.tenant,
            data.get("name", template.name),
            data.get("language", template.language),
            exclude_pk=template.pk,
        )
        # Edited templates go back through approval
        serializer.save(status="draft")

    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        template = self.get_object()
        if template.status not in ("draft", "rejected"):
            raise ValidationError("Only draft or rejected templates can be submitted for approval.")
        template.status = "pending"
        template.save(update_fields=["status", "updated_at"])
        logger.info("📨 Template '%s' submitted for approval", template.name)
        return Response(self.get_serializer(template).data)

    @action(detail=True, methods=["post"], url_path="render")
    def render_preview(self, request, pk=None):
        template = self.get_object()
        serializer = RenderTemplateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        values = serializer.validated_data["values"]
        missing = [name for name in template.variables if name not in values]
        return Response({"content": template.render(values), "missing_variables": missing})

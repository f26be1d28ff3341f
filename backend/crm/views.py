import logging

from django.db.models import Count, Q
from django.utils import timezone
from rest_framework import permissions
from rest_framework.decorators import action
from rest_framework.exceptions import MethodNotAllowed, ValidationError
from rest_framework.response import Response

from plans.limits import require_feature
from scheduling.views import ProfessionalScopedViewSet
from users.permissions import IsTenantOwnerOrAdmin, IsTrainerOrAbove
from .models import BioimpedanceMeasurement, ClientProfile, CRMAutomation, CRMTask
from .reports import bioimpedance_report
from .serializers import (
    BioimpedanceMeasurementSerializer,
    ClientProfileSerializer,
    CRMAutomationSerializer,
    CRMTaskSerializer,
)

logger = logging.getLogger(__name__)


class CRMViewSet(ProfessionalScopedViewSet):
    """
    CRM records need the 'crm' plan feature and are off limits to members.
    Trainers only see the clients they follow.
    """

    def get_permissions(self):
        return [permissions.IsAuthenticated(), IsTrainerOrAbove()]

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        require_feature(self.get_tenant(), "crm")


# ============================================================
# CLIENTS
# ============================================================
class ClientProfileViewSet(CRMViewSet):
    queryset = ClientProfile.all_objects.select_related("professional").annotate(
        open_tasks=Count("tasks", filter=Q(tasks__status="pending")),
    )
    serializer_class = ClientProfileSerializer

    search_fields = ("name", "email", "phone", "tags")
    filter_fields = ("status", "lead_source")
    sort_options = {
        "name": ("name", False),
        "newest": ("created_at", True),
        "last_contact": ("last_interaction_at", True),
        "open_tasks": ("open_tasks", True),
    }
    default_sort = "name"

    def perform_create(self, serializer):
        tenant = self.get_tenant()
        if tenant is None:
            return super().perform_create(serializer)
        serializer.save(tenant=tenant, professional=self.get_professional(serializer))
        logger.info("🧾 Client '%s' added to the CRM of tenant '%s'", serializer.instance.name, tenant.slug)

    def perform_update(self, serializer):
        if self.request.user.role_name == "trainer":
            serializer.save(professional=serializer.instance.professional)
        else:
            serializer.save()

    @action(detail=False, methods=["get"])
    def pipeline(self, request):
        qs = self.get_queryset()
        counts = {status: 0 for status, _ in ClientProfile.STATUS_CHOICES}
        for row in qs.values("status").annotate(total=Count("id")):
            counts[row["status"]] = row["total"]
        return Response({"total": sum(counts.values()), "by_status": counts})

    @action(detail=True, methods=["post"])
    def contact(self, request, pk=None):
        """Record a contact with the client; an at-risk client becomes active again."""
        client = self.get_object()
        client.last_interaction_at = timezone.now()
        fields = ["last_interaction_at", "updated_at"]
        if client.status == "at_risk":
            client.status = "active"
            fields.append("status")
        client.save(update_fields=fields)
        return Response(self.get_serializer(client).data)

    @action(detail=True, methods=["get"])
    def bioimpedance(self, request, pk=None):
        client = self.get_object()
        measurements = BioimpedanceMeasurement.all_objects.filter(client=client)
        return Response(bioimpedance_report(client, list(measurements)))


# ============================================================
# TASKS
# ============================================================
class CRMTaskViewSet(CRMViewSet):
    queryset = CRMTask.all_objects.select_related("client")
    serializer_class = CRMTaskSerializer
    professional_lookup = "client__professional"

    search_fields = ("title", "description", "client__name")
    filter_fields = ("status", "priority", "task_type", "client", "automated")
    sort_options = {
        "due": ("due_date", False),
        "due_desc": ("due_date", True),
        "newest": ("created_at", True),
    }
    default_sort = "due"

    def perform_create(self, serializer):
        client = serializer.validated_data["client"]
        user = self.request.user
        if user.role_name == "trainer" and client.professional_id != user.id:
            raise ValidationError({"client_id": "Client not found."})
        serializer.save(tenant=client.tenant)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        task = self.get_object()
        if task.status != "pending":
            raise ValidationError("Only pending tasks can be completed.")
        now = timezone.now()
        task.status = "completed"
        task.completed_at = now
        task.save(update_fields=["status", "completed_at", "updated_at"])
        task.client.last_interaction_at = now
        task.client.save(update_fields=["last_interaction_at", "updated_at"])
        logger.info("✅ CRM task %s completed", task.id)
        return Response(self.get_serializer(task).data)


# ============================================================
# AUTOMATIONS
# ============================================================
class CRMAutomationViewSet(CRMViewSet):
    """
    One row per built-in automation and tenant, created on first listing.
    Owners and admins switch them on and off; nothing is created or deleted.
    """
    queryset = CRMAutomation.all_objects.select_related("tenant")
    serializer_class = CRMAutomationSerializer
    http_method_names = ["get", "patch", "post", "head", "options"]

    filter_fields = ("enabled",)
    sort_options = {"key": ("key", False)}
    default_sort = "key"

    def get_permissions(self):
        return [permissions.IsAuthenticated(), IsTenantOwnerOrAdmin()]

    def get_queryset(self):
        # trainers are refused by the permissions; no per-professional scoping here
        return super(ProfessionalScopedViewSet, self).get_queryset()

    def list(self, request, *args, **kwargs):
        tenant = self.get_tenant()
        if tenant is not None:
            for key, _ in CRMAutomation.KEY_CHOICES:
                CRMAutomation.all_objects.get_or_create(tenant=tenant, key=key)
        return super().list(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):
        raise MethodNotAllowed(request.method)

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        automation = self.get_object()
        automation.enabled = not automation.enabled
        automation.save(update_fields=["enabled", "updated_at"])
        logger.info(
            "🤖 CRM automation %s of tenant '%s' %s",
            automation.key, automation.tenant.slug, "enabled" if automation.enabled else "disabled",
        )
        return Response(self.get_serializer(automation).data)


# ============================================================
# BIOIMPEDANCE
# ============================================================
class BioimpedanceMeasurementViewSet(CRMViewSet):
    queryset = BioimpedanceMeasurement.all_objects.select_related("client")
    serializer_class = BioimpedanceMeasurementSerializer
    professional_lookup = "client__professional"

    search_fields = ("client__name", "equipment", "notes")
    filter_fields = ("client",)
    sort_options = {
        "newest": ("measured_at", True),
        "oldest": ("measured_at", False),
    }
    default_sort = "newest"

    def perform_create(self, serializer):
        client = serializer.validated_data["client"]
        user = self.request.user
        if user.role_name == "trainer" and client.professional_id != user.id:
            raise ValidationError({"client_id": "Client not found."})
        serializer.save(tenant=client.tenant)
        logger.info("📏 Bioimpedance measurement recorded for client %s", client.id)

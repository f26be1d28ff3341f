import logging

from rest_framework import permissions
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from core.exceptions import Conflict
from core.mixins import TenantFilteredViewSet
from users.permissions import IsTrainerOrAbove
from .models import Appointment, AppointmentReminder, AvailabilitySlot
from .serializers import (
    AppointmentReminderSerializer,
    AppointmentSerializer,
    AvailabilitySlotSerializer,
)

logger = logging.getLogger(__name__)

READ_ACTIONS = ["list", "retrieve"]


class ProfessionalScopedViewSet(TenantFilteredViewSet):
    """
    Trainers only see and manage their own records; owners and admins see
    the whole tenant. Writes need trainer or above.
    """
    professional_lookup = "professional"

    def get_permissions(self):
        if self.action in READ_ACTIONS:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsTrainerOrAbove()]

    def get_queryset(self):
        qs = super().get_queryset()
        user = self.request.user
        if getattr(user, "role_name", None) == "trainer":
            qs = qs.filter(**{self.professional_lookup: user})
        return qs

    def get_professional(self, serializer):
        user = self.request.user
        professional = serializer.validated_data.get("professional")
        if professional is None or user.role_name == "trainer":
            return user
        return professional


# ============================================================
# APPOINTMENTS
# ============================================================
class AppointmentViewSet(ProfessionalScopedViewSet):
    queryset = Appointment.all_objects.select_related("professional")
    serializer_class = AppointmentSerializer

    search_fields = ("title", "client_name", "client_email")
    filter_fields = ("status",)
    sort_options = {
        "date": ("scheduled_at", False),
        "date_desc": ("scheduled_at", True),
        "client": ("client_name", False),
    }
    default_sort = "date"

    def perform_create(self, serializer):
        tenant = self.get_tenant()
        if tenant is None:
            return super().perform_create(serializer)
        serializer.save(tenant=tenant, professional=self.get_professional(serializer))
        logger.info("📅 Appointment %s booked for tenant '%s'", serializer.instance.id, tenant.slug)

    def perform_update(self, serializer):
        appointment = serializer.save()
        # Moving an appointment moves its reminders with it
        if "scheduled_at" in serializer.validated_data:
            for reminder in appointment.reminders.all():
                reminder.appointment = appointment
                reminder.save(update_fields=["scheduled_for", "updated_at"])


# ============================================================
# AVAILABILITY
# ============================================================
class AvailabilitySlotViewSet(ProfessionalScopedViewSet):
    queryset = AvailabilitySlot.all_objects.select_related("professional")
    serializer_class = AvailabilitySlotSerializer

    filter_fields = ("day_of_week", "is_active")
    sort_options = {
        "day": ("day_of_week", False),
        "start": ("start_time", False),
    }
    default_sort = "day"
    items_per_page = 50

    def _ensure_free_day(self, professional, day_of_week, exclude_pk=None):
        taken = AvailabilitySlot.all_objects.filter(professional=professional, day_of_week=day_of_week)
        if exclude_pk is not None:
            taken = taken.exclude(pk=exclude_pk)
        if taken.exists():
            logger.warning("⚠️ Availability conflict for %s on day %s", professional.username, day_of_week)
            raise Conflict("Availability already exists for this day of the week.")

    def perform_create(self, serializer):
        tenant = self.get_tenant()
        if tenant is None:
            return super().perform_create(serializer)
        professional = self.get_professional(serializer)
        self._ensure_free_day(professional, serializer.validated_data["day_of_week"])
        serializer.save(tenant=tenant, professional=professional)

    def perform_update(self, serializer):
        slot = serializer.instance
        professional = serializer.validated_data.get("professional", slot.professional)
        if self.request.user.role_name == "trainer":
            professional = slot.professional
        day = serializer.validated_data.get("day_of_week", slot.day_of_week)
        self._ensure_free_day(professional, day, exclude_pk=slot.pk)
        serializer.save(professional=professional)


# ============================================================
# REMINDERS
# ============================================================
class AppointmentReminderViewSet(ProfessionalScopedViewSet):
    """
    Reminders are only recorded here; delivering them is handled elsewhere.
    `resend` puts a reminder back in the pending queue.
    """
    queryset = AppointmentReminder.all_objects.select_related("appointment")
    serializer_class = AppointmentReminderSerializer
    professional_lookup = "appointment__professional"

    search_fields = ("message", "appointment__title", "appointment__client_name")
    filter_fields = ("status", "reminder_type", "enabled", "appointment")
    sort_options = {
        "scheduled": ("scheduled_for", False),
        "scheduled_desc": ("scheduled_for", True),
        "newest": ("created_at", True),
    }
    default_sort = "scheduled_desc"

    def _ensure_unique_type(self, appointment, reminder_type, exclude_pk=None):
        taken = AppointmentReminder.all_objects.filter(appointment=appointment, reminder_type=reminder_type)
        if exclude_pk is not None:
            taken = taken.exclude(pk=exclude_pk)
        if taken.exists():
            raise Conflict("A reminder of this type already exists for this appointment.")

    def perform_create(self, serializer):
        appointment = serializer.validated_data["appointment"]
        if self.request.user.role_name == "trainer" and appointment.professional_id != self.request.user.id:
            raise PermissionDenied("You can only add reminders to your own appointments.")
        self._ensure_unique_type(appointment, serializer.validated_data["reminder_type"])
        serializer.save(tenant=appointment.tenant)

    def perform_update(self, serializer):
        reminder = serializer.instance
        appointment = serializer.validated_data.get("appointment", reminder.appointment)
        reminder_type = serializer.validated_data.get("reminder_type", reminder.reminder_type)
        self._ensure_unique_type(appointment, reminder_type, exclude_pk=reminder.pk)
        serializer.save()

    @action(detail=True, methods=["post"])
    def resend(self, request, pk=None):
        reminder = self.get_object()
        reminder.status = "pending"
        reminder.sent_at = None
        reminder.save(update_fields=["status", "sent_at", "scheduled_for", "updated_at"])
        logger.info("🔁 Reminder %s queued again", reminder.id)
        return Response(self.get_serializer(reminder).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        reminder = self.get_object()
        reminder.status = "cancelled"
        reminder.save(update_fields=["status", "scheduled_for", "updated_at"])
        return Response(self.get_serializer(reminder).data)

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Appointment, AppointmentReminder, AvailabilitySlot

User = get_user_model()


class TenantUserField(serializers.PrimaryKeyRelatedField):
    """A user of the requesting user's tenant."""

    def get_queryset(self):
        request = self.context.get("request")
        tenant_id = getattr(getattr(request, "user", None), "tenant_id", None)
        if tenant_id is None:
            tenant_id = getattr(getattr(request, "tenant", None), "id", None)
        return User.objects.filter(tenant_id=tenant_id, is_active=True)


class AppointmentSerializer(serializers.ModelSerializer):
    professional_id = TenantUserField(source="professional", write_only=True, required=False)
    professional = serializers.CharField(source="professional.username", read_only=True)
    ends_at = serializers.DateTimeField(read_only=True)

    class Meta:
        model = Appointment
        fields = [
            "id", "professional", "professional_id", "client_name", "client_email",
            "title", "description", "scheduled_at", "duration_minutes", "ends_at",
            "status", "tenant", "created_at", "updated_at",
        ]
        read_only_fields = ["tenant", "created_at", "updated_at"]


class AvailabilitySlotSerializer(serializers.ModelSerializer):
    professional_id = TenantUserField(source="professional", write_only=True, required=False)
    professional = serializers.CharField(source="professional.username", read_only=True)
    day_name = serializers.CharField(source="get_day_of_week_display", read_only=True)
    start_time = serializers.TimeField(format="%H:%M", input_formats=["%H:%M"])
    end_time = serializers.TimeField(format="%H:%M", input_formats=["%H:%M"])

    class Meta:
        model = AvailabilitySlot
        fields = [
            "id", "professional", "professional_id", "day_of_week", "day_name",
            "start_time", "end_time", "is_active", "created_at", "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]
        # one slot per professional and day is reported as a conflict by the view
        validators = []

    def validate(self, attrs):
        start = attrs.get("start_time", getattr(self.instance, "start_time", None))
        end = attrs.get("end_time", getattr(self.instance, "end_time", None))
        if start is not None and end is not None and end <= start:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})
        return attrs


class AppointmentReminderSerializer(serializers.ModelSerializer):
    appointment_id = serializers.PrimaryKeyRelatedField(
        queryset=Appointment.all_objects.all(),
        source="appointment",
        write_only=True,
    )
    appointment = serializers.PrimaryKeyRelatedField(read_only=True)
    custom_hours = serializers.IntegerField(min_value=0, max_value=168, required=False)
    custom_minutes = serializers.IntegerField(min_value=0, max_value=59, required=False)

    class Meta:
        model = AppointmentReminder
        fields = [
            "id", "appointment", "appointment_id", "reminder_type", "custom_hours",
            "custom_minutes", "message", "enabled", "status", "scheduled_for",
            "sent_at", "created_at", "updated_at",
        ]
        read_only_fields = ["status", "scheduled_for", "sent_at", "created_at", "updated_at"]
        validators = []

    def validate_appointment_id(self, appointment):
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user is not None and user.tenant_id and appointment.tenant_id != user.tenant_id:
            raise serializers.ValidationError("Appointment not found.")
        return appointment

    def validate(self, attrs):
        reminder_type = attrs.get("reminder_type", getattr(self.instance, "reminder_type", None))
        if reminder_type == "custom":
            hours = attrs.get("custom_hours", getattr(self.instance, "custom_hours", 0))
            minutes = attrs.get("custom_minutes", getattr(self.instance, "custom_minutes", 0))
            if not hours and not minutes:
                raise serializers.ValidationError(
                    {"custom_hours": "A custom reminder needs an offset in hours or minutes."}
                )
        return attrs

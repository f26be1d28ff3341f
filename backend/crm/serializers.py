from django.utils import timezone
from rest_framework import serializers

from scheduling.serializers import TenantUserField
from .models import BioimpedanceMeasurement, ClientProfile, CRMAutomation, CRMTask


class TenantClientField(serializers.PrimaryKeyRelatedField):
    """A client profile of the requesting user's tenant."""

    def get_queryset(self):
        request = self.context.get("request")
        tenant_id = getattr(getattr(request, "user", None), "tenant_id", None)
        if tenant_id is None:
            tenant_id = getattr(getattr(request, "tenant", None), "id", None)
        return ClientProfile.all_objects.filter(tenant_id=tenant_id)


class ClientProfileSerializer(serializers.ModelSerializer):
    member_id = TenantUserField(source="member", write_only=True, required=False, allow_null=True)
    professional_id = TenantUserField(source="professional", write_only=True, required=False, allow_null=True)
    professional = serializers.CharField(source="professional.username", read_only=True, default=None)
    tags = serializers.ListField(child=serializers.CharField(max_length=40), required=False)
    open_tasks = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = ClientProfile
        fields = [
            "id", "name", "email", "phone", "member", "member_id", "professional", "professional_id",
            "status", "lead_source", "tags", "notes", "last_interaction_at", "open_tasks",
            "created_at", "updated_at",
        ]
        read_only_fields = ["member", "last_interaction_at", "created_at", "updated_at"]

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_tags(self, value):
        # trimmed, lowercased, no duplicates, first occurrence wins
        tags = []
        for tag in value:
            tag = tag.strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class CRMTaskSerializer(serializers.ModelSerializer):
    client_id = TenantClientField(source="client", write_only=True)
    client = serializers.CharField(source="client.name", read_only=True)
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = CRMTask
        fields = [
            "id", "client", "client_id", "title", "description", "task_type", "priority",
            "status", "due_date", "completed_at", "automated", "is_overdue",
            "created_at", "updated_at",
        ]
        read_only_fields = ["completed_at", "automated", "created_at", "updated_at"]

    def get_is_overdue(self, obj):
        return obj.status == "pending" and obj.due_date < timezone.now()


class CRMAutomationSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="get_key_display", read_only=True)

    class Meta:
        model = CRMAutomation
        fields = ["id", "key", "name", "enabled", "inactivity_days", "last_run_at", "created_at", "updated_at"]
        read_only_fields = ["key", "last_run_at", "created_at", "updated_at"]


class BioimpedanceMeasurementSerializer(serializers.ModelSerializer):
    client_id = TenantClientField(source="client", write_only=True)
    client = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = BioimpedanceMeasurement
        fields = [
            "id", "client", "client_id", "measured_at", "weight", "height", "body_fat_percentage",
            "skeletal_muscle_mass", "visceral_fat_level", "basal_metabolic_rate", "bmi",
            "equipment", "notes", "created_at", "updated_at",
        ]
        read_only_fields = ["bmi", "created_at", "updated_at"]

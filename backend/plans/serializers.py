from rest_framework import serializers

from plans.constants import ROLES, UNLIMITED
from plans.models import PlanConfig


def _validate_limits(value):
    if not isinstance(value, dict):
        raise serializers.ValidationError("Limits must be an object of role -> seats.")
    cleaned = {}
    for role, seats in value.items():
        if role not in ROLES:
            raise serializers.ValidationError(f"Unknown role '{role}'.")
        try:
            seats = int(seats)
        except (TypeError, ValueError):
            raise serializers.ValidationError(f"Limit for '{role}' must be a number.")
        if seats < UNLIMITED:
            raise serializers.ValidationError(f"Limit for '{role}' must be -1 (unlimited) or more.")
        cleaned[role] = seats
    return cleaned


def _validate_prices(value):
    if not isinstance(value, dict):
        raise serializers.ValidationError("Extra slot prices must be an object of role -> price.")
    field = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    return {role: str(field.to_internal_value(price)) for role, price in value.items()}


def _validate_features(value):
    if not isinstance(value, dict):
        raise serializers.ValidationError("Features must be an object of feature -> bool.")
    return {name: bool(enabled) for name, enabled in value.items()}


class PlanConfigSerializer(serializers.ModelSerializer):
    tenant_name = serializers.CharField(source="tenant.name", read_only=True, default=None)

    class Meta:
        model = PlanConfig
        fields = [
            "id", "plan", "display_name", "tenant_type", "is_custom", "tenant", "tenant_name",
            "limits", "price", "extra_slot_price", "features", "contract_terms",
            "is_active", "created_by", "created_at", "updated_at",
        ]
        read_only_fields = ["is_custom", "tenant", "created_by", "created_at", "updated_at"]

    def validate_limits(self, value):
        return _validate_limits(value)

    def validate_extra_slot_price(self, value):
        return _validate_prices(value)

    def validate_features(self, value):
        return _validate_features(value)


class CustomPlanCreateSerializer(serializers.Serializer):
    tenant_id = serializers.IntegerField()
    display_name = serializers.CharField(max_length=150)
    limits = serializers.JSONField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    extra_slot_price = serializers.JSONField(required=False, default=dict)
    features = serializers.JSONField(required=False, default=dict)
    contract_terms = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_display_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Display name cannot be blank.")
        return value.strip()

    def validate_limits(self, value):
        return _validate_limits(value)

    def validate_extra_slot_price(self, value):
        return _validate_prices(value)

    def validate_features(self, value):
        return _validate_features(value)


class CustomPlanUpdateSerializer(CustomPlanCreateSerializer):
    tenant_id = None
    display_name = serializers.CharField(max_length=150, required=False)
    limits = serializers.JSONField(required=False)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    extra_slot_price = serializers.JSONField(required=False)
    features = serializers.JSONField(required=False)
    contract_terms = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


class DuplicatePlanSerializer(serializers.Serializer):
    base_plan = serializers.CharField()
    tenant_id = serializers.IntegerField()


class AssignPlanSerializer(serializers.Serializer):
    tenant_id = serializers.IntegerField()


class CustomPlanStatsSerializer(serializers.Serializer):
    plan = PlanConfigSerializer()
    tenant_count = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)

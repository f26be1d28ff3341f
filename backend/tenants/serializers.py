from django.db import transaction
from rest_framework import serializers

from plans.constants import ROLES
from plans.limits import get_enabled_features, get_plan_limits, get_user_count_by_role
from users.models import User, UserRole
from .models import Tenant


class TenantSerializer(serializers.ModelSerializer):
    has_custom_plan = serializers.SerializerMethodField()
    custom_plan_name = serializers.CharField(source="custom_plan.display_name", read_only=True, default=None)
    user_count = serializers.SerializerMethodField()

    class Meta:
        model = Tenant
        fields = [
            "id", "name", "slug", "tenant_type", "subdomain", "plan", "custom_plan",
            "custom_plan_name", "has_custom_plan", "extra_slots", "enabled_features",
            "status", "user_count", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_has_custom_plan(self, obj):
        return obj.custom_plan_id is not None

    def get_user_count(self, obj):
        annotated = getattr(obj, "user_total", None)
        return annotated if annotated is not None else obj.users.count()


class TenantDetailSerializer(TenantSerializer):
    stats = serializers.SerializerMethodField()

    class Meta(TenantSerializer.Meta):
        fields = TenantSerializer.Meta.fields + ["stats"]
        read_only_fields = fields

    def get_stats(self, obj):
        return {
            "user_counts": get_user_count_by_role(obj),
            "limits": get_plan_limits(obj),
            "features": get_enabled_features(obj),
            "is_custom_plan": obj.custom_plan_id is not None,
        }


class TenantRegistrationSerializer(serializers.Serializer):
    tenant_name = serializers.CharField(max_length=200)
    tenant_type = serializers.ChoiceField(
        choices=[Tenant.TYPE_INDIVIDUAL, Tenant.TYPE_BUSINESS],
        default=Tenant.TYPE_BUSINESS,
    )
    subdomain = serializers.SlugField(max_length=63, required=False, allow_blank=True)
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    first_name = serializers.CharField(required=False, allow_blank=True)
    last_name = serializers.CharField(required=False, allow_blank=True)

    def validate_tenant_name(self, value):
        if Tenant.objects.filter(name__iexact=value).exists():
            raise serializers.ValidationError("Tenant with this name already exists.")
        return value

    def validate_subdomain(self, value):
        if value and Tenant.objects.filter(subdomain=value).exists():
            raise serializers.ValidationError("Subdomain is already in use.")
        return value

    def validate(self, attrs):
        if attrs.get("tenant_type") == Tenant.TYPE_INDIVIDUAL:
            attrs["subdomain"] = None
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        from users.serializers import UserCreateSerializer

        # 1️⃣ Create tenant
        tenant = Tenant.objects.create(
            name=validated_data["tenant_name"],
            tenant_type=validated_data["tenant_type"],
            subdomain=validated_data.get("subdomain") or None,
        )

        # 2️⃣ Create the owner for this tenant
        user_serializer = UserCreateSerializer(
            data={
                "username": validated_data["username"],
                "email": validated_data["email"],
                "password": validated_data["password"],
                "first_name": validated_data.get("first_name", ""),
                "last_name": validated_data.get("last_name", ""),
                "role": UserRole.OWNER,
            },
            context={"tenant": tenant},
        )
        user_serializer.is_valid(raise_exception=True)
        owner = user_serializer.save()

        return {"tenant": tenant, "owner": owner}


# ----------------------------------------------------------
#  Super-admin actions
# ----------------------------------------------------------
class ChangePlanSerializer(serializers.Serializer):
    plan = serializers.CharField(required=False)
    custom_plan_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs.get("plan") and attrs.get("custom_plan_id") is None:
            raise serializers.ValidationError("Provide a base plan or a custom_plan_id.")
        return attrs


class ExtraSlotsSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLES)
    quantity = serializers.IntegerField(min_value=1)


class FeaturesSerializer(serializers.Serializer):
    features = serializers.DictField(child=serializers.BooleanField())


class ConvertTypeSerializer(serializers.Serializer):
    tenant_type = serializers.ChoiceField(choices=[Tenant.TYPE_BUSINESS])
    subdomain = serializers.SlugField(max_length=63)


class TenantStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Tenant.STATUS_CHOICES)


class TenantUserSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source="role.name", read_only=True, default=None)

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "role", "is_active", "last_login", "date_joined"]
        read_only_fields = fields

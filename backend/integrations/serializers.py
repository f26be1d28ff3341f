from rest_framework import serializers

from .models import PROVIDER_REQUIRED_KEYS, Integration, MessageTemplate


def mask_secret(value):
    value = str(value or "")
    if len(value) <= 4:
        return "••••" if value else ""
    return "••••" + value[-4:]


class IntegrationSerializer(serializers.ModelSerializer):
    provider_name = serializers.CharField(source="get_provider_display", read_only=True)
    required_keys = serializers.SerializerMethodField()
    missing_keys = serializers.SerializerMethodField()

    class Meta:
        model = Integration
        fields = [
            "id", "provider", "provider_name", "enabled", "config", "status",
            "required_keys", "missing_keys", "last_tested_at", "last_error",
            "created_at", "updated_at",
        ]
        read_only_fields = ["status", "last_tested_at", "last_error", "created_at", "updated_at"]
        # duplicates are reported as a conflict by the view
        validators = []

    def get_required_keys(self, obj):
        return list(obj.required_keys)

    def get_missing_keys(self, obj):
        return obj.missing_keys()

    def validate_config(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Config must be an object.")
        return value

    def validate_provider(self, value):
        if self.instance is not None and value != self.instance.provider:
            raise serializers.ValidationError("The provider of an integration cannot be changed.")
        return value

    def update(self, instance, validated_data):
        # Partial config updates merge into what is stored
        config = validated_data.pop("config", None)
        if config is not None:
            stored = dict(instance.config or {})
            secrets = PROVIDER_REQUIRED_KEYS.get(instance.provider, ())
            merged = dict(stored)
            for key, value in config.items():
                # a masked value read back from the API keeps the stored secret
                if key in secrets and key in stored and value == mask_secret(stored[key]):
                    continue
                merged[key] = value
            instance.config = merged
            instance.status = "not_configured"
        return super().update(instance, validated_data)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        secrets = PROVIDER_REQUIRED_KEYS.get(instance.provider, ())
        data["config"] = {
            key: mask_secret(value) if key in secrets else value
            for key, value in (instance.config or {}).items()
        }
        return data


class MessageTemplateSerializer(serializers.ModelSerializer):
    variables = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = MessageTemplate
        fields = [
            "id", "name", "category", "language", "content", "variables",
            "status", "created_at", "updated_at",
        ]
        read_only_fields = ["status", "created_at", "updated_at"]
        validators = []

    def validate_name(self, value):
        value = value.strip().lower().replace(" ", "_")
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value


class RenderTemplateSerializer(serializers.Serializer):
    values = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False, default=dict)

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import UserRole

User = get_user_model()

# ===========================
# USER SERIALIZERS
# ===========================

class UserSerializer(serializers.ModelSerializer):
    role = serializers.SlugRelatedField(slug_field="name", read_only=True)
    tenant = serializers.SlugRelatedField(slug_field="slug", read_only=True)
    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'full_name',
            'role',
            'tenant',
            'is_active',
            'last_login',
            'date_joined',
        ]
        read_only_fields = ['id', 'role', 'tenant', 'last_login', 'date_joined']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password]
    )

    role = serializers.SlugRelatedField(
        slug_field='name',
        queryset=UserRole.objects.all(),
    )

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'password',
            'first_name',
            'last_name',
            'role',
        ]

    def _resolve_tenant(self):
        tenant = self.context.get('tenant', None)
        request = self.context.get('request', None)

        if (
            tenant is None
            and request is not None
            and getattr(request, "user", None)
            and request.user.is_authenticated
        ):
            tenant = getattr(request.user, "tenant", None)

        if tenant is None and request is not None:
            tenant = getattr(request, "tenant", None)

        return tenant

    def validate(self, attrs):
        tenant = self._resolve_tenant()
        email = attrs.get("email")

        if email:
            if User.objects.filter(email__iexact=email, tenant=tenant).exists():
                raise serializers.ValidationError(
                    {"email": "A user with that email already exists in this tenant."}
                )
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        tenant = self._resolve_tenant()

        user = User(tenant=tenant, **validated_data)
        user.set_password(password)
        user.save()
        return user


class UserUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'email', 'is_active']


# ===========================
# ROLES
# ===========================

class UserRoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserRole
        fields = ['id', 'name', 'description']


class AssignRoleSerializer(serializers.Serializer):
    role = serializers.SlugRelatedField(
        slug_field="name",
        queryset=UserRole.objects.all(),
        help_text="Role name to assign (owner, admin, trainer, member).",
    )

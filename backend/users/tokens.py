from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.mixins import EnvelopeMixin


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        # Add tenant data to token payload if available
        tenant = getattr(user, "tenant", None)
        if tenant:
            token["tenant_id"] = tenant.id
            token["tenant_slug"] = tenant.slug
        token["role"] = user.role_name
        token["is_super_admin"] = user.is_super_admin
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        user = self.user
        tenant = getattr(user, "tenant", None)
        data["user"] = {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "role": user.role_name,
            "is_super_admin": user.is_super_admin,
            "tenant_id": tenant.id if tenant else None,
            "tenant_slug": tenant.slug if tenant else None,
        }
        return data


class CustomTokenObtainPairView(EnvelopeMixin, TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshView(EnvelopeMixin, TokenRefreshView):
    pass

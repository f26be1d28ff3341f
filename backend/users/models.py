from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="users",
        null=True,
        blank=True,
    )

    role = models.ForeignKey(
        "users.UserRole",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "email"],
                name="unique_tenant_email",
            ),
        ]

    @property
    def is_super_admin(self):
        """Platform operator: a superuser that belongs to no tenant."""
        return self.is_superuser and not self.tenant_id

    @property
    def role_name(self):
        return self.role.name if self.role_id else None

    def __str__(self):
        return f"{self.username} ({self.tenant})" if self.tenant else self.username


# ========================
# BUILT-IN ROLE MODEL
# ========================

class UserRole(models.Model):
    """
    One of the four fixed seat types. Plan limits are counted per role.
    Tenants cannot create or edit these roles.
    """
    OWNER = "owner"
    ADMIN = "admin"
    TRAINER = "trainer"
    MEMBER = "member"
    ROLE_CHOICES = [
        (OWNER, "Owner"),
        (ADMIN, "Admin"),
        (TRAINER, "Trainer"),
        (MEMBER, "Member"),
    ]

    name = models.CharField(max_length=50, choices=ROLE_CHOICES, unique=True, default=MEMBER)
    description = models.TextField(blank=True, null=True)

    def __str__(self):
        return dict(self.ROLE_CHOICES).get(self.name, self.name)

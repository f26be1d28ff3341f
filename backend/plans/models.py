from django.conf import settings
from django.db import models


class PlanConfig(models.Model):
    """
    A priced bundle of per-role seat limits and features.

    Base plans (is_custom=False) are shared by every tenant of a tenant_type
    and are unique per (plan, tenant_type). Custom plans belong to one
    business tenant and are assigned to it through Tenant.custom_plan.
    """
    TENANT_TYPES = [
        ("individual", "Individual"),
        ("business", "Business"),
    ]

    plan = models.SlugField(max_length=100)
    display_name = models.CharField(max_length=150)
    tenant_type = models.CharField(max_length=20, choices=TENANT_TYPES, default="business")
    is_custom = models.BooleanField(default=False)
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="custom_plans",
    )

    # role -> seats, -1 = unlimited
    limits = models.JSONField(default=dict)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0, help_text="Monthly price")
    # role -> price of one extra seat
    extra_slot_price = models.JSONField(default=dict, blank=True)
    # feature -> bool
    features = models.JSONField(default=dict, blank=True)
    contract_terms = models.TextField(blank=True)

    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_plans",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["plan", "tenant_type"],
                condition=models.Q(is_custom=False),
                name="unique_base_plan_per_tenant_type",
            ),
        ]

    def __str__(self):
        kind = "custom" if self.is_custom else self.tenant_type
        return f"{self.display_name} ({kind})"

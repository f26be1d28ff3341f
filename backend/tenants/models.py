from django.db import models
from django.utils.text import slugify


class Tenant(models.Model):
    """
    A FitOS customer account: a single professional (individual), a gym or
    studio (business), or the platform itself (system).
    Seat limits and features come from the base plan named by `plan`
    unless a custom plan is assigned.
    """
    TYPE_INDIVIDUAL = "individual"
    TYPE_BUSINESS = "business"
    TYPE_SYSTEM = "system"
    TENANT_TYPES = [
        (TYPE_INDIVIDUAL, "Individual"),
        (TYPE_BUSINESS, "Business"),
        (TYPE_SYSTEM, "System"),
    ]

    STATUS_ACTIVE = "active"
    STATUS_SUSPENDED = "suspended"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_SUSPENDED, "Suspended"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    DEFAULT_PLAN_BY_TYPE = {
        TYPE_INDIVIDUAL: "individual",
        TYPE_BUSINESS: "starter",
        TYPE_SYSTEM: "enterprise",
    }

    name = models.CharField(max_length=200, unique=True)
    slug = models.SlugField(max_length=100, unique=True)
    tenant_type = models.CharField(max_length=20, choices=TENANT_TYPES, default=TYPE_BUSINESS)
    subdomain = models.CharField(max_length=63, unique=True, null=True, blank=True)

    plan = models.CharField(max_length=50, blank=True)
    custom_plan = models.ForeignKey(
        "plans.PlanConfig",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_tenants",
    )
    # role -> extra seats bought on top of the plan
    extra_slots = models.JSONField(default=dict, blank=True)
    # feature -> bool overrides on top of the plan
    enabled_features = models.JSONField(default=dict, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        if not self.plan:
            self.plan = self.DEFAULT_PLAN_BY_TYPE.get(self.tenant_type, "starter")
        if self.subdomain == "":
            self.subdomain = None
        super().save(*args, **kwargs)

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    @property
    def is_individual(self):
        return self.tenant_type == self.TYPE_INDIVIDUAL

    @property
    def is_system(self):
        return self.tenant_type == self.TYPE_SYSTEM

    def __str__(self):
        return self.name

from django.db import models
from .managers import TenantManager


class TenantAwareModel(models.Model):
    tenant = models.ForeignKey("tenants.Tenant", on_delete=models.CASCADE)

    objects = TenantManager()
    # Unscoped access: views, Celery tasks and the admin filter explicitly
    all_objects = models.Manager()

    class Meta:
        abstract = True


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

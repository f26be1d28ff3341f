import logging
import time

from django.db import transaction
from django.db.models import Q
from django.utils.http import int_to_base36
from django.utils.text import slugify
from rest_framework.exceptions import NotFound, ValidationError

from core.exceptions import Conflict
from core.query import filter_queryset, paginate
from plans.models import PlanConfig

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("display_name", "limits", "price", "extra_slot_price", "features", "contract_terms", "is_active")


def generate_plan_slug(tenant_name):
    """`<tenant-name>-<base36 ms timestamp>`, e.g. `iron-gym-lx3k9q1c`."""
    return f"{slugify(tenant_name)}-{int_to_base36(int(time.time() * 1000))}"


class CustomPlanService:
    """Lifecycle of the per-tenant plans the super-admin negotiates."""

    @staticmethod
    def _get_tenant(tenant_id):
        from tenants.models import Tenant

        try:
            return Tenant.objects.get(pk=tenant_id)
        except (Tenant.DoesNotExist, ValueError, TypeError):
            raise NotFound("Tenant not found.")

    @staticmethod
    def _get_plan(plan_id):
        try:
            return PlanConfig.objects.get(pk=plan_id)
        except (PlanConfig.DoesNotExist, ValueError, TypeError):
            raise NotFound("Plan not found.")

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    @classmethod
    def validate_creation(cls, tenant_id):
        """Return (can_create, reason)."""
        from tenants.models import Tenant

        tenant = Tenant.objects.filter(pk=tenant_id).first()
        if tenant is None:
            return False, "Tenant not found."
        if tenant.is_individual:
            return False, "Individual tenants cannot have custom plans."
        if PlanConfig.objects.filter(tenant=tenant, is_custom=True, is_active=True).exists():
            return False, "Tenant already has an active custom plan."
        return True, None

    @classmethod
    def create(cls, *, tenant_id, display_name, limits, price, extra_slot_price=None,
               features=None, contract_terms="", created_by=None):
        can_create, reason = cls.validate_creation(tenant_id)
        if not can_create:
            logger.warning("⚠️ Custom plan refused for tenant %s: %s", tenant_id, reason)
            raise ValidationError(reason)

        tenant = cls._get_tenant(tenant_id)
        plan = PlanConfig.objects.create(
            plan=generate_plan_slug(tenant.name),
            display_name=display_name,
            tenant_type=tenant.tenant_type,
            tenant=tenant,
            is_custom=True,
            limits=dict(limits),
            price=price,
            extra_slot_price=dict(extra_slot_price or {}),
            features=dict(features or {}),
            contract_terms=contract_terms or "",
            created_by=created_by,
            is_active=True,
        )
        logger.info("✅ Created custom plan %s (%s) for tenant '%s'", plan.id, plan.plan, tenant.slug)
        return plan

    @classmethod
    def duplicate_base(cls, *, base_plan, tenant_id, created_by=None):
        """Copy an active base plan of the tenant's type into a new custom plan."""
        tenant = cls._get_tenant(tenant_id)
        base = PlanConfig.objects.filter(
            plan=base_plan,
            tenant_type=tenant.tenant_type,
            is_custom=False,
            is_active=True,
        ).first()
        if base is None:
            raise NotFound("Base plan not found.")

        return cls.create(
            tenant_id=tenant.id,
            display_name=f"{base.display_name} (Custom)",
            limits=base.limits,
            price=base.price,
            extra_slot_price=base.extra_slot_price,
            features=base.features,
            contract_terms=base.contract_terms,
            created_by=created_by,
        )

    # ------------------------------------------------------------------
    # Assign
    # ------------------------------------------------------------------
    @classmethod
    def assign(cls, tenant_id, plan_id):
        """Point the tenant at the plan and copy the plan's features onto it."""
        from plans.tasks import notify_plan_assigned_task

        tenant = cls._get_tenant(tenant_id)
        plan = cls._get_plan(plan_id)

        if plan.tenant_id != tenant.id:
            raise ValidationError("This plan does not belong to this tenant.")
        if not plan.is_active:
            raise ValidationError("Plan is not active.")

        with transaction.atomic():
            tenant.custom_plan = plan
            tenant.enabled_features = dict(plan.features)
            tenant.save(update_fields=["custom_plan", "enabled_features", "updated_at"])
            transaction.on_commit(lambda: notify_plan_assigned_task.delay(tenant.id, plan.id))

        logger.info("📌 Assigned custom plan %s to tenant '%s'", plan.id, tenant.slug)
        return tenant

    # ------------------------------------------------------------------
    # Update / list / stats / deactivate
    # ------------------------------------------------------------------
    @classmethod
    def update(cls, plan_id, data):
        plan = cls._get_plan(plan_id)
        if not plan.is_custom:
            raise ValidationError("Only custom plans can be edited here.")

        changed = []
        for field_name in EDITABLE_FIELDS:
            if field_name in data:
                setattr(plan, field_name, data[field_name])
                changed.append(field_name)
        if changed:
            plan.save(update_fields=changed + ["updated_at"])
            logger.info("✏️ Updated custom plan %s: %s", plan.id, ", ".join(changed))
        return plan

    @classmethod
    def list(cls, *, tenant_id=None, is_active=None, search="", page=1, per_page=50):
        qs = PlanConfig.objects.filter(is_custom=True).select_related("tenant")
        if tenant_id:
            qs = filter_queryset(qs, "tenant_id", "tenant_id", tenant_id)
        if is_active is not None:
            qs = filter_queryset(qs, "is_active", "is_active", is_active)
        if search:
            qs = qs.filter(Q(display_name__icontains=search) | Q(plan__icontains=search))
        return paginate(qs.order_by("-created_at"), page, per_page)

    @classmethod
    def stats(cls, plan_id):
        plan = cls._get_plan(plan_id)
        tenant_count = plan.assigned_tenants.count()
        return {
            "plan": plan,
            "tenant_count": tenant_count,
            # Simplified: every assigned tenant pays the monthly price
            "total_revenue": plan.price * tenant_count,
        }

    @classmethod
    def deactivate(cls, plan_id):
        plan = cls._get_plan(plan_id)
        if not plan.is_custom:
            raise ValidationError("Only custom plans can be deactivated here.")

        in_use = plan.assigned_tenants.count()
        if in_use:
            raise Conflict(f"Plan is assigned to {in_use} tenant(s) and cannot be deactivated.")

        plan.is_active = False
        plan.save(update_fields=["is_active", "updated_at"])
        logger.info("🗑️ Deactivated custom plan %s", plan.id)
        return plan

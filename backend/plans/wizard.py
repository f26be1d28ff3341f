"""
Six-step custom plan wizard.

The wizard is a linear finite-state machine over WizardStep. Each step has one
guard deciding whether `next()` may leave it; `previous()` is unguarded and
only unavailable on the first step. Edits made on later steps are kept when
moving back. Nothing is persisted until `save()` on the final step, which
creates the custom plan and then assigns it to the tenant through the REST
API.

    wizard = CustomPlanWizard.load(client, tenant_id=7)
    wizard.select_base_plan("professional")
    wizard.next()                     # -> LIMITS
    wizard.set_limit("trainer", 25)
    ...
    plan = wizard.save(client)
"""
import copy
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from typing import Callable, Dict, List, Optional

from core.client import ApiError
from plans.constants import DEFAULT_DRAFT_LIMITS

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    BASE = 0
    LIMITS = 1
    PRICING = 2
    FEATURES = 3
    DETAILS = 4
    PREVIEW = 5

    @property
    def title(self):
        return self.name.capitalize()


FIRST_STEP = WizardStep.BASE
LAST_STEP = WizardStep.PREVIEW

# step -> (previous, next); None marks the ends of the line
TRANSITIONS = {
    WizardStep.BASE: (None, WizardStep.LIMITS),
    WizardStep.LIMITS: (WizardStep.BASE, WizardStep.PRICING),
    WizardStep.PRICING: (WizardStep.LIMITS, WizardStep.FEATURES),
    WizardStep.FEATURES: (WizardStep.PRICING, WizardStep.DETAILS),
    WizardStep.DETAILS: (WizardStep.FEATURES, WizardStep.PREVIEW),
    WizardStep.PREVIEW: (WizardStep.DETAILS, None),
}


class WizardError(Exception):
    pass


class StepNotCompleteError(WizardError):
    def __init__(self, step, message=None):
        self.step = step
        super().__init__(message or f"Step '{step.title}' is not complete.")


class CustomPlanSaveError(WizardError):
    """
    Saving failed. `created_plan` is set when the plan was created but the
    assignment was rejected; the plan then exists unassigned.
    """

    def __init__(self, message, stage, created_plan=None, cause=None):
        super().__init__(message)
        self.stage = stage
        self.created_plan = created_plan
        self.cause = cause


def _to_decimal(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise WizardError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise WizardError(f"Invalid amount: {value!r}")
    return amount


@dataclass(frozen=True)
class BasePlan:
    plan: str
    display_name: str
    limits: Dict[str, int]
    price: Decimal
    extra_slot_price: Dict[str, Decimal] = field(default_factory=dict)
    features: Dict[str, bool] = field(default_factory=dict)
    contract_terms: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(
            plan=data["plan"],
            display_name=data.get("display_name") or data["plan"],
            limits={role: int(value) for role, value in (data.get("limits") or {}).items()},
            price=_to_decimal(data.get("price") or 0),
            extra_slot_price={
                role: _to_decimal(value) for role, value in (data.get("extra_slot_price") or {}).items()
            },
            features={name: bool(value) for name, value in (data.get("features") or {}).items()},
            contract_terms=data.get("contract_terms") or "",
        )


@dataclass
class CustomPlanDraft:
    display_name: str = ""
    limits: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_DRAFT_LIMITS))
    price: Decimal = Decimal("0")
    extra_slot_price: Dict[str, Decimal] = field(default_factory=dict)
    features: Dict[str, bool] = field(default_factory=dict)
    contract_terms: str = ""
    base_plan: Optional[str] = None

    def to_payload(self, tenant_id):
        return {
            "tenant_id": tenant_id,
            "display_name": self.display_name.strip(),
            "limits": dict(self.limits),
            "price": str(self.price),
            "extra_slot_price": {role: str(value) for role, value in self.extra_slot_price.items()},
            "features": dict(self.features),
            "contract_terms": self.contract_terms,
        }


# ----------------------------------------------------------
#  Guards: may the wizard leave this step?
# ----------------------------------------------------------
def _base_selected(draft):
    return draft.base_plan is not None


def _any_positive_limit(draft):
    return any(value > 0 for value in draft.limits.values())


def _positive_price(draft):
    return draft.price > 0


def _has_display_name(draft):
    return bool(draft.display_name.strip())


def _always(draft):
    return True


STEP_GUARDS: Dict[WizardStep, Callable[[CustomPlanDraft], bool]] = {
    WizardStep.BASE: _base_selected,
    WizardStep.LIMITS: _any_positive_limit,
    WizardStep.PRICING: _positive_price,
    WizardStep.FEATURES: _always,
    WizardStep.DETAILS: _has_display_name,
    WizardStep.PREVIEW: _always,
}


class CustomPlanWizard:
    def __init__(self, tenant_id, base_plans: List[BasePlan] = ()):
        self.tenant_id = tenant_id
        self.base_plans = {base.plan: base for base in base_plans}
        self.draft = CustomPlanDraft()
        self.current_step = FIRST_STEP

    @classmethod
    def load(cls, client, tenant_id):
        """Fetch the tenant and the base plans of its type from the API."""
        tenant = client.get(f"/api/super-admin/tenants/{tenant_id}/")
        plans = client.get(
            "/api/super-admin/plan-configs/",
            params={
                "is_custom": "false",
                "is_active": "true",
                "tenant_type": tenant.get("tenant_type"),
                "limit": 100,
            },
        )
        wizard = cls(tenant_id, [BasePlan.from_dict(item) for item in plans or []])
        wizard.tenant = tenant
        return wizard

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    @property
    def is_first_step(self):
        return self.current_step == FIRST_STEP

    @property
    def is_last_step(self):
        return self.current_step == LAST_STEP

    def can_proceed(self, step=None):
        step = self.current_step if step is None else WizardStep(step)
        return STEP_GUARDS[step](self.draft)

    def incomplete_steps(self):
        """Steps whose guard no longer holds; edits are allowed on any step."""
        return [step for step, guard in STEP_GUARDS.items() if not guard(self.draft)]

    @property
    def can_save(self):
        return self.is_last_step and not self.incomplete_steps()

    def next(self):
        _, following = TRANSITIONS[self.current_step]
        if following is None:
            raise WizardError("Already on the last step.")
        if not self.can_proceed():
            raise StepNotCompleteError(self.current_step)
        self.current_step = following
        return self.current_step

    def previous(self):
        preceding, _ = TRANSITIONS[self.current_step]
        if preceding is None:
            raise WizardError("Already on the first step.")
        self.current_step = preceding
        return self.current_step

    # ------------------------------------------------------------------
    # Draft edits
    # ------------------------------------------------------------------
    def select_base_plan(self, plan_key):
        """Overwrite the draft with a copy of a base plan. Only on the Base step."""
        if self.current_step != WizardStep.BASE:
            raise WizardError("A base plan can only be selected on the Base step.")
        try:
            base = self.base_plans[plan_key]
        except KeyError:
            raise WizardError(f"Unknown base plan '{plan_key}'.")

        self.draft = CustomPlanDraft(
            display_name=f"{base.display_name} (Custom)",
            limits=copy.deepcopy(base.limits),
            price=base.price,
            extra_slot_price=copy.deepcopy(base.extra_slot_price),
            features=copy.deepcopy(base.features),
            base_plan=base.plan,
        )
        return self.draft

    def set_limit(self, role, value):
        try:
            value = int(value)
        except (TypeError, ValueError):
            raise WizardError("A limit must be a whole number.")
        if value < -1:
            raise WizardError("A limit must be -1 (unlimited) or a non-negative number.")
        self.draft.limits[role] = value

    def set_price(self, value):
        self.draft.price = _to_decimal(value)

    def set_extra_slot_price(self, role, value):
        self.draft.extra_slot_price[role] = _to_decimal(value)

    def set_feature(self, name, enabled):
        self.draft.features[name] = bool(enabled)

    def set_details(self, display_name=None, contract_terms=None):
        if display_name is not None:
            self.draft.display_name = display_name
        if contract_terms is not None:
            self.draft.contract_terms = contract_terms

    def preview(self):
        return self.draft.to_payload(self.tenant_id)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------
    def save(self, client):
        """
        Create the custom plan, then assign it to the tenant.
        Returns the created plan. There is no rollback when the assignment fails.
        """
        if not self.is_last_step:
            raise WizardError("The plan can only be saved from the Preview step.")
        incomplete = self.incomplete_steps()
        if incomplete:
            raise StepNotCompleteError(incomplete[0])

        try:
            plan = client.post("/api/super-admin/custom-plans/", json=self.preview())
        except ApiError as exc:
            logger.error("❌ Creating custom plan for tenant %s failed: %s", self.tenant_id, exc)
            raise CustomPlanSaveError(f"Could not create the custom plan: {exc.message}", "create", cause=exc)

        try:
            client.post(
                f"/api/super-admin/custom-plans/{plan['id']}/assign/",
                json={"tenant_id": self.tenant_id},
            )
        except ApiError as exc:
            logger.error(
                "❌ Custom plan %s created but assigning it to tenant %s failed: %s",
                plan["id"], self.tenant_id, exc,
            )
            raise CustomPlanSaveError(
                f"Plan created but could not be assigned: {exc.message}",
                "assign",
                created_plan=plan,
                cause=exc,
            )

        logger.info("✅ Custom plan %s saved and assigned to tenant %s", plan["id"], self.tenant_id)
        return plan

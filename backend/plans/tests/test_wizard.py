from decimal import Decimal

from django.test import SimpleTestCase

from core.client import ApiError
from plans.wizard import (
    BasePlan,
    CustomPlanSaveError,
    CustomPlanWizard,
    StepNotCompleteError,
    WizardError,
    WizardStep,
)

PROFESSIONAL = {
    "plan": "professional",
    "display_name": "Professional",
    "limits": {"owner": 1, "admin": 3, "trainer": 15, "member": 200},
    "price": "199.90",
    "extra_slot_price": {"trainer": "12.90"},
    "features": {"crm": True, "white_label": False},
    "contract_terms": "",
}
STARTER = dict(PROFESSIONAL, plan="starter", display_name="Starter", price="99.90")


class FakeClient:
    """Records calls; answers from a queue of results or ApiErrors."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = []

    def _answer(self, method, path, **kwargs):
        self.calls.append((method, path, kwargs))
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def get(self, path, params=None):
        return self._answer("GET", path, params=params)

    def post(self, path, json=None):
        return self._answer("POST", path, json=json)


def wizard_at_preview():
    wizard = CustomPlanWizard(7, [BasePlan.from_dict(PROFESSIONAL)])
    wizard.select_base_plan("professional")
    while not wizard.is_last_step:
        wizard.next()
    return wizard


class WizardNavigationTests(SimpleTestCase):
    def setUp(self):
        self.wizard = CustomPlanWizard(7, [BasePlan.from_dict(PROFESSIONAL), BasePlan.from_dict(STARTER)])

    def test_starts_on_base_step(self):
        self.assertEqual(self.wizard.current_step, WizardStep.BASE)
        self.assertTrue(self.wizard.is_first_step)
        self.assertFalse(self.wizard.can_proceed())

    def test_cannot_leave_base_without_selection(self):
        with self.assertRaises(StepNotCompleteError) as ctx:
            self.wizard.next()
        self.assertEqual(ctx.exception.step, WizardStep.BASE)
        self.assertEqual(self.wizard.current_step, WizardStep.BASE)

    def test_previous_on_first_step_fails(self):
        with self.assertRaises(WizardError):
            self.wizard.previous()

    def test_walks_all_six_steps(self):
        self.wizard.select_base_plan("professional")
        visited = [self.wizard.current_step]
        while not self.wizard.is_last_step:
            visited.append(self.wizard.next())
        self.assertEqual(visited, list(WizardStep))
        with self.assertRaises(WizardError):
            self.wizard.next()

    def test_selection_copies_the_base_plan(self):
        draft = self.wizard.select_base_plan("professional")
        self.assertEqual(draft.display_name, "Professional (Custom)")
        self.assertEqual(draft.price, Decimal("199.90"))
        self.assertEqual(draft.base_plan, "professional")

        draft.limits["trainer"] = 99
        self.assertEqual(self.wizard.base_plans["professional"].limits["trainer"], 15)

    def test_reselecting_overwrites_the_whole_draft(self):
        self.wizard.select_base_plan("professional")
        self.wizard.draft.contract_terms = "24 months"
        self.wizard.draft.limits["member"] = 500

        self.wizard.select_base_plan("starter")
        self.assertEqual(self.wizard.draft.contract_terms, "")
        self.assertEqual(self.wizard.draft.limits["member"], 200)
        self.assertEqual(self.wizard.draft.display_name, "Starter (Custom)")

    def test_selection_only_on_base_step(self):
        self.wizard.select_base_plan("professional")
        self.wizard.next()
        with self.assertRaises(WizardError):
            self.wizard.select_base_plan("starter")

    def test_unknown_base_plan(self):
        with self.assertRaises(WizardError):
            self.wizard.select_base_plan("gold")

    def test_edits_survive_going_back(self):
        self.wizard.select_base_plan("professional")
        self.wizard.next()
        self.wizard.set_limit("trainer", 25)
        self.wizard.next()
        self.wizard.set_price("249.90")
        self.wizard.previous()
        self.wizard.previous()
        self.assertEqual(self.wizard.current_step, WizardStep.BASE)
        self.assertEqual(self.wizard.draft.limits["trainer"], 25)
        self.assertEqual(self.wizard.draft.price, Decimal("249.90"))


class WizardGuardTests(SimpleTestCase):
    def setUp(self):
        self.wizard = CustomPlanWizard(7, [BasePlan.from_dict(PROFESSIONAL)])
        self.wizard.select_base_plan("professional")
        self.wizard.next()

    def test_limits_need_a_positive_seat(self):
        for role in ("owner", "admin", "trainer", "member"):
            self.wizard.set_limit(role, 0)
        self.assertFalse(self.wizard.can_proceed())

        # unlimited alone does not count as a seat
        self.wizard.set_limit("member", -1)
        self.assertFalse(self.wizard.can_proceed())

        self.wizard.set_limit("trainer", 1)
        self.assertTrue(self.wizard.can_proceed())

    def test_limit_below_unlimited_rejected(self):
        with self.assertRaises(WizardError):
            self.wizard.set_limit("member", -2)

    def test_price_must_be_positive(self):
        self.wizard.next()
        self.wizard.set_price(0)
        self.assertFalse(self.wizard.can_proceed())
        with self.assertRaises(StepNotCompleteError):
            self.wizard.next()
        self.wizard.set_price("10")
        self.assertEqual(self.wizard.next(), WizardStep.FEATURES)

    def test_invalid_amount(self):
        with self.assertRaises(WizardError):
            self.wizard.set_price("ten")

    def test_non_finite_price_rejected(self):
        self.wizard.next()
        for value in ("NaN", "Infinity", "-Infinity"):
            with self.assertRaises(WizardError):
                self.wizard.set_price(value)
        self.wizard.set_price(0)
        self.assertFalse(self.wizard.can_proceed())

    def test_limit_must_be_a_whole_number(self):
        with self.assertRaises(WizardError) as ctx:
            self.wizard.set_limit("trainer", "abc")
        self.assertEqual(str(ctx.exception), "A limit must be a whole number.")
        with self.assertRaises(WizardError):
            self.wizard.set_limit("trainer", None)

    def test_features_always_pass(self):
        self.wizard.next()
        self.wizard.next()
        self.wizard.set_feature("crm", False)
        self.assertTrue(self.wizard.can_proceed())

    def test_details_need_a_name(self):
        self.wizard.next()
        self.wizard.next()
        self.wizard.next()
        self.wizard.set_details(display_name="   ")
        self.assertFalse(self.wizard.can_proceed())
        self.wizard.set_details(display_name="Iron Gym Deal", contract_terms="12 months")
        self.assertTrue(self.wizard.can_proceed())

    def test_can_save_only_on_preview(self):
        self.assertFalse(self.wizard.can_save)
        with self.assertRaises(WizardError):
            self.wizard.save(FakeClient())


class WizardSaveTests(SimpleTestCase):
    def test_load_fetches_tenant_and_base_plans(self):
        client = FakeClient({"id": 7, "name": "Iron Gym", "tenant_type": "business"}, [PROFESSIONAL, STARTER])
        wizard = CustomPlanWizard.load(client, 7)

        self.assertEqual(set(wizard.base_plans), {"professional", "starter"})
        self.assertEqual(wizard.tenant["name"], "Iron Gym")
        self.assertEqual(client.calls[0][1], "/api/super-admin/tenants/7/")
        self.assertEqual(client.calls[1][2]["params"]["tenant_type"], "business")

    def test_preview_payload(self):
        wizard = wizard_at_preview()
        payload = wizard.preview()
        self.assertEqual(payload["tenant_id"], 7)
        self.assertEqual(payload["price"], "199.90")
        self.assertEqual(payload["extra_slot_price"], {"trainer": "12.90"})
        self.assertEqual(payload["display_name"], "Professional (Custom)")

    def test_save_creates_then_assigns(self):
        client = FakeClient({"id": 42, "display_name": "Professional (Custom)"}, {"tenant_id": 7})
        plan = wizard_at_preview().save(client)

        self.assertEqual(plan["id"], 42)
        self.assertEqual(client.calls[0][1], "/api/super-admin/custom-plans/")
        self.assertEqual(client.calls[1][1], "/api/super-admin/custom-plans/42/assign/")
        self.assertEqual(client.calls[1][2]["json"], {"tenant_id": 7})

    def test_save_rechecks_every_step(self):
        wizard = wizard_at_preview()
        self.assertTrue(wizard.can_save)
        wizard.set_details(display_name="")
        self.assertFalse(wizard.can_save)
        self.assertEqual(wizard.incomplete_steps(), [WizardStep.DETAILS])

        client = FakeClient()
        with self.assertRaises(StepNotCompleteError):
            wizard.save(client)
        self.assertEqual(client.calls, [])

    def test_create_failure(self):
        client = FakeClient(ApiError("Tenant already has an active custom plan.", status=400))
        with self.assertRaises(CustomPlanSaveError) as ctx:
            wizard_at_preview().save(client)
        self.assertEqual(ctx.exception.stage, "create")
        self.assertIsNone(ctx.exception.created_plan)
        self.assertEqual(len(client.calls), 1)

    def test_assign_failure_keeps_created_plan(self):
        client = FakeClient({"id": 42}, ApiError("Plan is not active.", status=400))
        with self.assertRaises(CustomPlanSaveError) as ctx:
            wizard_at_preview().save(client)
        self.assertEqual(ctx.exception.stage, "assign")
        self.assertEqual(ctx.exception.created_plan, {"id": 42})

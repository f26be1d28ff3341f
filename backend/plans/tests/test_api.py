from unittest.mock import patch

from rest_framework import status
from rest_framework.test import APITestCase

from core.tests.helpers import make_super_admin, make_tenant, make_user
from plans.models import PlanConfig

CUSTOM_PLANS_URL = "/api/super-admin/custom-plans/"


class CustomPlanApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.root = make_super_admin()
        cls.gym = make_tenant("Iron Gym")
        cls.owner = make_user(cls.gym)

    def setUp(self):
        self.client.force_authenticate(self.root)

    def _payload(self, **overrides):
        payload = {
            "tenant_id": self.gym.id,
            "display_name": "Iron Deal",
            "limits": {"owner": 1, "admin": 2, "trainer": 20, "member": 300},
            "price": "250.00",
            "extra_slot_price": {"trainer": "9.90"},
            "features": {"crm": True},
            "contract_terms": "12 months",
        }
        payload.update(overrides)
        return payload

    def test_tenant_users_are_refused(self):
        self.client.force_authenticate(self.owner)
        response = self.client.get(CUSTOM_PLANS_URL)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_malformed_list_filters_are_bad_requests(self):
        response = self.client.get(CUSTOM_PLANS_URL, {"tenant_id": "abc"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("tenant_id", response.data["error"]["details"])

        response = self.client.get(CUSTOM_PLANS_URL, {"is_active": "maybe"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("is_active", response.data["error"]["details"])

    @patch("plans.tasks.notify_plan_assigned_task.delay")
    def test_create_assign_and_read_back(self, mocked_delay):
        response = self.client.post(CUSTOM_PLANS_URL, self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        plan_id = response.data["data"]["id"]
        self.assertEqual(response.data["data"]["extra_slot_price"], {"trainer": "9.90"})

        response = self.client.post(f"{CUSTOM_PLANS_URL}{plan_id}/assign/", {"tenant_id": self.gym.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["custom_plan"], plan_id)

        response = self.client.get(f"/api/super-admin/tenants/{self.gym.id}/")
        self.assertTrue(response.data["data"]["stats"]["is_custom_plan"])

        response = self.client.get(CUSTOM_PLANS_URL, {"tenant_id": self.gym.id})
        self.assertEqual(response.data["pagination"]["total"], 1)

    def test_invalid_limits(self):
        response = self.client.post(CUSTOM_PLANS_URL, self._payload(limits={"coach": 3}), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("coach", response.data["error"]["message"])

        response = self.client.post(CUSTOM_PLANS_URL, self._payload(limits={"member": -5}), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_second_active_plan_refused(self):
        self.client.post(CUSTOM_PLANS_URL, self._payload(), format="json")
        response = self.client.post(CUSTOM_PLANS_URL, self._payload(display_name="Again"), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["message"], "Tenant already has an active custom plan.")

    def test_duplicate_and_update(self):
        response = self.client.post(
            f"{CUSTOM_PLANS_URL}duplicate/", {"base_plan": "starter", "tenant_id": self.gym.id}, format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        plan_id = response.data["data"]["id"]

        response = self.client.patch(f"{CUSTOM_PLANS_URL}{plan_id}/", {"price": "120.00"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["price"], "120.00")
        self.assertEqual(response.data["data"]["display_name"], "Starter (Custom)")

    @patch("plans.tasks.notify_plan_assigned_task.delay")
    def test_deactivate_in_use_conflicts(self, mocked_delay):
        plan_id = self.client.post(CUSTOM_PLANS_URL, self._payload(), format="json").data["data"]["id"]
        self.client.post(f"{CUSTOM_PLANS_URL}{plan_id}/assign/", {"tenant_id": self.gym.id}, format="json")

        response = self.client.delete(f"{CUSTOM_PLANS_URL}{plan_id}/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.get(f"{CUSTOM_PLANS_URL}{plan_id}/stats/")
        self.assertEqual(response.data["data"]["tenant_count"], 1)
        self.assertEqual(response.data["data"]["total_revenue"], "250.00")


class PlanConfigApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.root = make_super_admin()

    def setUp(self):
        self.client.force_authenticate(self.root)

    def test_list_filters_and_sorts(self):
        response = self.client.get(
            "/api/super-admin/plan-configs/",
            {"is_custom": "false", "tenant_type": "business", "sort_by": "price_desc"},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        plans = [item["plan"] for item in response.data["data"]]
        self.assertEqual(plans, ["enterprise", "professional", "starter"])
        self.assertEqual(response.data["pagination"]["total"], 3)

    def test_base_plan_in_use_cannot_be_removed(self):
        make_tenant("Iron Gym")
        starter = PlanConfig.objects.get(plan="starter", is_custom=False)
        response = self.client.delete(f"/api/super-admin/plan-configs/{starter.id}/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        professional = PlanConfig.objects.get(plan="professional", is_custom=False)
        response = self.client.delete(f"/api/super-admin/plan-configs/{professional.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["data"]["is_active"])


class PlanLimitsApiTests(APITestCase):
    def test_usage(self):
        gym = make_tenant("Iron Gym")
        owner = make_user(gym)
        make_user(gym, "trainer")
        self.client.force_authenticate(owner)

        response = self.client.get("/api/plan-limits/usage/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        usage = response.data["data"]["usage"]
        self.assertEqual(usage["trainer"], {
            "current": 1, "limit": 3, "available": 2, "unlimited": False, "can_add": True,
        })
        self.assertFalse(usage["owner"]["can_add"])
        self.assertEqual(response.data["data"]["plan"], "starter")

        response = self.client.get("/api/plan-limits/features/")
        self.assertTrue(response.data["data"]["features"]["marketplace"])

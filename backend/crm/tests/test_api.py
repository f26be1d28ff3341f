from datetime import timedelta
from decimal import Decimal

from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from core.tests.helpers import make_tenant, make_user
from crm.models import ClientProfile, CRMAutomation, CRMTask

CLIENTS_URL = "/api/crm/clients/"
TASKS_URL = "/api/crm/tasks/"
AUTOMATIONS_URL = "/api/crm/automations/"
BIOIMPEDANCE_URL = "/api/crm/bioimpedance/"


class ClientProfileApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.gym = make_tenant("Iron Gym", plan="professional")
        cls.owner = make_user(cls.gym)
        cls.trainer = make_user(cls.gym, "trainer")
        cls.member = make_user(cls.gym, "member")
        cls.starter = make_tenant("Zen Studio")

    def setUp(self):
        self.client.force_authenticate(self.owner)

    def _create(self, **overrides):
        payload = {"name": "Lia Souza", "email": "lia@example.com", "status": "prospect", "tags": [" VIP ", "vip"]}
        payload.update(overrides)
        return self.client.post(CLIENTS_URL, payload, format="json")

    def test_create_normalizes_tags(self):
        response = self._create(professional_id=self.trainer.id)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data["data"]
        self.assertEqual(data["tags"], ["vip"])
        self.assertEqual(data["professional"], self.trainer.username)
        self.assertEqual(data["open_tasks"], 0)

    def test_plan_without_crm(self):
        self.client.force_authenticate(make_user(self.starter))
        response = self.client.get(CLIENTS_URL)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("crm", response.data["error"]["message"])

    def test_members_have_no_access(self):
        self.client.force_authenticate(self.member)
        self.assertEqual(self.client.get(CLIENTS_URL).status_code, status.HTTP_403_FORBIDDEN)

    def test_trainers_only_see_their_clients(self):
        self._create(professional_id=self.trainer.id)
        self._create(name="Bo Lima")

        self.client.force_authenticate(self.trainer)
        response = self.client.get(CLIENTS_URL)
        self.assertEqual([c["name"] for c in response.data["data"]], ["Lia Souza"])

    def test_search_filter_and_pipeline(self):
        self._create()
        self._create(name="Bo Lima", status="at_risk", lead_source="instagram")
        self._create(name="Caio Reis", status="at_risk")

        response = self.client.get(CLIENTS_URL, {"status": "at_risk", "search": "lima"})
        self.assertEqual([c["name"] for c in response.data["data"]], ["Bo Lima"])

        response = self.client.get(CLIENTS_URL, {"lead_source": "instagram"})
        self.assertEqual(response.data["pagination"]["total"], 1)

        response = self.client.get(f"{CLIENTS_URL}pipeline/")
        self.assertEqual(response.data["data"]["total"], 3)
        self.assertEqual(response.data["data"]["by_status"]["at_risk"], 2)
        self.assertEqual(response.data["data"]["by_status"]["churned"], 0)

    def test_contact_reactivates_at_risk_client(self):
        client_id = self._create(status="at_risk").data["data"]["id"]
        response = self.client.post(f"{CLIENTS_URL}{client_id}/contact/")
        self.assertEqual(response.data["data"]["status"], "active")
        self.assertIsNotNone(response.data["data"]["last_interaction_at"])

    def test_other_tenants_are_invisible(self):
        ClientProfile.all_objects.create(tenant=self.starter, name="Secret")
        response = self.client.get(CLIENTS_URL)
        self.assertEqual(response.data["pagination"]["total"], 0)


class CRMTaskApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.gym = make_tenant("Iron Gym", plan="professional")
        cls.owner = make_user(cls.gym)
        cls.trainer = make_user(cls.gym, "trainer")
        cls.lia = ClientProfile.all_objects.create(tenant=cls.gym, name="Lia", professional=cls.trainer)
        cls.bo = ClientProfile.all_objects.create(tenant=cls.gym, name="Bo")

    def setUp(self):
        self.client.force_authenticate(self.trainer)

    def _create(self, client, **overrides):
        payload = {
            "client_id": client.id,
            "title": "Check in",
            "task_type": "call",
            "due_date": (timezone.now() + timedelta(days=1)).isoformat(),
        }
        payload.update(overrides)
        return self.client.post(TASKS_URL, payload, format="json")

    def test_complete_touches_the_client(self):
        response = self._create(self.lia)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data["data"]["is_overdue"])
        task_id = response.data["data"]["id"]

        response = self.client.post(f"{TASKS_URL}{task_id}/complete/")
        self.assertEqual(response.data["data"]["status"], "completed")
        self.lia.refresh_from_db()
        self.assertIsNotNone(self.lia.last_interaction_at)

        response = self.client.post(f"{TASKS_URL}{task_id}/complete/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_trainer_cannot_task_other_clients(self):
        response = self._create(self.bo)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("client_id", response.data["error"]["details"])

    def test_overdue_and_filters(self):
        self._create(self.lia, due_date=(timezone.now() - timedelta(hours=2)).isoformat(), priority="urgent")
        self._create(self.lia, title="Send plan")

        response = self.client.get(TASKS_URL, {"priority": "urgent"})
        self.assertEqual(response.data["pagination"]["total"], 1)
        self.assertTrue(response.data["data"][0]["is_overdue"])

        response = self.client.get(TASKS_URL, {"client": "abc"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.force_authenticate(self.owner)
        response = self.client.get(CLIENTS_URL, {"sort_by": "open_tasks"})
        self.assertEqual(response.data["data"][0]["name"], "Lia")
        self.assertEqual(response.data["data"][0]["open_tasks"], 2)


class CRMAutomationApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.gym = make_tenant("Iron Gym", plan="professional")
        cls.owner = make_user(cls.gym)
        cls.trainer = make_user(cls.gym, "trainer")

    def setUp(self):
        self.client.force_authenticate(self.owner)

    def test_listing_creates_switched_off_automations(self):
        response = self.client.get(AUTOMATIONS_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [(a["key"], a["enabled"]) for a in response.data["data"]],
            [("at_risk_follow_up", False), ("overdue_tasks", False)],
        )
        self.client.get(AUTOMATIONS_URL)
        self.assertEqual(CRMAutomation.all_objects.filter(tenant=self.gym).count(), 2)

    def test_toggle_and_settings(self):
        automation_id = self.client.get(AUTOMATIONS_URL).data["data"][0]["id"]
        response = self.client.post(f"{AUTOMATIONS_URL}{automation_id}/toggle/")
        self.assertTrue(response.data["data"]["enabled"])

        response = self.client.patch(f"{AUTOMATIONS_URL}{automation_id}/", {"inactivity_days": 14}, format="json")
        self.assertEqual(response.data["data"]["inactivity_days"], 14)

        response = self.client.get(AUTOMATIONS_URL, {"enabled": "true"})
        self.assertEqual(response.data["pagination"]["total"], 1)

    def test_automations_are_not_created_by_hand(self):
        response = self.client.post(AUTOMATIONS_URL, {"key": "overdue_tasks"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_trainers_cannot_switch_automations(self):
        self.client.force_authenticate(self.trainer)
        self.assertEqual(self.client.get(AUTOMATIONS_URL).status_code, status.HTTP_403_FORBIDDEN)


class BioimpedanceApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.gym = make_tenant("Iron Gym", plan="professional")
        cls.owner = make_user(cls.gym)
        cls.lia = ClientProfile.all_objects.create(tenant=cls.gym, name="Lia")

    def setUp(self):
        self.client.force_authenticate(self.owner)

    def _record(self, days_ago, **overrides):
        payload = {
            "client_id": self.lia.id,
            "measured_at": (timezone.now() - timedelta(days=days_ago)).isoformat(),
            "weight": "80.00",
            "height": "180.00",
            "body_fat_percentage": "25.00",
            "skeletal_muscle_mass": "35.00",
        }
        payload.update(overrides)
        return self.client.post(BIOIMPEDANCE_URL, payload, format="json")

    def test_bmi_is_computed(self):
        response = self._record(0)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["bmi"], "24.69")

    def test_out_of_range_values_rejected(self):
        response = self._record(0, height="20.00")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("height", response.data["error"]["details"])

    def test_report_compares_latest_with_previous(self):
        self._record(60, weight="84.00", body_fat_percentage="28.00")
        self._record(30, weight="82.00", body_fat_percentage="26.00")
        self._record(0, weight="80.00", body_fat_percentage="26.00", skeletal_muscle_mass="36.00")

        response = self.client.get(f"{CLIENTS_URL}{self.lia.id}/bioimpedance/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        report = response.data["data"]
        self.assertEqual(report["total"], 3)
        self.assertEqual([h["weight"] for h in report["history"]], [Decimal("84"), Decimal("82"), Decimal("80")])
        self.assertEqual(report["latest"]["weight"], Decimal("80"))
        self.assertEqual(report["averages"]["weight"], Decimal("82"))
        self.assertEqual(report["trend"]["weight"]["absolute"], Decimal("-2"))
        self.assertEqual(report["trend"]["weight"]["direction"], "down")
        self.assertEqual(report["trend"]["body_fat_percentage"]["direction"], "stable")
        self.assertEqual(report["trend"]["skeletal_muscle_mass"]["percentage"], Decimal("2.86"))

    def test_report_without_measurements(self):
        response = self.client.get(f"{CLIENTS_URL}{self.lia.id}/bioimpedance/")
        self.assertEqual(response.data["data"]["total"], 0)
        self.assertIsNone(response.data["data"]["latest"])
        self.assertEqual(response.data["data"]["trend"], {})

    def test_list_by_client(self):
        self._record(1)
        other = ClientProfile.all_objects.create(tenant=self.gym, name="Bo")
        self._record(0, client_id=other.id)
        response = self.client.get(BIOIMPEDANCE_URL, {"client": self.lia.id})
        self.assertEqual(response.data["pagination"]["total"], 1)

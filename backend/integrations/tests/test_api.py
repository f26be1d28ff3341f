from rest_framework import status
from rest_framework.test import APITestCase

from core.tests.helpers import make_tenant, make_user
from integrations.models import Integration, MessageTemplate
from notifications.models import Notification
from tenants.models import Tenant

INTEGRATIONS_URL = "/api/integrations/providers/"
TEMPLATES_URL = "/api/integrations/whatsapp-templates/"


class IntegrationApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.gym = make_tenant("Iron Gym")  # starter: whatsapp yes, ai_assistant no
        cls.owner = make_user(cls.gym)
        cls.trainer = make_user(cls.gym, "trainer")

    def setUp(self):
        self.client.force_authenticate(self.owner)

    def _create(self, provider="stripe", config=None):
        return self.client.post(
            INTEGRATIONS_URL,
            {"provider": provider, "config": config or {"secret_key": "sk_test_123456"}},
            format="json",
        )

    def test_create_masks_secrets(self):
        response = self._create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data["data"]
        self.assertEqual(data["config"]["secret_key"], "••••3456")
        self.assertEqual(data["missing_keys"], ["publishable_key"])
        self.assertFalse(data["enabled"])

    def test_one_integration_per_provider(self):
        self._create()
        self.assertEqual(self._create().status_code, status.HTTP_409_CONFLICT)

    def test_provider_needs_plan_feature(self):
        response = self._create("openai", {"api_key": "sk-abc"})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self._create("whatsapp").status_code, status.HTTP_201_CREATED)

    def test_trainers_have_no_access(self):
        self.client.force_authenticate(self.trainer)
        self.assertEqual(self.client.get(INTEGRATIONS_URL).status_code, status.HTTP_403_FORBIDDEN)

    def test_toggle(self):
        integration_id = self._create().data["data"]["id"]
        response = self.client.post(f"{INTEGRATIONS_URL}{integration_id}/toggle/")
        self.assertTrue(response.data["data"]["enabled"])
        response = self.client.post(f"{INTEGRATIONS_URL}{integration_id}/toggle/")
        self.assertFalse(response.data["data"]["enabled"])

    def test_check_reports_missing_keys(self):
        integration_id = self._create().data["data"]["id"]

        response = self.client.post(f"{INTEGRATIONS_URL}{integration_id}/test/")
        self.assertFalse(response.data["data"]["success"])
        self.assertEqual(response.data["data"]["missing_keys"], ["publishable_key"])
        self.assertEqual(response.data["data"]["integration"]["status"], "error")
        self.assertTrue(Notification.objects.filter(recipient=self.owner, notification_type="integration").exists())

        self.client.patch(
            f"{INTEGRATIONS_URL}{integration_id}/", {"config": {"publishable_key": "pk_test_1"}}, format="json",
        )
        response = self.client.post(f"{INTEGRATIONS_URL}{integration_id}/test/")
        self.assertTrue(response.data["data"]["success"])

        integration = Integration.all_objects.get(pk=integration_id)
        self.assertEqual(integration.status, "connected")
        self.assertEqual(integration.config["secret_key"], "sk_test_123456")
        self.assertIsNotNone(integration.last_tested_at)

    def test_masked_config_sent_back_keeps_secrets(self):
        response = self._create(config={"secret_key": "sk_test_123456", "publishable_key": "pk_test_987"})
        integration_id = response.data["data"]["id"]
        config = self.client.get(f"{INTEGRATIONS_URL}{integration_id}/").data["data"]["config"]
        self.assertEqual(config, {"secret_key": "••••3456", "publishable_key": "••••_987"})

        config["webhook_url"] = "https://iron.example.com/hooks"
        response = self.client.patch(f"{INTEGRATIONS_URL}{integration_id}/", {"config": config}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        integration = Integration.all_objects.get(pk=integration_id)
        self.assertEqual(integration.config["secret_key"], "sk_test_123456")
        self.assertEqual(integration.config["publishable_key"], "pk_test_987")
        self.assertEqual(integration.config["webhook_url"], "https://iron.example.com/hooks")

        self.client.patch(f"{INTEGRATIONS_URL}{integration_id}/", {"config": {"secret_key": "sk_live_0000"}}, format="json")
        self.assertEqual(Integration.all_objects.get(pk=integration_id).config["secret_key"], "sk_live_0000")

    def test_filter_by_status(self):
        self._create()
        self._create("google_calendar", {"client_id": "a", "client_secret": "b"})
        response = self.client.get(INTEGRATIONS_URL, {"status": "not_configured", "sort_by": "provider"})
        self.assertEqual([i["provider"] for i in response.data["data"]], ["google_calendar", "stripe"])


class MessageTemplateApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.gym = make_tenant("Iron Gym")
        cls.owner = make_user(cls.gym)

    def setUp(self):
        self.client.force_authenticate(self.owner)

    def _create(self, name="Class Reminder", **extra):
        payload = {"name": name, "category": "utility", "content": "Hi {{name}}, class at {{ time }}."}
        payload.update(extra)
        return self.client.post(TEMPLATES_URL, payload, format="json")

    def test_create_normalizes_name_and_lists_variables(self):
        response = self._create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["name"], "class_reminder")
        self.assertEqual(response.data["data"]["variables"], ["name", "time"])
        self.assertEqual(response.data["data"]["status"], "draft")

    def test_duplicate_name_per_language(self):
        self._create()
        self.assertEqual(self._create().status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(self._create(language="en_US").status_code, status.HTTP_201_CREATED)

    def test_search_filter_sort(self):
        self._create("welcome", category="marketing", content="Welcome!")
        self._create("birthday", category="marketing", content="Happy birthday {{name}}")
        self._create("otp", category="authentication", content="Code {{code}}")

        response = self.client.get(TEMPLATES_URL, {"category": "marketing", "sort_by": "name"})
        self.assertEqual([t["name"] for t in response.data["data"]], ["birthday", "welcome"])

        response = self.client.get(TEMPLATES_URL, {"search": "code"})
        self.assertEqual([t["name"] for t in response.data["data"]], ["otp"])

    def test_submit_then_edit_returns_to_draft(self):
        template_id = self._create().data["data"]["id"]
        response = self.client.post(f"{TEMPLATES_URL}{template_id}/submit/")
        self.assertEqual(response.data["data"]["status"], "pending")

        response = self.client.post(f"{TEMPLATES_URL}{template_id}/submit/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(f"{TEMPLATES_URL}{template_id}/", {"content": "Hey {{name}}"}, format="json")
        self.assertEqual(response.data["data"]["status"], "draft")

    def test_render(self):
        template_id = self._create().data["data"]["id"]
        response = self.client.post(f"{TEMPLATES_URL}{template_id}/render/", {"values": {"name": "Lia"}}, format="json")
        self.assertEqual(response.data["data"]["content"], "Hi Lia, class at {{ time }}.")
        self.assertEqual(response.data["data"]["missing_variables"], ["time"])

    def test_plan_without_whatsapp(self):
        solo = make_tenant("Ana Coach", tenant_type=Tenant.TYPE_INDIVIDUAL)
        self.client.force_authenticate(make_user(solo))
        self.assertEqual(self._create().status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(MessageTemplate.all_objects.filter(tenant=solo).exists())

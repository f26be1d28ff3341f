from datetime import timedelta
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from django_celery_beat.models import PeriodicTask

from core.tests.helpers import make_tenant, make_user
from crm.automation import at_risk_follow_ups, overdue_task_digest, run_automations
from crm.models import ClientProfile, CRMAutomation, CRMTask
from crm.schedules import setup_crm_schedules
from crm.tasks import run_crm_automations
from notifications.models import Notification
from tenants.models import Tenant


class AtRiskFollowUpTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.gym = make_tenant("Iron Gym", plan="professional")
        cls.now = timezone.now()
        cls.automation = CRMAutomation.all_objects.create(
            tenant=cls.gym, key=CRMAutomation.KEY_AT_RISK_FOLLOW_UP, enabled=True,
        )
        cls.silent = ClientProfile.all_objects.create(
            tenant=cls.gym, name="Lia", status="at_risk", last_interaction_at=cls.now - timedelta(days=10),
        )
        cls.never_contacted = ClientProfile.all_objects.create(tenant=cls.gym, name="Bo", status="at_risk")
        ClientProfile.all_objects.create(
            tenant=cls.gym, name="Caio", status="at_risk", last_interaction_at=cls.now - timedelta(days=2),
        )
        ClientProfile.all_objects.create(
            tenant=cls.gym, name="Dani", status="active", last_interaction_at=cls.now - timedelta(days=30),
        )

    def test_opens_one_urgent_follow_up_per_silent_client(self):
        created = at_risk_follow_ups(self.automation, now=self.now)

        self.assertEqual({task.client_id for task in created}, {self.silent.id, self.never_contacted.id})
        task = created[0]
        self.assertEqual(task.priority, "urgent")
        self.assertTrue(task.automated)
        self.assertEqual(task.due_date, self.now + timedelta(hours=24))
        self.automation.refresh_from_db()
        self.assertEqual(self.automation.last_run_at, self.now)

    def test_pending_follow_up_is_not_duplicated(self):
        at_risk_follow_ups(self.automation, now=self.now)
        self.assertEqual(at_risk_follow_ups(self.automation, now=self.now), [])
        self.assertEqual(CRMTask.all_objects.filter(automated=True).count(), 2)

    def test_inactivity_window_is_configurable(self):
        self.automation.inactivity_days = 1
        created = at_risk_follow_ups(self.automation, now=self.now)
        self.assertEqual(len(created), 3)


class OverdueDigestTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.gym = make_tenant("Iron Gym", plan="professional")
        cls.owner = make_user(cls.gym)
        cls.automation = CRMAutomation.all_objects.create(tenant=cls.gym, key=CRMAutomation.KEY_OVERDUE_TASKS)
        cls.lia = ClientProfile.all_objects.create(tenant=cls.gym, name="Lia")

    @patch("notifications.utils.send_notification_email.delay")
    def test_notifies_admins_of_overdue_tasks(self, mocked_delay):
        now = timezone.now()
        CRMTask.all_objects.create(tenant=self.gym, client=self.lia, title="Call", due_date=now - timedelta(hours=1))
        CRMTask.all_objects.create(tenant=self.gym, client=self.lia, title="Mail", due_date=now + timedelta(hours=1))
        CRMTask.all_objects.create(
            tenant=self.gym, client=self.lia, title="Done", status="completed", due_date=now - timedelta(days=1),
        )

        self.assertEqual(overdue_task_digest(self.automation, now=now), 1)
        notification = Notification.objects.get(recipient=self.owner)
        self.assertIn("1 CRM task(s)", notification.message)
        mocked_delay.assert_called_once_with(notification.id)

    def test_nothing_overdue_sends_nothing(self):
        self.assertEqual(overdue_task_digest(self.automation), 0)
        self.assertFalse(Notification.objects.exists())


class RunAutomationsTests(TestCase):
    def test_only_enabled_automations_of_active_tenants_run(self):
        gym = make_tenant("Iron Gym", plan="professional")
        studio = make_tenant("Zen Studio", plan="professional")
        CRMAutomation.all_objects.create(tenant=gym, key=CRMAutomation.KEY_AT_RISK_FOLLOW_UP, enabled=True)
        CRMAutomation.all_objects.create(tenant=studio, key=CRMAutomation.KEY_AT_RISK_FOLLOW_UP, enabled=False)
        ClientProfile.all_objects.create(tenant=gym, name="Lia", status="at_risk")
        ClientProfile.all_objects.create(tenant=studio, name="Bo", status="at_risk")

        self.assertEqual(run_crm_automations(), {"at_risk_follow_up": 1, "overdue_tasks": 0})
        self.assertEqual(CRMTask.all_objects.filter(tenant=gym).count(), 1)
        self.assertFalse(CRMTask.all_objects.filter(tenant=studio).exists())

    def test_suspended_tenants_are_skipped(self):
        gym = make_tenant("Iron Gym", plan="professional", status=Tenant.STATUS_SUSPENDED)
        CRMAutomation.all_objects.create(tenant=gym, key=CRMAutomation.KEY_AT_RISK_FOLLOW_UP, enabled=True)
        self.assertEqual(run_automations()["at_risk_follow_up"], 0)

    def test_tenants_without_crm_are_skipped(self):
        gym = make_tenant("Iron Gym")
        CRMAutomation.all_objects.create(tenant=gym, key=CRMAutomation.KEY_AT_RISK_FOLLOW_UP, enabled=True)
        ClientProfile.all_objects.create(tenant=gym, name="Lia", status="at_risk")
        self.assertEqual(run_automations()["at_risk_follow_up"], 0)
        self.assertFalse(CRMTask.all_objects.exists())

    def test_schedule_setup_is_idempotent(self):
        setup_crm_schedules()
        out = StringIO()
        call_command("setup_crm_schedules", stdout=out)
        self.assertEqual(PeriodicTask.objects.filter(name="CRM Automations").count(), 1)
        self.assertIn("CRM schedule set up successfully", out.getvalue())

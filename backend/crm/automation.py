import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from notifications.models import Notification
from notifications.utils import notify_tenant_admins
from plans.limits import has_feature
from tenants.models import Tenant
from .models import ClientProfile, CRMAutomation, CRMTask

logger = logging.getLogger(__name__)


def enabled_automations(key):
    return (
        CRMAutomation.all_objects.filter(key=key, enabled=True, tenant__status=Tenant.STATUS_ACTIVE)
        .select_related("tenant")
    )


def at_risk_follow_ups(automation, now=None):
    """
    Open an urgent follow-up, due within 24h, for every at-risk client of the
    automation's tenant without contact for `inactivity_days`. A client with a
    pending automated follow-up is skipped.
    """
    now = now or timezone.now()
    cutoff = now - timedelta(days=automation.inactivity_days)
    open_follow_ups = CRMTask.all_objects.filter(automated=True, status="pending").values("client_id")
    clients = (
        ClientProfile.all_objects.filter(tenant=automation.tenant, status="at_risk")
        .exclude(last_interaction_at__gte=cutoff)
        .exclude(pk__in=open_follow_ups)
    )

    created = []
    with transaction.atomic():
        for client in clients:
            created.append(CRMTask.all_objects.create(
                tenant=automation.tenant,
                client=client,
                title=f"Urgent follow-up: {client.name}",
                description=f"At risk with no contact for {automation.inactivity_days}+ days.",
                task_type="follow_up",
                priority="urgent",
                due_date=now + timedelta(hours=24),
                automated=True,
            ))
        automation.last_run_at = now
        automation.save(update_fields=["last_run_at", "updated_at"])

    if created:
        logger.info("🚨 %s urgent follow-up(s) opened for tenant '%s'", len(created), automation.tenant.slug)
    return created


def overdue_task_digest(automation, now=None):
    """Tell the tenant's admins how many pending tasks are past due."""
    now = now or timezone.now()
    overdue = CRMTask.all_objects.filter(tenant=automation.tenant, status="pending", due_date__lt=now).count()
    automation.last_run_at = now
    automation.save(update_fields=["last_run_at", "updated_at"])
    if not overdue:
        return 0

    notify_tenant_admins(
        automation.tenant,
        title="Overdue CRM tasks",
        message=f"{overdue} CRM task(s) are past their due date.",
        notification_type=Notification.TYPE_SYSTEM,
        link="/crm/tasks?status=pending",
    )
    return overdue


RUNNERS = {
    CRMAutomation.KEY_AT_RISK_FOLLOW_UP: at_risk_follow_ups,
    CRMAutomation.KEY_OVERDUE_TASKS: overdue_task_digest,
}


def run_automations(now=None):
    """Run every enabled automation; returns {key: number of tenants processed}."""
    processed = {}
    for key, runner in RUNNERS.items():
        # a tenant that dropped to a plan without CRM keeps its switches but nothing runs
        automations = [a for a in enabled_automations(key) if has_feature(a.tenant, "crm")]
        for automation in automations:
            runner(automation, now=now)
        processed[key] = len(automations)
    return processed

import logging

from celery import shared_task

from notifications.models import Notification
from notifications.utils import notify_tenant_admins
from plans.models import PlanConfig
from tenants.models import Tenant

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Tell tenant owners/admins that a custom plan was assigned
# -------------------------------------------------------------------
@shared_task
def notify_plan_assigned_task(tenant_id, plan_id):
    tenant = Tenant.objects.filter(id=tenant_id).first()
    plan = PlanConfig.objects.filter(id=plan_id).first()
    if tenant is None or plan is None:
        logger.warning("⚠️ Tenant %s or plan %s not found for assignment notification", tenant_id, plan_id)
        return 0

    def message(user):
        return (
            f"Dear {user.get_full_name() or user.username}, your account now uses the "
            f"'{plan.display_name}' plan at {plan.price} per month."
        )

    notifications = notify_tenant_admins(
        tenant,
        title=f"New plan: {plan.display_name}",
        message=message,
        notification_type=Notification.TYPE_PLAN,
        link="/settings/plan",
    )
    return len(notifications)

import logging

from .models import Notification
from .tasks import send_notification_email

logger = logging.getLogger(__name__)

ADMIN_ROLES = ("owner", "admin")


def notify_user(*, tenant, recipient, title, message, notification_type, link="", send_email=True):
    """Store an in-app notification and queue its e-mail copy."""
    notification = Notification.objects.create(
        tenant=tenant,
        recipient=recipient,
        title=title,
        message=message,
        notification_type=notification_type,
        link=link,
    )

    if send_email and recipient.email:
        send_notification_email.delay(notification.id)

    return notification


def notify_tenant_admins(tenant, *, title, message, notification_type, link="", send_email=True):
    """
    Notify every active owner and admin of `tenant`. `message` may be a
    callable taking the recipient. Returns the notifications created.
    """
    recipients = tenant.users.filter(is_active=True, role__name__in=ADMIN_ROLES)
    notifications = [
        notify_user(
            tenant=tenant,
            recipient=user,
            title=title,
            message=message(user) if callable(message) else message,
            notification_type=notification_type,
            link=link,
            send_email=send_email,
        )
        for user in recipients
    ]
    logger.info("🔔 '%s' sent to %s admin(s) of tenant '%s'", title, len(notifications), tenant.slug)
    return notifications

import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# E-mail copy of an in-app notification
# -------------------------------------------------------------------
@shared_task(bind=True, autoretry_for=(ConnectionError,), retry_backoff=True, retry_kwargs={"max_retries": 3})
def send_notification_email(self, notification_id):
    notification = (
        Notification.objects.select_related("recipient", "tenant")
        .filter(id=notification_id)
        .first()
    )
    if notification is None:
        logger.warning("⚠️ Notification %s is gone; no e-mail sent", notification_id)
        return False
    if notification.emailed_at is not None:
        return False

    recipient = notification.recipient
    if not recipient.email:
        return False

    body = notification.message
    if notification.url:
        body = f"{body}\n\n{notification.url}"

    send_mail(
        subject=f"[{notification.tenant.name}] {notification.title}",
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient.email],
        fail_silently=False,
    )
    notification.emailed_at = timezone.now()
    notification.save(update_fields=["emailed_at"])
    logger.info("📧 Notification %s e-mailed to %s", notification.id, recipient.email)
    return True

import logging

from celery import shared_task

from .automation import run_automations

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Built-in CRM automations (periodic, see crm.schedules)
# -------------------------------------------------------------------
@shared_task
def run_crm_automations():
    try:
        processed = run_automations()
    except Exception:
        logger.exception("❌ CRM automations failed")
        raise
    logger.info("🤖 CRM automations ran: %s", processed)
    return processed

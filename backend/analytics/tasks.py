import logging

from celery import shared_task

from .dashboards import refresh_all

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Rebuild every dashboard snapshot (periodic, see analytics.schedules)
# -------------------------------------------------------------------
@shared_task
def refresh_dashboard_snapshots():
    try:
        snapshots = refresh_all()
    except Exception:
        logger.exception("❌ Dashboard refresh failed")
        raise
    return [snapshot.key for snapshot in snapshots]

import json

from django.conf import settings
from django_celery_beat.models import IntervalSchedule, PeriodicTask


def _get_or_create_interval(seconds):
    schedule, _ = IntervalSchedule.objects.get_or_create(
        every=seconds,
        period=IntervalSchedule.SECONDS,
    )
    return schedule


def setup_dashboard_schedules():
    """
    Create or update the Celery Beat schedule
    that rebuilds dashboard snapshots.
    """

    # Every DASHBOARD_REFRESH_SECONDS (five minutes by default)
    interval = _get_or_create_interval(settings.DASHBOARD_REFRESH_SECONDS)

    task, _ = PeriodicTask.objects.update_or_create(
        name='Dashboard Snapshot Refresh',
        defaults={
            'task': 'analytics.tasks.refresh_dashboard_snapshots',
            'interval': interval,
            'crontab': None,
            'args': json.dumps([]),
            'enabled': True,
        }
    )
    return task

import json

from django_celery_beat.models import CrontabSchedule, PeriodicTask


def setup_crm_schedules():
    """Run the CRM automations hourly."""
    crontab, _ = CrontabSchedule.objects.get_or_create(
        minute="0", hour="*", day_of_week="*", day_of_month="*", month_of_year="*",
    )
    task, _ = PeriodicTask.objects.update_or_create(
        name="CRM Automations",
        defaults={
            "task": "crm.tasks.run_crm_automations",
            "crontab": crontab,
            "interval": None,
            "args": json.dumps([]),
            "enabled": True,
        },
    )
    return task

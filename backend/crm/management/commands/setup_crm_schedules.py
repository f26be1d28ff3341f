from django.core.management.base import BaseCommand

from crm.schedules import setup_crm_schedules


class Command(BaseCommand):
    help = "Setup the Celery Beat schedule for CRM automations"

    def handle(self, *args, **options):
        task = setup_crm_schedules()
        self.stdout.write(self.style.SUCCESS(f"CRM schedule set up successfully ({task.crontab})."))

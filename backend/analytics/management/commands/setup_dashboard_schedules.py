from django.core.management.base import BaseCommand

from analytics.schedules import setup_dashboard_schedules


class Command(BaseCommand):
    help = "Setup Celery Beat schedules for dashboard snapshots"

    def handle(self, *args, **options):
        task = setup_dashboard_schedules()
        self.stdout.write(
            self.style.SUCCESS(f"Dashboard schedule set up successfully ({task.interval}).")
        )

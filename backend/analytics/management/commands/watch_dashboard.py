import time

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.client import ApiClient, ApiError
from core.polling import Poller


class Command(BaseCommand):
    help = "Poll the user analytics dashboard and print its metrics on every refresh"

    def add_arguments(self, parser):
        parser.add_argument("--base-url", default=settings.API_BASE_URL)
        parser.add_argument("--token", required=True, help="Access token of a super-admin or tenant admin")
        parser.add_argument("--tenant", help="Tenant slug sent as X-Tenant")
        parser.add_argument("--interval", type=float, default=settings.DASHBOARD_REFRESH_SECONDS)
        parser.add_argument("--duration", type=float, default=0, help="Stop after this many seconds (0 = until Ctrl+C)")
        parser.add_argument("--role")
        parser.add_argument("--activity-level")

    def handle(self, *args, **options):
        if options["interval"] <= 0:
            raise CommandError("--interval must be positive.")

        client = ApiClient(options["base_url"], token=options["token"], tenant=options["tenant"])
        params = {
            "role": options["role"],
            "activity_level": options["activity_level"],
            "sort_by": "activity",
        }
        params = {key: value for key, value in params.items() if value}

        def fetch():
            return client.get("/api/admin/users/analytics/", params=params)

        poller = Poller(
            fetch,
            options["interval"],
            on_result=self._print_metrics,
            on_error=self._print_error,
            name="user-analytics",
        )

        poller.start()
        if poller.latest is None and isinstance(poller.last_error, ApiError) and poller.last_error.status in (401, 403):
            poller.stop()
            raise CommandError(f"Not allowed to read the dashboard: {poller.last_error}")

        try:
            if options["duration"]:
                time.sleep(options["duration"])
            else:
                while True:
                    time.sleep(1)
        except KeyboardInterrupt:
            pass
        finally:
            poller.stop()

        self.stdout.write("Stopped watching.")

    def _print_metrics(self, data):
        metrics = data.get("metrics", {})
        self.stdout.write(self.style.MIGRATE_HEADING(f"\nUser analytics @ {data.get('generated_at')}"))
        self.stdout.write(
            f"  users: {metrics.get('total_users', 0)}"
            f"  active: {metrics.get('active_users', 0)}"
            f"  active (30d): {metrics.get('active_last_30_days', 0)}"
            f"  new (30d): {metrics.get('new_last_30_days', 0)}"
        )
        for level, count in metrics.get("by_activity_level", {}).items():
            self.stdout.write(f"  {level:<10} {count}")

    def _print_error(self, exc):
        self.stderr.write(self.style.ERROR(f"Refresh failed: {exc}"))

from __future__ import annotations

from django.core.management.base import BaseCommand

from weather.refresh import refresh_all_cities


class Command(BaseCommand):
    help = "Fetch fresh weather for every city and update the cache."

    def handle(self, *args: object, **options: object) -> None:
        report = refresh_all_cities()
        for result in report.results:
            if result.success:
                self.stdout.write(f"{result.city_id}: ok")
            else:
                self.stderr.write(f"{result.city_id}: failed ({result.error})")
        self.stdout.write(
            f"Refreshed {report.succeeded}/{len(report.results)} cities "
            f"at {report.refreshed_at.isoformat()}"
        )

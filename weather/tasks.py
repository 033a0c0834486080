from __future__ import annotations

from celery import shared_task

from .refresh import refresh_all_cities


@shared_task
def refresh_weather_cache() -> dict[str, int]:
    """Beat entry point for the scheduled refresh pass."""

    report = refresh_all_cities()
    return {
        "cities": len(report.results),
        "succeeded": report.succeeded,
        "failed": report.failed,
    }

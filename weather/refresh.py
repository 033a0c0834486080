"""Refresh every configured city's snapshot in one sequential pass.

Shared by the Celery beat task, the `weather_refresh` management command and
the admin refresh endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from cities.services import list_cities

from .cache import WeatherCache, get_weather_cache
from .exceptions import FetchError
from .metrics import (
    weather_refresh_city_failures_total,
    weather_refresh_runs_total,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CityRefreshResult:
    city_id: str
    name: str
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class RefreshReport:
    results: tuple[CityRefreshResult, ...]
    refreshed_at: datetime

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded


def refresh_all_cities(cache: WeatherCache | None = None) -> RefreshReport:
    """Fetch and store a fresh snapshot for each city, in display order.

    A city whose fetch fails keeps its previous entry and is reported as
    failed; the pass always continues and always records the global
    refresh marker.
    """

    weather_cache = cache or get_weather_cache()
    results: list[CityRefreshResult] = []
    for city_id, city in list_cities().items():
        try:
            weather_cache.fetch_and_cache(
                city_id, city.latitude, city.longitude
            )
        except FetchError as exc:
            weather_refresh_city_failures_total.inc()
            logger.warning(
                "weather.refresh.city_failed city_id=%s err=%s",
                city_id,
                exc,
            )
            results.append(
                CityRefreshResult(
                    city_id=city_id,
                    name=city.name,
                    success=False,
                    error=str(exc),
                )
            )
            continue
        results.append(
            CityRefreshResult(city_id=city_id, name=city.name, success=True)
        )

    refreshed_at = weather_cache.record_global_refresh()
    weather_refresh_runs_total.inc()
    report = RefreshReport(results=tuple(results), refreshed_at=refreshed_at)
    logger.info(
        "weather.refresh.completed cities=%s succeeded=%s failed=%s",
        len(report.results),
        report.succeeded,
        report.failed,
    )
    return report

"""Open-Meteo geocoding search used by the city admin endpoints."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Final, cast

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_GEOCODING_URL: Final[str] = (
    "https://geocoding-api.open-meteo.com/v1/search"
)
MIN_QUERY_LENGTH: Final[int] = 2


@dataclass(frozen=True)
class GeocodingResult:
    label: str
    city_name: str
    country: str
    admin1: str
    latitude: float
    longitude: float
    population: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class GeocodingClient:
    """City name search.

    Failures are logged and produce an empty result list; a broken search
    box must not break the admin form.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url: str = base_url or cast(
            str,
            getattr(settings, "GEOCODING_API_ENDPOINT", "")
            or DEFAULT_GEOCODING_URL,
        )
        self.timeout = (
            timeout
            if timeout is not None
            else float(getattr(settings, "GEOCODING_REQUEST_TIMEOUT_S", 5.0))
        )
        self._http = http_client

    def search_cities(
        self, query: str, limit: int = 10
    ) -> list[GeocodingResult]:
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        params = {
            "name": query,
            "count": limit,
            "language": "en",
            "format": "json",
        }
        headers = {"Accept": "application/json"}
        try:
            if self._http is not None:
                response = self._http.get(
                    self.base_url,
                    params=params,
                    headers=headers,
                    timeout=self.timeout,
                )
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(
                        self.base_url, params=params, headers=headers
                    )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            logger.error(
                "geocoding.request.failed query=%s err=%s", query, exc
            )
            return []
        except ValueError as exc:
            logger.error("geocoding.parse.failed query=%s err=%s", query, exc)
            return []

        if not isinstance(data, dict):
            return []
        results = data.get("results")
        if not isinstance(results, list):
            return []
        return [
            self._to_result(item) for item in results if isinstance(item, dict)
        ]

    def _to_result(self, item: dict[str, Any]) -> GeocodingResult:
        city_name = str(item.get("name") or "")
        country = str(item.get("country") or "")
        admin1 = str(item.get("admin1") or "")
        label = ", ".join(
            part for part in (city_name, admin1, country) if part
        )
        return GeocodingResult(
            label=label,
            city_name=city_name,
            country=country,
            admin1=admin1,
            latitude=self._to_float(item.get("latitude")),
            longitude=self._to_float(item.get("longitude")),
            population=int(self._to_float(item.get("population"))),
        )

    def _to_float(self, value: Any) -> float:
        try:
            number = float(value) if value is not None else 0.0
        except (TypeError, ValueError):
            return 0.0
        return number if math.isfinite(number) else 0.0

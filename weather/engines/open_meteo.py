from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, Final, cast

import httpx
from django.conf import settings

from ..exceptions import ParseError, TransportError
from ..timeutils import ensure_aware, get_zone
from .base import WeatherProvider
from .types import CurrentConditions, DailyConditions, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL: Final[str] = "https://api.open-meteo.com/v1/forecast"
FORECAST_DAYS: Final[int] = 7
CURRENT_FIELDS: Final[str] = (
    "temperature_2m,relative_humidity_2m,precipitation_probability,"
    "wind_speed_10m,weather_code"
)
DAILY_FIELDS: Final[str] = "temperature_2m_max,temperature_2m_min,weather_code"


class OpenMeteoClient(WeatherProvider):
    """Open-Meteo implementation.

    Uses the `/v1/forecast` endpoint with `timezone=auto`, so the provider
    resolves the local zone of the coordinates and reports it back.
    """

    name = "open_meteo"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url: str = base_url or cast(
            str,
            getattr(settings, "WEATHER_API_ENDPOINT", "") or DEFAULT_BASE_URL,
        )
        # Open-Meteo does not need a key today; kept for providers that will.
        self.api_key: str = api_key or cast(
            str, getattr(settings, "WEATHER_API_KEY", "")
        )
        self.timeout = (
            timeout
            if timeout is not None
            else float(getattr(settings, "WEATHER_REQUEST_TIMEOUT_S", 10.0))
        )
        self._http = http_client

    def fetch_conditions(self, lat: float, lon: float) -> Snapshot:
        params: dict[str, Any] = {
            "latitude": lat,
            "longitude": lon,
            "current": CURRENT_FIELDS,
            "daily": DAILY_FIELDS,
            "timezone": "auto",
            "forecast_days": FORECAST_DAYS,
        }
        payload = self._request(params)
        return self._parse_snapshot(payload)

    def _request(self, params: dict[str, Any]) -> dict[str, Any]:
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
        except httpx.HTTPError as exc:
            logger.error(
                "open_meteo.request.failed url=%s err=%s", self.base_url, exc
            )
            raise TransportError(
                f"Failed to fetch weather data: {exc}"
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("open_meteo.parse.failed err=%s", exc)
            raise ParseError(f"Failed to parse weather data: {exc}") from exc
        if not isinstance(data, dict):
            logger.error(
                "open_meteo.parse.failed err=unexpected body type %s",
                type(data).__name__,
            )
            raise ParseError("Unexpected Open-Meteo response shape")
        return data

    def _parse_snapshot(self, payload: dict[str, Any]) -> Snapshot:
        tz_name = payload.get("timezone")
        if not isinstance(tz_name, str) or not tz_name:
            tz_name = "UTC"

        current_block = payload.get("current")
        if not isinstance(current_block, dict):
            current_block = {}
        current = CurrentConditions(
            observed_at=self._parse_datetime(
                current_block.get("time"), tz_name
            ),
            temperature=self._to_float(current_block.get("temperature_2m")),
            humidity=self._to_float(
                current_block.get("relative_humidity_2m")
            ),
            precipitation_probability=self._to_float(
                current_block.get("precipitation_probability")
            ),
            wind_speed=self._to_float(current_block.get("wind_speed_10m")),
            weather_code=self._to_int(current_block.get("weather_code")),
        )

        daily_block = payload.get("daily")
        if not isinstance(daily_block, dict):
            daily_block = {}
        dates = daily_block.get("time")
        if not isinstance(dates, list):
            dates = []
        t_max_list = self._as_list(daily_block.get("temperature_2m_max"))
        t_min_list = self._as_list(daily_block.get("temperature_2m_min"))
        code_list = self._as_list(daily_block.get("weather_code"))

        daily: list[DailyConditions] = []
        for idx, raw_day in enumerate(dates):
            daily.append(
                DailyConditions(
                    day=self._parse_date(raw_day),
                    temp_max=self._to_float(self._list_value(t_max_list, idx)),
                    temp_min=self._to_float(self._list_value(t_min_list, idx)),
                    weather_code=self._to_int(
                        self._list_value(code_list, idx)
                    ),
                )
            )

        return Snapshot(current=current, daily=tuple(daily), timezone=tz_name)

    def _parse_datetime(self, raw: Any, tz_name: str) -> datetime | None:
        if not isinstance(raw, str):
            return None
        candidate = raw
        if candidate.endswith("Z"):
            candidate = candidate.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
        try:
            zone = get_zone(tz_name)
        except ValueError:
            zone = get_zone("UTC")
        return ensure_aware(parsed, zone)

    def _parse_date(self, raw: Any) -> date | None:
        if not isinstance(raw, str):
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            return None

    def _as_list(self, values: Any) -> Sequence[Any]:
        return values if isinstance(values, list) else []

    def _list_value(self, values: Sequence[Any], idx: int) -> Any:
        if idx >= len(values):
            return None
        return values[idx]

    def _to_float(self, value: Any) -> float | None:
        try:
            if value is None or isinstance(value, bool):
                return None
            return float(value)
        except (TypeError, ValueError):
            return None

    def _to_int(self, value: Any) -> int | None:
        number = self._to_float(value)
        if number is None or not math.isfinite(number):
            return None
        return int(number)

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any


@dataclass(frozen=True)
class CurrentConditions:
    observed_at: datetime | None
    temperature: float | None
    humidity: float | None
    precipitation_probability: float | None
    wind_speed: float | None
    weather_code: int | None


@dataclass(frozen=True)
class DailyConditions:
    day: date | None
    temp_max: float | None
    temp_min: float | None
    weather_code: int | None


@dataclass(frozen=True)
class Snapshot:
    """Normalized current conditions plus the daily forecast for one fetch.

    Snapshots are stored as plain dicts (see `to_dict`) so cached blobs
    stay readable after the dataclasses change shape.
    """

    current: CurrentConditions
    daily: tuple[DailyConditions, ...]
    timezone: str = "UTC"

    def to_dict(self) -> dict[str, Any]:
        observed_at = self.current.observed_at
        return {
            "current": {
                "observed_at": (
                    observed_at.isoformat() if observed_at else None
                ),
                "temperature": self.current.temperature,
                "humidity": self.current.humidity,
                "precipitation_probability": (
                    self.current.precipitation_probability
                ),
                "wind_speed": self.current.wind_speed,
                "weather_code": self.current.weather_code,
            },
            "daily": [
                {
                    "day": entry.day.isoformat() if entry.day else None,
                    "temp_max": entry.temp_max,
                    "temp_min": entry.temp_min,
                    "weather_code": entry.weather_code,
                }
                for entry in self.daily
            ],
            "timezone": self.timezone,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Snapshot:
        """Rebuild a snapshot from `to_dict` output.

        Raises KeyError, TypeError or ValueError when the payload does not
        have the expected shape.
        """

        current = payload["current"]
        daily: Sequence[Mapping[str, Any]] = payload["daily"]
        if not isinstance(current, Mapping) or isinstance(daily, str | bytes):
            raise TypeError("Malformed snapshot payload")
        observed_raw = current["observed_at"]
        return cls(
            current=CurrentConditions(
                observed_at=(
                    datetime.fromisoformat(observed_raw)
                    if observed_raw
                    else None
                ),
                temperature=current["temperature"],
                humidity=current["humidity"],
                precipitation_probability=current[
                    "precipitation_probability"
                ],
                wind_speed=current["wind_speed"],
                weather_code=current["weather_code"],
            ),
            daily=tuple(
                DailyConditions(
                    day=(
                        date.fromisoformat(entry["day"])
                        if entry["day"]
                        else None
                    ),
                    temp_max=entry["temp_max"],
                    temp_min=entry["temp_min"],
                    weather_code=entry["weather_code"],
                )
                for entry in daily
            ),
            timezone=str(payload.get("timezone") or "UTC"),
        )

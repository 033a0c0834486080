from __future__ import annotations

from abc import ABC, abstractmethod

from .types import Snapshot


class WeatherProvider(ABC):
    """Abstract base for forecast providers."""

    name: str

    @abstractmethod
    def fetch_conditions(self, lat: float, lon: float) -> Snapshot:
        """Return current conditions and the daily forecast for a point.

        Implementations raise `weather.exceptions.FetchError` subclasses and
        nothing else.
        """

from __future__ import annotations

from collections.abc import Iterator

import pytest

from weather.cache import WeatherCache


@pytest.fixture(autouse=True)
def _isolated_weather_cache() -> Iterator[None]:
    """Every test starts and ends with an empty snapshot cache."""

    WeatherCache(cache_alias="weather").clear_all()
    yield
    WeatherCache(cache_alias="weather").clear_all()

from __future__ import annotations

# ruff: noqa: S101
import json
from datetime import date
from typing import Any

import httpx
import pytest
from django.conf import LazySettings

from weather.conditions import weather_description, weather_icon
from weather.engines.geocoding import GeocodingClient
from weather.engines.open_meteo import (
    CURRENT_FIELDS,
    DAILY_FIELDS,
    OpenMeteoClient,
)
from weather.exceptions import FetchError, ParseError, TransportError

MADRID_PAYLOAD: dict[str, Any] = {
    "latitude": 40.4,
    "longitude": -3.7,
    "timezone": "Europe/Madrid",
    "current": {
        "time": "2025-01-15T12:00",
        "temperature_2m": 15.2,
        "relative_humidity_2m": 45,
        "precipitation_probability": 10,
        "wind_speed_10m": 12.5,
        "weather_code": 1,
    },
    "daily": {
        "time": [f"2025-01-{day:02d}" for day in range(15, 22)],
        "temperature_2m_max": [16.0, 17.1, 15.5, 14.0, 13.2, 15.0, 16.4],
        "temperature_2m_min": [5.0, 6.2, 4.1, 3.3, 2.0, 4.4, 5.5],
        "weather_code": [1, 2, 3, 61, 63, 0, 95],
    },
}


def _client_for(
    handler: Any, *, base_url: str = "https://weather.test/v1/forecast"
) -> OpenMeteoClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return OpenMeteoClient(base_url=base_url, http_client=http)


def test_fetch_conditions_parses_snapshot() -> None:
    seen: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json=MADRID_PAYLOAD)

    snapshot = _client_for(handler).fetch_conditions(40.4168, -3.7038)

    assert snapshot.timezone == "Europe/Madrid"
    assert snapshot.current.temperature == 15.2
    assert snapshot.current.humidity == 45.0
    assert snapshot.current.precipitation_probability == 10.0
    assert snapshot.current.wind_speed == 12.5
    assert snapshot.current.weather_code == 1
    assert snapshot.current.observed_at is not None
    assert snapshot.current.observed_at.utcoffset() is not None
    assert len(snapshot.daily) == 7
    assert snapshot.daily[0].day == date(2025, 1, 15)
    assert snapshot.daily[-1].weather_code == 95

    request = seen["request"]
    assert request.headers["Accept"] == "application/json"
    params = request.url.params
    assert params["latitude"] == "40.4168"
    assert params["longitude"] == "-3.7038"
    assert params["current"] == CURRENT_FIELDS
    assert params["daily"] == DAILY_FIELDS
    assert params["timezone"] == "auto"
    assert params["forecast_days"] == "7"


def test_fetch_conditions_missing_fields_become_none() -> None:
    payload = {
        "current": {"temperature_2m": "n/a", "weather_code": True},
        "daily": {
            "time": ["2025-01-15", "not-a-date"],
            "temperature_2m_max": [10.0],
        },
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    snapshot = _client_for(handler).fetch_conditions(0.0, 0.0)

    assert snapshot.timezone == "UTC"
    assert snapshot.current.observed_at is None
    assert snapshot.current.temperature is None
    assert snapshot.current.weather_code is None
    assert snapshot.current.humidity is None
    assert [entry.day for entry in snapshot.daily] == [
        date(2025, 1, 15),
        None,
    ]
    assert snapshot.daily[0].temp_max == 10.0
    assert snapshot.daily[1].temp_max is None
    assert snapshot.daily[0].temp_min is None


@pytest.mark.parametrize("status_code", [404, 500, 503])
def test_non_success_status_raises_transport_error(status_code: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"error": True})

    with pytest.raises(TransportError) as excinfo:
        _client_for(handler).fetch_conditions(1.0, 2.0)
    assert excinfo.value.code == "transport"
    assert isinstance(excinfo.value, FetchError)


def test_timeout_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError):
        _client_for(handler).fetch_conditions(1.0, 2.0)


def test_invalid_json_raises_parse_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(ParseError) as excinfo:
        _client_for(handler).fetch_conditions(1.0, 2.0)
    assert excinfo.value.code == "parse"


def test_non_object_body_raises_parse_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps(["bad"]).encode())

    with pytest.raises(ParseError, match="Unexpected Open-Meteo"):
        _client_for(handler).fetch_conditions(1.0, 2.0)


def test_client_reads_settings(settings: LazySettings) -> None:
    settings.WEATHER_API_ENDPOINT = "https://proxy.test/forecast"
    settings.WEATHER_API_KEY = "secret-key"
    settings.WEATHER_REQUEST_TIMEOUT_S = 3

    client = OpenMeteoClient()

    assert client.base_url == "https://proxy.test/forecast"
    assert client.api_key == "secret-key"
    assert client.timeout == 3.0


def test_api_key_is_not_sent() -> None:
    seen: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json=MADRID_PAYLOAD)

    http = httpx.Client(transport=httpx.MockTransport(handler))
    client = OpenMeteoClient(
        base_url="https://weather.test/v1/forecast",
        api_key="do-not-send",
        http_client=http,
    )
    client.fetch_conditions(1.0, 2.0)

    assert "do-not-send" not in str(seen["request"].url)
    assert "do-not-send" not in str(seen["request"].headers)


def test_geocoding_search_builds_labels() -> None:
    seen: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(
            200,
            json={
                "results": [
                    {
                        "name": "Paris",
                        "admin1": "Ile-de-France",
                        "country": "France",
                        "latitude": 48.85,
                        "longitude": 2.35,
                        "population": 2138551,
                    },
                    {
                        "name": "Paris",
                        "country": "United States",
                        "latitude": 33.66,
                        "longitude": -95.55,
                    },
                ]
            },
        )

    http = httpx.Client(transport=httpx.MockTransport(handler))
    client = GeocodingClient(
        base_url="https://geo.test/v1/search", http_client=http
    )
    results = client.search_cities("  Paris ", limit=5)

    assert [result.label for result in results] == [
        "Paris, Ile-de-France, France",
        "Paris, United States",
    ]
    assert results[0].population == 2138551
    assert results[1].population == 0
    assert results[1].admin1 == ""
    params = seen["request"].url.params
    assert params["name"] == "Paris"
    assert params["count"] == "5"


def test_geocoding_short_query_skips_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    http = httpx.Client(transport=httpx.MockTransport(handler))
    client = GeocodingClient(http_client=http)

    assert client.search_cities("P") == []
    assert client.search_cities("   ") == []


def test_geocoding_failures_return_empty_list() -> None:
    def failing(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502)

    def garbage(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"not json")

    def no_results(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"generationtime_ms": 0.2})

    for handler in (failing, garbage, no_results):
        http = httpx.Client(transport=httpx.MockTransport(handler))
        client = GeocodingClient(http_client=http)
        assert client.search_cities("Berlin") == []


@pytest.mark.parametrize(
    ("code", "icon", "description"),
    [
        (0, "clear", "Clear sky"),
        (1, "partly-cloudy", "Mainly clear"),
        (2, "partly-cloudy", "Partly cloudy"),
        (3, "partly-cloudy", "Overcast"),
        (45, "fog", "Foggy"),
        (48, "fog", "Foggy"),
        (53, "rain", "Drizzle"),
        (57, "rain", "Freezing drizzle"),
        (63, "rain", "Rain"),
        (66, "rain", "Freezing rain"),
        (73, "snow", "Snow"),
        (76, "snow", "Unknown"),
        (77, "snow", "Snow grains"),
        (81, "rain-heavy", "Rain showers"),
        (86, "snow-heavy", "Snow showers"),
        (95, "thunderstorm", "Thunderstorm"),
        (99, "thunderstorm", "Thunderstorm with hail"),
        (4, "unknown", "Unknown"),
        (100, "unknown", "Unknown"),
        (-1, "unknown", "Unknown"),
        (None, "unknown", "Unknown"),
    ],
)
def test_condition_mapping(
    code: int | None, icon: str, description: str
) -> None:
    assert weather_icon(code) == icon
    assert weather_description(code) == description


def test_condition_mapping_is_total() -> None:
    known_icons = {
        "clear",
        "partly-cloudy",
        "fog",
        "rain",
        "snow",
        "rain-heavy",
        "snow-heavy",
        "thunderstorm",
        "unknown",
    }
    for code in range(-1000, 1001):
        assert weather_icon(code) in known_icons
        description = weather_description(code)
        assert isinstance(description, str) and description

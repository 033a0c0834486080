from __future__ import annotations

# ruff: noqa: S101
import secrets
from typing import Any

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from cities.services import add_city, remove_city
from preferences.models import CityPreference
from weather.cache import get_weather_cache
from weather.engines.open_meteo import OpenMeteoClient
from weather.exceptions import TransportError

from .test_engines import MADRID_PAYLOAD


class UpstreamStub:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.fail = False

    def __call__(self, params: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(params)
        if self.fail:
            raise TransportError("connection refused")
        return MADRID_PAYLOAD


@pytest.fixture()
def upstream(monkeypatch: pytest.MonkeyPatch) -> UpstreamStub:
    stub = UpstreamStub()
    monkeypatch.setattr(OpenMeteoClient, "_request", stub)
    return stub


def _user(username: str, *, staff: bool = False) -> Any:
    return get_user_model().objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=secrets.token_urlsafe(12),
        is_staff=staff,
    )


def _staff_client() -> APIClient:
    client = APIClient()
    client.force_authenticate(user=_user("weather-admin", staff=True))
    return client


@pytest.mark.django_db
def test_city_weather_includes_icons_and_descriptions(
    upstream: UpstreamStub,
) -> None:
    add_city("Madrid", 40.4168, -3.7038)
    client = APIClient()

    resp = client.get("/api/v1/weather/cities/madrid/")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == 0
    assert body["data"]["city"]["id"] == "madrid"
    weather = body["data"]["weather"]
    assert weather["timezone"] == "Europe/Madrid"
    assert weather["current"]["temperature"] == 15.2
    assert weather["current"]["icon"] == "partly-cloudy"
    assert weather["current"]["description"] == "Mainly clear"
    assert len(weather["daily"]) == 7
    assert weather["daily"][0]["day"] == "2025-01-15"
    assert weather["daily"][3]["icon"] == "rain"
    assert weather["daily"][6]["description"] == "Thunderstorm"
    assert upstream.calls[0]["latitude"] == 40.4168

    client.get("/api/v1/weather/cities/madrid/")
    assert len(upstream.calls) == 1


@pytest.mark.django_db
def test_city_weather_unknown_city_returns_404(
    upstream: UpstreamStub,
) -> None:
    resp = APIClient().get("/api/v1/weather/cities/atlantis/")

    assert resp.status_code == 404
    assert resp.json()["status"] == 1
    assert upstream.calls == []


@pytest.mark.django_db
def test_city_weather_upstream_failure_returns_500(
    upstream: UpstreamStub,
) -> None:
    add_city("Madrid", 40.4168, -3.7038)
    upstream.fail = True

    resp = APIClient().get("/api/v1/weather/cities/madrid/")

    assert resp.status_code == 500
    body = resp.json()
    assert body["message"] == "Failed to fetch weather data"
    assert body["errors"]["code"] == "weather_unavailable"


@pytest.mark.django_db
def test_widget_without_cities_returns_nulls(upstream: UpstreamStub) -> None:
    resp = APIClient().get("/api/v1/weather/widget/")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data == {"selected": None, "cities": [], "weather": None}
    assert upstream.calls == []


@pytest.mark.django_db
def test_widget_defaults_to_first_city(upstream: UpstreamStub) -> None:
    add_city("Madrid", 40.4168, -3.7038)
    add_city("Paris", 48.8566, 2.3522)

    resp = APIClient().get("/api/v1/weather/widget/")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["selected"] == "madrid"
    assert [city["id"] for city in data["cities"]] == ["madrid", "paris"]
    assert data["weather"]["current"]["temperature"] == 15.2


@pytest.mark.django_db
def test_widget_uses_cookie_and_ignores_stale_cookie(
    upstream: UpstreamStub,
) -> None:
    add_city("Madrid", 40.4168, -3.7038)
    add_city("Paris", 48.8566, 2.3522)
    client = APIClient()

    client.cookies["openmeteo_city"] = "paris"
    chosen = client.get("/api/v1/weather/widget/").json()["data"]
    assert chosen["selected"] == "paris"

    remove_city("paris")
    fallback = client.get("/api/v1/weather/widget/").json()["data"]
    assert fallback["selected"] == "madrid"


@pytest.mark.django_db
def test_widget_failure_is_retryable(upstream: UpstreamStub) -> None:
    add_city("Madrid", 40.4168, -3.7038)
    upstream.fail = True

    resp = APIClient().get("/api/v1/weather/widget/")

    assert resp.status_code == 500
    body = resp.json()
    assert body["status"] == 1
    assert body["errors"] == {"retryable": True, "city_id": "madrid"}


@pytest.mark.django_db
def test_preference_for_anonymous_sets_cookie() -> None:
    add_city("Paris", 48.8566, 2.3522)
    client = APIClient()

    resp = client.post(
        "/api/v1/weather/preference/", {"city_id": "paris"}, format="json"
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"success": True, "method": "cookie"}
    cookie = resp.cookies["openmeteo_city"]
    assert cookie.value == "paris"
    assert int(cookie["max-age"]) == 365 * 24 * 60 * 60
    assert cookie["path"] == "/"


@pytest.mark.django_db
def test_preference_for_user_is_stored_and_resolved(
    upstream: UpstreamStub,
) -> None:
    add_city("Madrid", 40.4168, -3.7038)
    add_city("Paris", 48.8566, 2.3522)
    user = _user("visitor")
    client = APIClient()
    client.force_authenticate(user=user)

    resp = client.post(
        "/api/v1/weather/preference/", {"city_id": "paris"}, format="json"
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"success": True, "method": "user_data"}
    assert "openmeteo_city" not in resp.cookies
    assert CityPreference.objects.get(user=user).city_id == "paris"
    widget = client.get("/api/v1/weather/widget/").json()["data"]
    assert widget["selected"] == "paris"


@pytest.mark.django_db
def test_preference_validation_errors() -> None:
    client = APIClient()

    missing = client.post("/api/v1/weather/preference/", {}, format="json")
    unknown = client.post(
        "/api/v1/weather/preference/", {"city_id": "nowhere"}, format="json"
    )

    assert missing.status_code == 400
    assert "city_id" in missing.json()["errors"]
    assert unknown.status_code == 404


@pytest.mark.django_db
def test_admin_endpoints_require_staff() -> None:
    anonymous = APIClient()
    member = APIClient()
    member.force_authenticate(user=_user("member"))

    for client in (anonymous, member):
        assert client.post("/api/v1/weather/refresh/").status_code == 403
        assert client.get("/api/v1/weather/cache/").status_code == 403
        assert client.delete("/api/v1/weather/cache/").status_code == 403
        assert (
            client.get("/api/v1/weather/cache/madrid/").status_code == 403
        )


@pytest.mark.django_db
def test_refresh_endpoint_reports_each_city(upstream: UpstreamStub) -> None:
    add_city("Madrid", 40.4168, -3.7038)
    add_city("Paris", 48.8566, 2.3522)

    resp = _staff_client().post("/api/v1/weather/refresh/")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [item["city_id"] for item in data["results"]] == [
        "madrid",
        "paris",
    ]
    assert [item["city"] for item in data["results"]] == ["Madrid", "Paris"]
    assert all(item["success"] for item in data["results"])
    assert data["succeeded"] == 2
    assert data["failed"] == 0
    assert data["timestamp"]
    assert len(upstream.calls) == 2
    assert get_weather_cache().get_last_global_refresh() is not None


@pytest.mark.django_db
def test_cache_status_and_clearing(upstream: UpstreamStub) -> None:
    add_city("Madrid", 40.4168, -3.7038)
    add_city("Paris", 48.8566, 2.3522)
    client = _staff_client()
    APIClient().get("/api/v1/weather/cities/madrid/")

    status_resp = client.get("/api/v1/weather/cache/")
    assert status_resp.status_code == 200
    data = status_resp.json()["data"]
    assert data["last_refresh"] is None
    assert data["caching_enabled"] is True
    by_id = {item["city_id"]: item for item in data["cities"]}
    assert by_id["madrid"]["cached"] is True
    assert by_id["madrid"]["metadata"]["is_valid"] is True
    assert by_id["paris"]["cached"] is False
    assert by_id["paris"]["metadata"] is None

    city_resp = client.get("/api/v1/weather/cache/madrid/")
    assert city_resp.status_code == 200
    assert city_resp.json()["data"]["metadata"]["age_seconds"] >= 0
    assert client.get("/api/v1/weather/cache/nowhere/").status_code == 404

    assert client.delete("/api/v1/weather/cache/madrid/").status_code == 200
    assert get_weather_cache().get_cache_metadata("madrid") is None

    APIClient().get("/api/v1/weather/cities/madrid/")
    assert client.delete("/api/v1/weather/cache/").status_code == 200
    assert get_weather_cache().get_cache_metadata("madrid") is None
    assert len(upstream.calls) == 2

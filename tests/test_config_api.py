from __future__ import annotations

# ruff: noqa: S101
from decimal import Decimal
from unittest.mock import patch

from django.test import Client
from rest_framework.exceptions import NotFound, ValidationError

from config.api.exceptions import _to_json_value, custom_exception_handler
from config.api.responses import error_response, success_response
from weather.exceptions import WeatherUnavailable


def test_success_response_payload() -> None:
    resp = success_response({"selected": "madrid"}, "Done", status_code=201)
    assert resp.status_code == 201
    assert resp.data == {
        "status": 0,
        "message": "Done",
        "data": {"selected": "madrid"},
        "errors": None,
    }


def test_error_response_payload() -> None:
    resp = error_response(
        "Bad request",
        errors={"field": ["missing"]},
        status_code=418,
    )
    assert resp.status_code == 418
    assert resp.data["status"] == 1
    assert resp.data["message"] == "Bad request"
    assert resp.data["data"] is None
    assert resp.data["errors"] == {"field": ["missing"]}


def test_custom_exception_handler_returns_500_on_unhandled() -> None:
    with patch("rest_framework.views.exception_handler", return_value=None):
        resp = custom_exception_handler(Exception("boom"), {})
    assert resp.status_code == 500
    assert resp.data["status"] == 1
    assert resp.data["message"] == "Internal server error"
    assert resp.data["data"] is None


def test_custom_exception_handler_wraps_not_found() -> None:
    resp = custom_exception_handler(NotFound("City not found"), {})
    assert resp.status_code == 404
    assert resp.data["message"] == "City not found"
    assert resp.data["errors"] == {
        "detail": "City not found",
        "code": "not_found",
    }


def test_custom_exception_handler_keeps_field_errors() -> None:
    exc = ValidationError({"latitude": ["Must be between -90 and 90."]})
    resp = custom_exception_handler(exc, {})
    assert resp.status_code == 400
    assert resp.data["message"] == "Request failed"
    assert resp.data["errors"] == {
        "latitude": ["Must be between -90 and 90."]
    }


def test_weather_unavailable_maps_to_500() -> None:
    resp = custom_exception_handler(WeatherUnavailable(), {})
    assert resp.status_code == 500
    assert resp.data["message"] == "Failed to fetch weather data"
    assert resp.data["errors"]["code"] == "weather_unavailable"


def test_to_json_value_handles_sequences() -> None:
    payload = ("ok", {"value": Decimal("1.25")})
    assert _to_json_value(payload) == ["ok", {"value": "1.25"}]


def test_home_view_returns_metadata() -> None:
    client = Client()
    resp = client.get("/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["service"] == "weather-widget"
    assert body["widget"] == "/api/v1/weather/widget/"
    assert body["docs"] == "/api/docs/"


def test_openapi_schema_lists_widget_endpoints() -> None:
    resp = Client().get("/api/schema/", HTTP_ACCEPT="application/json")
    assert resp.status_code == 200
    paths = resp.json()["paths"]
    assert "/api/v1/weather/widget/" in paths
    assert "/api/v1/cities/{city_id}/" in paths

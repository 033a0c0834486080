"""Weather widget endpoints.

Public: per-city weather, the widget payload and the visitor preference.
Staff only: the refresh pass and cache inspection/clearing.
Responses: wrapped by `config.api.responses.success_response`
(status/message/data/errors).
"""

from __future__ import annotations

import logging
from typing import cast

from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers, status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from cities.models import City
from cities.services import default_city, get_city, list_cities
from config.api.openapi import (
    error_envelope_serializer,
    success_envelope_serializer,
)
from config.api.responses import JSONValue, error_response, success_response
from preferences.services import resolve_city, save_preference

from .cache import get_weather_cache
from .exceptions import FetchError, WeatherUnavailable
from .refresh import refresh_all_cities
from .serializers import (
    CacheStatusSerializer,
    CityCacheStatusSerializer,
    CityWeatherSerializer,
    PreferenceInputSerializer,
    PreferenceResultSerializer,
    RefreshReportSerializer,
    WidgetSerializer,
    serialize_cache_metadata,
    serialize_cities,
    serialize_city,
    serialize_refresh_report,
    serialize_snapshot,
)

logger = logging.getLogger(__name__)

weather_error_schema = error_envelope_serializer("WeatherErrorResponse")
city_weather_success_schema = success_envelope_serializer(
    "CityWeatherSuccess", data=CityWeatherSerializer()
)
widget_success_schema = success_envelope_serializer(
    "WidgetSuccess", data=WidgetSerializer()
)
preference_success_schema = success_envelope_serializer(
    "PreferenceSuccess", data=PreferenceResultSerializer()
)
refresh_success_schema = success_envelope_serializer(
    "RefreshSuccess", data=RefreshReportSerializer()
)
cache_status_success_schema = success_envelope_serializer(
    "CacheStatusSuccess", data=CacheStatusSerializer()
)
city_cache_success_schema = success_envelope_serializer(
    "CityCacheSuccess", data=CityCacheStatusSerializer()
)
cache_cleared_success_schema = success_envelope_serializer(
    "CacheClearedSuccess",
    data=inline_serializer(
        name="CacheClearedData",
        fields={"cleared": serializers.CharField()},
    ),
)


def _get_city_or_404(city_id: str) -> City:
    city = get_city(city_id)
    if city is None:
        raise NotFound("City not found")
    return city


def _city_cache_status(city: City) -> dict[str, JSONValue]:
    metadata = get_weather_cache().get_cache_metadata(city.id)
    return {
        "city_id": city.id,
        "name": city.name,
        "cached": metadata is not None,
        "metadata": serialize_cache_metadata(metadata),
    }


class CityWeatherView(APIView):
    """Cached current conditions and 7-day forecast for one city.

    Auth: public.
    Errors: 404 unknown city; 500 when the provider fails and no valid
    cached snapshot exists.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        responses={
            200: city_weather_success_schema,
            404: weather_error_schema,
            500: weather_error_schema,
        },
    )
    def get(self, request: Request, city_id: str) -> Response:
        city = _get_city_or_404(city_id)
        try:
            snapshot = get_weather_cache().get_weather(
                city.id, city.latitude, city.longitude
            )
        except FetchError as exc:
            logger.error(
                "weather.api.unavailable city_id=%s err=%s", city.id, exc
            )
            raise WeatherUnavailable() from exc
        return success_response(
            {
                "city": serialize_city(city),
                "weather": serialize_snapshot(snapshot),
            }
        )


class WidgetView(APIView):
    """Everything the widget needs to render in one call.

    The selected city is the visitor's stored preference when it still
    exists, otherwise the first configured city. With no cities configured
    `selected` and `weather` are null.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        responses={
            200: widget_success_schema,
            500: weather_error_schema,
        },
    )
    def get(self, request: Request) -> Response:
        cities = serialize_cities(list(list_cities().values()))
        city = resolve_city(request) or default_city()
        if city is None:
            return success_response(
                {
                    "selected": None,
                    "cities": cast(JSONValue, cities),
                    "weather": None,
                },
                "No cities configured",
            )

        try:
            snapshot = get_weather_cache().get_weather(
                city.id, city.latitude, city.longitude
            )
        except FetchError as exc:
            logger.error(
                "weather.widget.unavailable city_id=%s err=%s", city.id, exc
            )
            return error_response(
                WeatherUnavailable.default_detail,
                errors={"retryable": True, "city_id": city.id},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return success_response(
            {
                "selected": city.id,
                "cities": cast(JSONValue, cities),
                "weather": serialize_snapshot(snapshot),
            }
        )


class PreferenceView(APIView):
    """Remember the visitor's selected city.

    Signed-in users get a stored preference (`user_data`); anonymous
    visitors get a cookie (`cookie`).
    """

    permission_classes = [AllowAny]

    @extend_schema(
        request=PreferenceInputSerializer,
        responses={
            200: preference_success_schema,
            400: weather_error_schema,
            404: weather_error_schema,
        },
    )
    def post(self, request: Request) -> Response:
        serializer = PreferenceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        city = _get_city_or_404(serializer.validated_data["city_id"])

        response = success_response(None, "Preference saved")
        method = save_preference(request, response, city.id)
        response.data["data"] = {"success": True, "method": method}
        return response


class RefreshAllView(APIView):
    """Fetch fresh snapshots for every city right now.

    Auth: staff. Runs the same pass as the scheduled task and returns one
    result per city plus the refresh timestamp.
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        request=None,
        responses={
            200: refresh_success_schema,
            403: weather_error_schema,
        },
    )
    def post(self, request: Request) -> Response:
        logger.info(
            "weather.api.refresh_requested user_id=%s",
            getattr(request.user, "id", None),
        )
        report = refresh_all_cities()
        message = (
            "Weather refreshed"
            if report.failed == 0
            else f"Weather refreshed with {report.failed} failure(s)"
        )
        return success_response(serialize_refresh_report(report), message)


class CacheStatusView(APIView):
    """Cache overview for every city, or clear the whole weather cache."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        responses={
            200: cache_status_success_schema,
            403: weather_error_schema,
        },
    )
    def get(self, request: Request) -> Response:
        weather_cache = get_weather_cache()
        last_refresh = weather_cache.get_last_global_refresh()
        return success_response(
            {
                "last_refresh": (
                    last_refresh.isoformat() if last_refresh else None
                ),
                "caching_enabled": weather_cache.caching_enabled,
                "cities": [
                    _city_cache_status(city)
                    for city in list_cities().values()
                ],
            }
        )

    @extend_schema(
        responses={
            200: cache_cleared_success_schema,
            403: weather_error_schema,
        },
    )
    def delete(self, request: Request) -> Response:
        get_weather_cache().clear_all()
        return success_response({"cleared": "all"}, "Weather cache cleared")


class CityCacheView(APIView):
    """Cache metadata for one city, or drop its cached snapshot."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        responses={
            200: city_cache_success_schema,
            403: weather_error_schema,
            404: weather_error_schema,
        },
    )
    def get(self, request: Request, city_id: str) -> Response:
        city = _get_city_or_404(city_id)
        return success_response(_city_cache_status(city))

    @extend_schema(
        responses={
            200: cache_cleared_success_schema,
            403: weather_error_schema,
        },
    )
    def delete(self, request: Request, city_id: str) -> Response:
        get_weather_cache().clear_city(city_id)
        return success_response({"cleared": city_id}, "City cache cleared")

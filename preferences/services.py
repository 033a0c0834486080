"""Where a visitor's selected city is remembered.

Signed-in users keep their choice in `CityPreference`; everyone else gets a
cookie. Resolution tries each backend that supports the request, in order,
and ignores stored ids whose city has since been removed.
"""

from __future__ import annotations

import logging
from typing import Protocol, TypeAlias, cast

from django.conf import settings
from django.http import HttpRequest, HttpResponseBase
from rest_framework.request import Request

from cities.models import City
from cities.services import get_city

from .models import CityPreference

logger = logging.getLogger(__name__)

METHOD_USER_DATA = "user_data"
METHOD_COOKIE = "cookie"

RequestLike: TypeAlias = HttpRequest | Request


class PreferenceBackend(Protocol):
    method: str

    def supports(self, request: RequestLike) -> bool: ...

    def read(self, request: RequestLike) -> str | None: ...

    def write(
        self,
        request: RequestLike,
        response: HttpResponseBase,
        city_id: str,
    ) -> str: ...


class UserPreferenceBackend:
    """Durable per-user preference stored in the database."""

    method = METHOD_USER_DATA

    def supports(self, request: RequestLike) -> bool:
        user = getattr(request, "user", None)
        return bool(user is not None and user.is_authenticated)

    def read(self, request: RequestLike) -> str | None:
        preference = CityPreference.objects.filter(user=request.user).first()
        return preference.city_id if preference else None

    def write(
        self,
        request: RequestLike,
        response: HttpResponseBase,
        city_id: str,
    ) -> str:
        CityPreference.objects.update_or_create(
            user=request.user, defaults={"city_id": city_id}
        )
        return self.method


class CookiePreferenceBackend:
    """Preference carried by a long-lived cookie the widget script can read."""

    method = METHOD_COOKIE

    @property
    def cookie_name(self) -> str:
        return cast(
            str,
            getattr(settings, "WEATHER_PREFERENCE_COOKIE", "openmeteo_city"),
        )

    @property
    def max_age(self) -> int:
        return int(
            getattr(
                settings,
                "WEATHER_PREFERENCE_COOKIE_MAX_AGE_S",
                365 * 24 * 60 * 60,
            )
        )

    def supports(self, request: RequestLike) -> bool:
        return True

    def read(self, request: RequestLike) -> str | None:
        return request.COOKIES.get(self.cookie_name) or None

    def write(
        self,
        request: RequestLike,
        response: HttpResponseBase,
        city_id: str,
    ) -> str:
        response.set_cookie(
            self.cookie_name,
            city_id,
            max_age=self.max_age,
            path="/",
            secure=False,
            httponly=False,
            samesite="Lax",
        )
        return self.method


def get_backends() -> list[PreferenceBackend]:
    return [UserPreferenceBackend(), CookiePreferenceBackend()]


def resolve_city(request: RequestLike) -> City | None:
    """Return the visitor's selected city, or None when nothing usable is
    stored in any realm the request supports."""

    for backend in get_backends():
        if not backend.supports(request):
            continue
        city_id = backend.read(request)
        if not city_id:
            continue
        city = get_city(city_id)
        if city is not None:
            return city
        logger.info(
            "preferences.stale city_id=%s method=%s",
            city_id,
            backend.method,
        )
    return None


def save_preference(
    request: RequestLike,
    response: HttpResponseBase,
    city_id: str,
) -> str:
    """Store `city_id` with the first backend that accepts the request.

    The caller validates the id. Returns the backend's method name.
    """

    for backend in get_backends():
        if backend.supports(request):
            method = backend.write(request, response, city_id)
            logger.info(
                "preferences.saved city_id=%s method=%s", city_id, method
            )
            return method
    raise RuntimeError("No preference backend accepted the request")

"""Weather error taxonomy.

Upstream failures are raised as `TransportError` or `ParseError`; callers of
the cache only need to catch `FetchError`.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException


class FetchError(Exception):
    """Fresh weather data could not be obtained from the provider."""

    def __init__(self, message: str, *, code: str = "fetch_failed") -> None:
        super().__init__(message)
        self.code = code


class TransportError(FetchError):
    """Network error, timeout or non-success HTTP status."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="transport")


class ParseError(FetchError):
    """The provider answered with a body that is not a JSON object."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="parse")


class WeatherUnavailable(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to fetch weather data"
    default_code = "weather_unavailable"

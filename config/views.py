"""Project-level non-DRF views."""

from __future__ import annotations

from django.http import HttpRequest, JsonResponse


def home(request: HttpRequest) -> JsonResponse:
    """Service check with links to the API entry points."""
    return JsonResponse(
        {
            "ok": True,
            "service": "weather-widget",
            "widget": "/api/v1/weather/widget/",
            "docs": "/api/docs/",
            "redoc": "/api/redoc/",
        }
    )

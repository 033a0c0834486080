from __future__ import annotations

from django.urls import path

from .views import (
    CacheStatusView,
    CityCacheView,
    CityWeatherView,
    PreferenceView,
    RefreshAllView,
    WidgetView,
)

urlpatterns = [
    path(
        "weather/cities/<str:city_id>/",
        CityWeatherView.as_view(),
        name="weather-city",
    ),
    path("weather/widget/", WidgetView.as_view(), name="weather-widget"),
    path(
        "weather/preference/",
        PreferenceView.as_view(),
        name="weather-preference",
    ),
    path(
        "weather/refresh/",
        RefreshAllView.as_view(),
        name="weather-refresh",
    ),
    path(
        "weather/cache/",
        CacheStatusView.as_view(),
        name="weather-cache",
    ),
    path(
        "weather/cache/<str:city_id>/",
        CityCacheView.as_view(),
        name="weather-cache-city",
    ),
]

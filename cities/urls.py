from __future__ import annotations

from django.urls import path

from .views import CityDetailView, CityListView, CitySearchView

urlpatterns = [
    path("cities/", CityListView.as_view(), name="city-list"),
    path("cities/search/", CitySearchView.as_view(), name="city-search"),
    path(
        "cities/<str:city_id>/",
        CityDetailView.as_view(),
        name="city-detail",
    ),
]

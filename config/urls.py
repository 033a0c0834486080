"""Root URL configuration.

Routes:
- GET / -> home
- /admin/ -> Django admin (staff login for the management endpoints)
- /metrics -> Prometheus exporter (django_prometheus)
- /api/schema/, /api/docs/, /api/redoc/ -> OpenAPI
- /api/v1/cities/ -> cities.urls
- /api/v1/weather/ -> weather.urls
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from .views import home

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", home, name="home"),
    path("", include("django_prometheus.urls")),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path(
        "api/redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),
    path("api/v1/", include("cities.urls")),
    path("api/v1/", include("weather.urls")),
]

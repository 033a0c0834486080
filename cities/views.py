"""City list management endpoints.

Reads are public (the widget needs the selector list); writes are staff
only. Responses use the `config.api.responses.success_response` envelope.
"""

from __future__ import annotations

import logging
from typing import cast

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiTypes,
    extend_schema,
    inline_serializer,
)
from rest_framework import serializers, status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from config.api.openapi import (
    error_envelope_serializer,
    success_envelope_serializer,
)
from config.api.responses import JSONValue, success_response
from weather.engines.geocoding import GeocodingClient

from .models import City
from .permissions import IsStaffOrReadOnly
from .serializers import (
    CityInputSerializer,
    CitySearchParamsSerializer,
    CitySerializer,
    GeocodingResultSerializer,
)
from .services import (
    add_city,
    get_city,
    list_cities,
    remove_city,
    update_city,
)

logger = logging.getLogger(__name__)

cities_error_schema = error_envelope_serializer("CitiesErrorResponse")
city_list_success_schema = success_envelope_serializer(
    "CityListSuccess",
    data=inline_serializer(
        name="CityListData",
        fields={"cities": CitySerializer(many=True)},
    ),
)
city_success_schema = success_envelope_serializer(
    "CitySuccess", data=CitySerializer()
)
city_search_success_schema = success_envelope_serializer(
    "CitySearchSuccess",
    data=inline_serializer(
        name="CitySearchData",
        fields={"results": GeocodingResultSerializer(many=True)},
    ),
)


def _get_city_or_404(city_id: str) -> City:
    city = get_city(city_id)
    if city is None:
        raise NotFound("City not found")
    return city


class CityListView(APIView):
    """List cities in display order or add a new one."""

    permission_classes = [IsStaffOrReadOnly]

    @extend_schema(responses={200: city_list_success_schema})
    def get(self, request: Request) -> Response:
        cities = list(list_cities().values())
        payload = CitySerializer(cities, many=True).data
        return success_response({"cities": cast(JSONValue, payload)})

    @extend_schema(
        request=CityInputSerializer,
        responses={
            201: city_success_schema,
            400: cities_error_schema,
            403: cities_error_schema,
        },
    )
    def post(self, request: Request) -> Response:
        serializer = CityInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        city_id = add_city(
            name=params["name"],
            latitude=params["latitude"],
            longitude=params["longitude"],
        )
        logger.info(
            "city.api.created city_id=%s user_id=%s",
            city_id,
            getattr(request.user, "id", None),
        )
        city = _get_city_or_404(city_id)
        return success_response(
            CitySerializer(city).data,
            "City added",
            status_code=status.HTTP_201_CREATED,
        )


class CityDetailView(APIView):
    """Read, update or remove a single city.

    Removing a city also clears its cached weather snapshot.
    """

    permission_classes = [IsStaffOrReadOnly]

    @extend_schema(
        responses={200: city_success_schema, 404: cities_error_schema}
    )
    def get(self, request: Request, city_id: str) -> Response:
        city = _get_city_or_404(city_id)
        return success_response(CitySerializer(city).data)

    @extend_schema(
        request=CityInputSerializer,
        responses={
            200: city_success_schema,
            400: cities_error_schema,
            403: cities_error_schema,
            404: cities_error_schema,
        },
    )
    def put(self, request: Request, city_id: str) -> Response:
        serializer = CityInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        updated = update_city(
            city_id,
            name=params["name"],
            latitude=params["latitude"],
            longitude=params["longitude"],
        )
        if not updated:
            raise NotFound("City not found")
        city = _get_city_or_404(city_id)
        return success_response(CitySerializer(city).data, "City updated")

    @extend_schema(
        responses={
            200: success_envelope_serializer(
                "CityRemovedSuccess",
                data=inline_serializer(
                    name="CityRemovedData",
                    fields={"id": serializers.CharField()},
                ),
            ),
            403: cities_error_schema,
            404: cities_error_schema,
        }
    )
    def delete(self, request: Request, city_id: str) -> Response:
        if not remove_city(city_id):
            raise NotFound("City not found")
        logger.info(
            "city.api.removed city_id=%s user_id=%s",
            city_id,
            getattr(request.user, "id", None),
        )
        return success_response({"id": city_id}, "City removed")


class CitySearchView(APIView):
    """Geocoding lookup used to fill in coordinates when adding a city."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="q",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=True,
                description="City name (at least 2 characters)",
            ),
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Maximum number of results (1-50)",
            ),
        ],
        responses={
            200: city_search_success_schema,
            400: cities_error_schema,
            403: cities_error_schema,
        },
    )
    def get(self, request: Request) -> Response:
        serializer = CitySearchParamsSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        results = GeocodingClient().search_cities(
            params["q"], limit=params["limit"]
        )
        payload = GeocodingResultSerializer(
            [result.as_dict() for result in results], many=True
        ).data
        return success_response({"results": cast(JSONValue, payload)})

from __future__ import annotations

from typing import ClassVar

from rest_framework import serializers

from .models import LAT_MAX, LAT_MIN, LON_MAX, LON_MIN, City
from .services import NAME_MAX_LENGTH


class CitySerializer(serializers.ModelSerializer):
    class Meta:
        model = City
        fields = [
            "id",
            "name",
            "latitude",
            "longitude",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CityInputSerializer(serializers.Serializer):
    name: ClassVar[serializers.CharField] = serializers.CharField(
        max_length=NAME_MAX_LENGTH
    )
    latitude: ClassVar[serializers.FloatField] = serializers.FloatField(
        min_value=LAT_MIN, max_value=LAT_MAX
    )
    longitude: ClassVar[serializers.FloatField] = serializers.FloatField(
        min_value=LON_MIN, max_value=LON_MAX
    )


class CitySearchParamsSerializer(serializers.Serializer):
    q: ClassVar[serializers.CharField] = serializers.CharField()
    limit: ClassVar[serializers.IntegerField] = serializers.IntegerField(
        required=False, default=10, min_value=1, max_value=50
    )


class GeocodingResultSerializer(serializers.Serializer):
    label: ClassVar[serializers.CharField] = serializers.CharField()
    city_name: ClassVar[serializers.CharField] = serializers.CharField()
    country: ClassVar[serializers.CharField] = serializers.CharField()
    admin1: ClassVar[serializers.CharField] = serializers.CharField()
    latitude: ClassVar[serializers.FloatField] = serializers.FloatField()
    longitude: ClassVar[serializers.FloatField] = serializers.FloatField()
    population: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField()
    )

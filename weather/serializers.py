from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar

from rest_framework import serializers

from cities.models import City
from config.api.responses import JSONValue

from .cache import CacheMetadata
from .conditions import weather_description, weather_icon
from .engines.types import CurrentConditions, DailyConditions, Snapshot
from .refresh import RefreshReport
from .timeutils import isoformat_with_tz


class ConditionFieldsMixin(serializers.Serializer):
    """Derive icon/description from `weather_code` at render time."""

    icon: ClassVar[serializers.SerializerMethodField] = (
        serializers.SerializerMethodField()
    )
    description: ClassVar[serializers.SerializerMethodField] = (
        serializers.SerializerMethodField()
    )

    def get_icon(self, obj: CurrentConditions | DailyConditions) -> str:
        return weather_icon(obj.weather_code)

    def get_description(
        self, obj: CurrentConditions | DailyConditions
    ) -> str:
        return weather_description(obj.weather_code)


class CurrentConditionsSerializer(ConditionFieldsMixin):
    observed_at: ClassVar[serializers.SerializerMethodField] = (
        serializers.SerializerMethodField()
    )
    temperature: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    humidity: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    precipitation_probability: ClassVar[serializers.FloatField] = (
        serializers.FloatField(allow_null=True)
    )
    wind_speed: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    weather_code: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField(allow_null=True)
    )

    def get_observed_at(self, obj: CurrentConditions) -> str | None:
        if obj.observed_at is None:
            return None
        return isoformat_with_tz(obj.observed_at)


class DailyConditionsSerializer(ConditionFieldsMixin):
    day: ClassVar[serializers.DateField] = serializers.DateField(
        allow_null=True
    )
    temp_max: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    temp_min: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    weather_code: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField(allow_null=True)
    )


class SnapshotSerializer(serializers.Serializer):
    current: ClassVar[CurrentConditionsSerializer] = (
        CurrentConditionsSerializer()
    )
    daily: ClassVar[DailyConditionsSerializer] = DailyConditionsSerializer(
        many=True
    )
    timezone: ClassVar[serializers.CharField] = serializers.CharField()


class CitySummarySerializer(serializers.Serializer):
    id: ClassVar[serializers.CharField] = serializers.CharField()
    name: ClassVar[serializers.CharField] = serializers.CharField()
    latitude: ClassVar[serializers.FloatField] = serializers.FloatField()
    longitude: ClassVar[serializers.FloatField] = serializers.FloatField()


class CityWeatherSerializer(serializers.Serializer):
    city: ClassVar[CitySummarySerializer] = CitySummarySerializer()
    weather: ClassVar[SnapshotSerializer] = SnapshotSerializer()


class WidgetSerializer(serializers.Serializer):
    selected: ClassVar[serializers.CharField] = serializers.CharField(
        allow_null=True
    )
    cities: ClassVar[CitySummarySerializer] = CitySummarySerializer(
        many=True
    )
    weather: ClassVar[SnapshotSerializer] = SnapshotSerializer(
        allow_null=True
    )


class PreferenceInputSerializer(serializers.Serializer):
    city_id: ClassVar[serializers.CharField] = serializers.CharField()


class PreferenceResultSerializer(serializers.Serializer):
    success: ClassVar[serializers.BooleanField] = serializers.BooleanField()
    method: ClassVar[serializers.ChoiceField] = serializers.ChoiceField(
        choices=["user_data", "cookie"]
    )


class CacheMetadataSerializer(serializers.Serializer):
    created_at: ClassVar[serializers.DateTimeField] = (
        serializers.DateTimeField()
    )
    expires_at: ClassVar[serializers.DateTimeField] = (
        serializers.DateTimeField()
    )
    is_valid: ClassVar[serializers.BooleanField] = serializers.BooleanField()
    age_seconds: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField()
    )


class CityCacheStatusSerializer(serializers.Serializer):
    city_id: ClassVar[serializers.CharField] = serializers.CharField()
    name: ClassVar[serializers.CharField] = serializers.CharField()
    cached: ClassVar[serializers.BooleanField] = serializers.BooleanField()
    metadata: ClassVar[CacheMetadataSerializer] = CacheMetadataSerializer(
        allow_null=True
    )


class CacheStatusSerializer(serializers.Serializer):
    last_refresh: ClassVar[serializers.DateTimeField] = (
        serializers.DateTimeField(allow_null=True)
    )
    caching_enabled: ClassVar[serializers.BooleanField] = (
        serializers.BooleanField()
    )
    cities: ClassVar[CityCacheStatusSerializer] = CityCacheStatusSerializer(
        many=True
    )


class CityRefreshResultSerializer(serializers.Serializer):
    city_id: ClassVar[serializers.CharField] = serializers.CharField()
    city: ClassVar[serializers.CharField] = serializers.CharField(
        source="name"
    )
    success: ClassVar[serializers.BooleanField] = serializers.BooleanField()
    error: ClassVar[serializers.CharField] = serializers.CharField(
        allow_null=True
    )


class RefreshReportSerializer(serializers.Serializer):
    results: ClassVar[CityRefreshResultSerializer] = (
        CityRefreshResultSerializer(many=True)
    )
    timestamp: ClassVar[serializers.DateTimeField] = (
        serializers.DateTimeField(source="refreshed_at")
    )
    succeeded: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField()
    )
    failed: ClassVar[serializers.IntegerField] = serializers.IntegerField()


def serialize_city(city: City) -> dict[str, JSONValue]:
    return dict(CitySummarySerializer(city).data)


def serialize_cities(cities: Sequence[City]) -> list[dict[str, JSONValue]]:
    return list(CitySummarySerializer(cities, many=True).data)


def serialize_snapshot(snapshot: Snapshot) -> dict[str, JSONValue]:
    return dict(SnapshotSerializer(snapshot).data)


def serialize_cache_metadata(
    metadata: CacheMetadata | None,
) -> dict[str, JSONValue] | None:
    if metadata is None:
        return None
    return dict(CacheMetadataSerializer(metadata).data)


def serialize_refresh_report(report: RefreshReport) -> dict[str, JSONValue]:
    return dict(RefreshReportSerializer(report).data)

"""Per-city weather snapshot cache.

Entries are written to a dedicated Django cache alias without a backend
timeout: validity is decided here from the stored expiry, so an expired
entry stays readable until a successful fetch overwrites it or an admin
clears it. A failed refresh never evicts data.

Concurrency: every write is a single `cache.set` of a complete blob, so a
reader sees either the previous entry or the new one. A refresh pass racing
an on-demand read for the same city may expose either; last writer wins.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Final, cast

from django.conf import settings
from django.core.cache import BaseCache, caches
from django.utils import timezone

from .engines.base import WeatherProvider
from .engines.open_meteo import OpenMeteoClient
from .engines.types import Snapshot
from .exceptions import FetchError
from .metrics import (
    weather_cache_hits_total,
    weather_cache_misses_total,
    weather_last_refresh_timestamp_seconds,
    weather_provider_errors_total,
    weather_provider_latency_seconds,
    weather_provider_requests_total,
    weather_stale_fallbacks_total,
)
from .models import RefreshMarker
from .timeutils import from_epoch

logger = logging.getLogger(__name__)

# Fixed lifetime (3 hours); not exposed as a setting.
CACHE_LIFETIME_SECONDS: Final[int] = 10800
CACHE_KEY_PREFIX: Final[str] = "weather:snapshot:"


def cache_key(city_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}{city_id}"


@dataclass(frozen=True)
class CacheEntry:
    snapshot: Snapshot
    created_at: datetime
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at

    def to_blob(self) -> dict[str, Any]:
        return {
            "created": int(self.created_at.timestamp()),
            "expire": int(self.expires_at.timestamp()),
            "data": self.snapshot.to_dict(),
        }

    @classmethod
    def from_blob(cls, blob: object) -> CacheEntry | None:
        """Decode a stored blob; anything malformed reads as absent."""

        if not isinstance(blob, Mapping):
            return None
        created = blob.get("created")
        expire = blob.get("expire")
        data = blob.get("data")
        if not isinstance(created, int) or not isinstance(expire, int):
            return None
        if not isinstance(data, Mapping):
            return None
        try:
            snapshot = Snapshot.from_dict(data)
        except (KeyError, TypeError, ValueError):
            return None
        return cls(
            snapshot=snapshot,
            created_at=from_epoch(created),
            expires_at=from_epoch(expire),
        )


@dataclass(frozen=True)
class CacheMetadata:
    created_at: datetime
    expires_at: datetime
    is_valid: bool
    age_seconds: int


class WeatherCache:
    """Serve per-city snapshots from cache or fetch them from the provider."""

    def __init__(
        self,
        *,
        provider: WeatherProvider | None = None,
        cache_alias: str | None = None,
        clock: Callable[[], datetime] | None = None,
        lifetime_seconds: int = CACHE_LIFETIME_SECONDS,
    ) -> None:
        self.provider = provider or OpenMeteoClient()
        self.cache_alias = cache_alias or cast(
            str, getattr(settings, "WEATHER_CACHE_ALIAS", "weather")
        )
        self._clock = clock or timezone.now
        self.lifetime = timedelta(seconds=lifetime_seconds)

    @property
    def store(self) -> BaseCache:
        return caches[self.cache_alias]

    @property
    def caching_enabled(self) -> bool:
        return bool(getattr(settings, "WEATHER_CACHE_ENABLED", True))

    def get_weather(
        self,
        city_id: str,
        lat: float,
        lon: float,
        force_fresh: bool = False,
    ) -> Snapshot:
        """Return a valid cached snapshot or fetch (and store) a fresh one.

        Raises FetchError when the provider fails and no valid entry exists.
        An expired entry is left untouched by a failed fetch.
        """

        caching_enabled = self.caching_enabled
        if caching_enabled and not force_fresh:
            entry = self._read_entry(city_id)
            if entry is not None and entry.is_valid(self._clock()):
                weather_cache_hits_total.inc()
                return entry.snapshot
            weather_cache_misses_total.labels(
                reason="expired" if entry is not None else "absent"
            ).inc()
        else:
            weather_cache_misses_total.labels(
                reason="forced" if force_fresh else "disabled"
            ).inc()

        try:
            return self._fetch_and_store(
                city_id, lat, lon, trigger="on_demand"
            )
        except FetchError:
            if not (caching_enabled and force_fresh):
                raise
            entry = self._read_entry(city_id)
            if entry is None or not entry.is_valid(self._clock()):
                raise
            logger.warning(
                "weather.cache.fallback city_id=%s expires_at=%s",
                city_id,
                entry.expires_at.isoformat(),
            )
            weather_stale_fallbacks_total.inc()
            return entry.snapshot

    def fetch_and_cache(
        self, city_id: str, lat: float, lon: float
    ) -> Snapshot:
        """Always call the provider; store the result on success."""

        return self._fetch_and_store(city_id, lat, lon, trigger="refresh")

    def clear_city(self, city_id: str) -> None:
        self.store.delete(cache_key(city_id))
        logger.info("weather.cache.cleared city_id=%s", city_id)

    def clear_all(self) -> None:
        """Drop every snapshot.

        On Redis only keys under `CACHE_KEY_PREFIX` are deleted: `clear()`
        would run FLUSHDB and take the default cache and the Celery queue
        with it. Backends without pattern deletion (locmem) get their own
        store per alias, so clearing the alias is enough there.
        """

        delete_pattern = getattr(self.store, "delete_pattern", None)
        if delete_pattern is not None:
            removed = delete_pattern(f"{CACHE_KEY_PREFIX}*")
            logger.info(
                "weather.cache.cleared_all alias=%s removed=%s",
                self.cache_alias,
                removed,
            )
            return
        self.store.clear()
        logger.info("weather.cache.cleared_all alias=%s", self.cache_alias)

    def get_cache_metadata(self, city_id: str) -> CacheMetadata | None:
        entry = self._read_entry(city_id)
        if entry is None:
            return None
        now = self._clock()
        age = int((now - entry.created_at).total_seconds())
        return CacheMetadata(
            created_at=entry.created_at,
            expires_at=entry.expires_at,
            is_valid=entry.is_valid(now),
            age_seconds=age,
        )

    def get_last_global_refresh(self) -> datetime | None:
        marker = RefreshMarker.objects.filter(
            name=RefreshMarker.GLOBAL
        ).first()
        return marker.refreshed_at if marker else None

    def record_global_refresh(self) -> datetime:
        now = self._clock().replace(microsecond=0)
        RefreshMarker.objects.update_or_create(
            name=RefreshMarker.GLOBAL,
            defaults={"refreshed_at": now},
        )
        weather_last_refresh_timestamp_seconds.set(now.timestamp())
        return now

    def _fetch_and_store(
        self, city_id: str, lat: float, lon: float, *, trigger: str
    ) -> Snapshot:
        provider_name = getattr(self.provider, "name", "unknown")
        weather_provider_requests_total.labels(
            provider=provider_name, trigger=trigger
        ).inc()
        start_time = time.perf_counter()
        try:
            snapshot = self.provider.fetch_conditions(lat, lon)
        except FetchError as exc:
            weather_provider_errors_total.labels(
                provider=provider_name,
                trigger=trigger,
                error_type=exc.__class__.__name__,
            ).inc()
            logger.warning(
                "weather.fetch.failed city_id=%s trigger=%s err=%s",
                city_id,
                trigger,
                exc,
            )
            raise
        finally:
            duration = time.perf_counter() - start_time
            weather_provider_latency_seconds.labels(
                provider=provider_name
            ).observe(duration)

        now = self._clock().replace(microsecond=0)
        entry = CacheEntry(
            snapshot=snapshot,
            created_at=now,
            expires_at=now + self.lifetime,
        )
        self.store.set(cache_key(city_id), entry.to_blob(), None)
        logger.info(
            "weather.cache.stored city_id=%s trigger=%s expires_at=%s",
            city_id,
            trigger,
            entry.expires_at.isoformat(),
        )
        return snapshot

    def _read_entry(self, city_id: str) -> CacheEntry | None:
        return CacheEntry.from_blob(self.store.get(cache_key(city_id)))


def get_weather_cache() -> WeatherCache:
    """Build the cache wired to the configured provider and alias."""

    return WeatherCache()

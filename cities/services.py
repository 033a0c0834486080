"""City store: an ordered id -> City mapping backed by the `City` table.

The first city in insertion order is the widget default. Removing a city
also drops its cached weather snapshot.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Container
from typing import Final

from django.db import IntegrityError, transaction
from django.db.models import Max
from rest_framework.exceptions import ValidationError

from weather.cache import WeatherCache, get_weather_cache

from .models import LAT_MAX, LAT_MIN, LON_MAX, LON_MIN, City

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH: Final[int] = 120
ADD_CITY_ATTEMPTS: Final[int] = 3
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")


def generate_city_id(name: str, existing: Container[str]) -> str:
    """Derive a unique id from a display name.

    "New York" -> "new_york"; a second "New York" -> "new_york_1".

    Leading and trailing separators are stripped, so "New York!" gives
    "new_york" rather than "new_york_". Ids stored with a trailing
    underscore are not regenerated and keep working as they are.
    """

    base = _NON_ALNUM.sub("_", name).strip("_").lower()[:NAME_MAX_LENGTH]
    base = base or "city"
    candidate = base
    counter = 1
    while candidate in existing:
        candidate = f"{base}_{counter}"
        counter += 1
    return candidate


def _coordinate(
    value: object, low: float, high: float
) -> tuple[float | None, str | None]:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None, "A valid number is required."
    if not math.isfinite(number) or not low <= number <= high:
        return None, f"Must be between {low:g} and {high:g}."
    return number, None


def validate_city_input(
    name: object, latitude: object, longitude: object
) -> tuple[str, float, float]:
    """Return cleaned (name, lat, lon) or raise a field-scoped error."""

    errors: dict[str, list[str]] = {}

    cleaned_name = name.strip() if isinstance(name, str) else ""
    if not cleaned_name:
        errors["name"] = ["City name is required."]
    elif len(cleaned_name) > NAME_MAX_LENGTH:
        errors["name"] = [
            f"Ensure this field has no more than {NAME_MAX_LENGTH} "
            "characters."
        ]

    lat, lat_error = _coordinate(latitude, LAT_MIN, LAT_MAX)
    if lat_error:
        errors["latitude"] = [lat_error]
    lon, lon_error = _coordinate(longitude, LON_MIN, LON_MAX)
    if lon_error:
        errors["longitude"] = [lon_error]

    if errors or lat is None or lon is None:
        raise ValidationError(errors)
    return cleaned_name, lat, lon


def list_cities() -> dict[str, City]:
    return {city.id: city for city in City.objects.order_by("position")}


def get_city(city_id: str) -> City | None:
    return City.objects.filter(id=city_id).first()


def default_city() -> City | None:
    return City.objects.order_by("position").first()


def _insert_city(name: str, lat: float, lon: float) -> str:
    with transaction.atomic():
        existing = set(City.objects.values_list("id", flat=True))
        city_id = generate_city_id(name, existing)
        last_position = City.objects.aggregate(last=Max("position"))["last"]
        City.objects.create(
            id=city_id,
            name=name,
            latitude=lat,
            longitude=lon,
            position=0 if last_position is None else last_position + 1,
        )
    return city_id


def add_city(name: str, latitude: float, longitude: float) -> str:
    """Insert a city at the end of the list and return its new id.

    A concurrent add can take the same id or position between the read
    and the insert; the unique constraints reject the loser, which
    recomputes both and tries again.
    """

    cleaned_name, lat, lon = validate_city_input(name, latitude, longitude)
    attempt = 1
    while True:
        try:
            city_id = _insert_city(cleaned_name, lat, lon)
        except IntegrityError:
            if attempt >= ADD_CITY_ATTEMPTS:
                logger.error(
                    "city.add_failed name=%s attempts=%s",
                    cleaned_name,
                    attempt,
                )
                raise
            logger.warning(
                "city.add_conflict name=%s attempt=%s", cleaned_name, attempt
            )
            attempt += 1
            continue
        break
    logger.info(
        "city.added city_id=%s name=%s lat=%s lon=%s",
        city_id,
        cleaned_name,
        lat,
        lon,
    )
    return city_id


def update_city(
    city_id: str, name: str, latitude: float, longitude: float
) -> bool:
    cleaned_name, lat, lon = validate_city_input(name, latitude, longitude)
    with transaction.atomic():
        city = City.objects.select_for_update().filter(id=city_id).first()
        if city is None:
            return False
        city.name = cleaned_name
        city.latitude = lat
        city.longitude = lon
        city.save(
            update_fields=["name", "latitude", "longitude", "updated_at"]
        )
    logger.info("city.updated city_id=%s", city_id)
    return True


def remove_city(city_id: str, *, cache: WeatherCache | None = None) -> bool:
    """Delete a city, then its cached snapshot.

    A request racing the removal may still read the snapshot in between;
    nothing routes to it once the city row is gone.
    """

    deleted, _ = City.objects.filter(id=city_id).delete()
    if not deleted:
        return False
    (cache or get_weather_cache()).clear_city(city_id)
    logger.info("city.removed city_id=%s", city_id)
    return True

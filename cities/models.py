from __future__ import annotations

from typing import Final

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

LAT_MIN: Final[float] = -90.0
LAT_MAX: Final[float] = 90.0
LON_MIN: Final[float] = -180.0
LON_MAX: Final[float] = 180.0


class City(models.Model):
    """A city offered by the weather widget.

    `id` is derived from the name once and never changes. `position` keeps
    insertion order: the first city is the default one.
    """

    id = models.CharField(primary_key=True, max_length=140, editable=False)
    name = models.CharField(max_length=120)
    latitude = models.FloatField(
        validators=[MinValueValidator(LAT_MIN), MaxValueValidator(LAT_MAX)],
    )
    longitude = models.FloatField(
        validators=[MinValueValidator(LON_MIN), MaxValueValidator(LON_MAX)],
    )
    position = models.PositiveIntegerField(unique=True, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["position"]
        verbose_name_plural = "cities"

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"

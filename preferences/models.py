from __future__ import annotations

from django.conf import settings
from django.db import models


class CityPreference(models.Model):
    """The city a signed-in user last picked in the widget.

    Stores the id only: a removed city leaves the row in place and the
    preference simply stops resolving.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="city_preference",
    )
    city_id = models.CharField(max_length=140)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user_id} -> {self.city_id}"

from __future__ import annotations

from django.db import models


class RefreshMarker(models.Model):
    """Named timestamp of the last completed refresh pass.

    Only the `global` marker is used today; it is written by the refresh
    driver and never by per-city on-demand fetches.
    """

    GLOBAL = "global"

    name = models.CharField(max_length=64, unique=True)
    refreshed_at = models.DateTimeField()

    def __str__(self) -> str:
        return f"{self.name} @ {self.refreshed_at.isoformat()}"

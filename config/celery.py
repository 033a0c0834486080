"""Celery app; beat runs `weather.tasks.refresh_weather_cache`.

Schedule and broker come from the `CELERY_*` Django settings.
"""

from __future__ import annotations

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("weather_widget")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

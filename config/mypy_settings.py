from __future__ import annotations

import os

# ---- Safe defaults so importing config.settings
# won't explode during mypy ----
os.environ.setdefault("DJANGO_SECRET_KEY", "mypy-only-not-for-prod")
os.environ.setdefault("DB_NAME", "mypy.sqlite3")

from .settings import *  # noqa: F401,F403,E402

DEBUG = False
USE_TZ = True
WEATHER_CACHE_ENABLED = True

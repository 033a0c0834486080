"""Django settings for the weather widget service.

Every deployment-specific value is read from the environment; the defaults
are suitable for local development and the test suite.
"""

from __future__ import annotations

import os
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def env(name: str, default: str | None = None) -> str:
    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(f"{name} must be an integer") from exc


SECRET_KEY = env("DJANGO_SECRET_KEY", "django-insecure-local-dev-only")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [
    host.strip()
    for host in env("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_prometheus",
    "rest_framework",
    "drf_spectacular",
    "cities",
    "weather",
    "preferences",
]

MIDDLEWARE = [
    "django_prometheus.middleware.PrometheusBeforeMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "django_prometheus.middleware.PrometheusAfterMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

DB_ENGINE = env("DB_ENGINE", "django.db.backends.sqlite3")
if DB_ENGINE == "django.db.backends.sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": env("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": env("DB_NAME"),
            "USER": env("DB_USER"),
            "PASSWORD": env("DB_PASSWORD", ""),
            "HOST": env("DB_HOST", "localhost"),
            "PORT": env("DB_PORT", ""),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Snapshots live in their own alias. On Redis both aliases may share one
# database with the Celery broker, so the weather cache deletes its keys by
# pattern (django-redis `delete_pattern`) and never flushes the database.
REDIS_URL = os.environ.get("REDIS_URL")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "KEY_PREFIX": "widget",
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
            },
        },
        "weather": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": env("WEATHER_REDIS_URL", REDIS_URL),
            "KEY_PREFIX": "weather",
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
            },
        },
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "widget-default",
        },
        "weather": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "widget-weather",
        },
    }

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "config.api.exceptions.custom_exception_handler",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Weather Widget API",
    "DESCRIPTION": (
        "Cached current conditions and 7-day forecasts for a configured "
        "list of cities."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

LOG_LEVEL = env("DJANGO_LOG_LEVEL", "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "cities": {"handlers": ["console"], "level": LOG_LEVEL},
        "weather": {"handlers": ["console"], "level": LOG_LEVEL},
        "preferences": {"handlers": ["console"], "level": LOG_LEVEL},
        "config": {"handlers": ["console"], "level": LOG_LEVEL},
    },
}

# Weather provider and cache
WEATHER_API_ENDPOINT = env(
    "WEATHER_API_ENDPOINT", "https://api.open-meteo.com/v1/forecast"
)
WEATHER_API_KEY = env("WEATHER_API_KEY", "")
WEATHER_CACHE_ENABLED = env_bool("WEATHER_CACHE_ENABLED", True)
WEATHER_CACHE_ALIAS = env("WEATHER_CACHE_ALIAS", "weather")
WEATHER_REQUEST_TIMEOUT_S = env_int("WEATHER_REQUEST_TIMEOUT_S", 10)
GEOCODING_API_ENDPOINT = env(
    "GEOCODING_API_ENDPOINT",
    "https://geocoding-api.open-meteo.com/v1/search",
)
GEOCODING_REQUEST_TIMEOUT_S = env_int("GEOCODING_REQUEST_TIMEOUT_S", 5)

# Visitor city preference
WEATHER_PREFERENCE_COOKIE = env("WEATHER_PREFERENCE_COOKIE", "openmeteo_city")
WEATHER_PREFERENCE_COOKIE_MAX_AGE_S = env_int(
    "WEATHER_PREFERENCE_COOKIE_MAX_AGE_S", 365 * 24 * 60 * 60
)

# Scheduled refresh
WEATHER_REFRESH_INTERVAL_S = env_int("WEATHER_REFRESH_INTERVAL_S", 10800)

CELERY_BROKER_URL = env("CELERY_BROKER_URL", REDIS_URL or "memory://")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND")
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    "refresh-weather-cache": {
        "task": "weather.tasks.refresh_weather_cache",
        "schedule": float(WEATHER_REFRESH_INTERVAL_S),
    },
}

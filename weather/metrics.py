from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

weather_provider_requests_total = Counter(
    "weather_provider_requests_total",
    "Total weather provider requests",
    labelnames=["provider", "trigger"],
)

weather_provider_errors_total = Counter(
    "weather_provider_errors_total",
    "Total weather provider request errors",
    labelnames=["provider", "trigger", "error_type"],
)

weather_provider_latency_seconds = Histogram(
    "weather_provider_latency_seconds",
    "Latency of weather provider requests",
    labelnames=["provider"],
    buckets=(0.1, 0.3, 0.5, 1, 2, 5, 10, 20, 30),
)

weather_cache_hits_total = Counter(
    "weather_cache_hits_total",
    "Cache hits for per-city weather snapshots",
)

weather_cache_misses_total = Counter(
    "weather_cache_misses_total",
    "Cache misses for per-city weather snapshots",
    labelnames=["reason"],
)

weather_stale_fallbacks_total = Counter(
    "weather_stale_fallbacks_total",
    "Forced refreshes that failed and served the still-valid entry",
)

weather_refresh_runs_total = Counter(
    "weather_refresh_runs_total",
    "Completed refresh passes over all cities",
)

weather_refresh_city_failures_total = Counter(
    "weather_refresh_city_failures_total",
    "Per-city failures during refresh passes",
)

weather_last_refresh_timestamp_seconds = Gauge(
    "weather_last_refresh_timestamp_seconds",
    "Unix time of the last completed refresh pass",
)

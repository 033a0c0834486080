from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def get_zone(tz_str: str) -> ZoneInfo:
    """Return a ZoneInfo instance or raise for invalid input."""

    try:
        return ZoneInfo(tz_str)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone: {tz_str}") from exc


def ensure_aware(dt: datetime, tz: tzinfo) -> datetime:
    """Attach or convert timezone information to a datetime."""

    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def isoformat_with_tz(dt: datetime, tz: tzinfo | None = None) -> str:
    """Return an ISO8601 string with timezone offset."""

    zone = tz or dt.tzinfo or UTC
    aware = ensure_aware(dt, zone)
    return aware.isoformat()


def from_epoch(seconds: int) -> datetime:
    """Return an aware UTC datetime for a Unix timestamp."""

    return datetime.fromtimestamp(seconds, tz=UTC)

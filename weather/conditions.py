"""WMO weather code to icon/description mapping.

Both functions are total: every integer (and a missing code) maps to a
value, with "unknown" for anything outside the documented ranges.
"""

from __future__ import annotations

from typing import Final, Literal

IconName = Literal[
    "clear",
    "partly-cloudy",
    "fog",
    "rain",
    "snow",
    "rain-heavy",
    "snow-heavy",
    "thunderstorm",
    "unknown",
]

UNKNOWN_ICON: Final[IconName] = "unknown"
UNKNOWN_DESCRIPTION: Final[str] = "Unknown"

# Inclusive ranges, checked in order.
_ICON_RANGES: Final[tuple[tuple[int, int, IconName], ...]] = (
    (0, 0, "clear"),
    (1, 3, "partly-cloudy"),
    (45, 48, "fog"),
    (51, 67, "rain"),
    (71, 77, "snow"),
    (80, 82, "rain-heavy"),
    (85, 86, "snow-heavy"),
    (95, 99, "thunderstorm"),
)

_DESCRIPTION_RANGES: Final[tuple[tuple[int, int, str], ...]] = (
    (0, 0, "Clear sky"),
    (1, 1, "Mainly clear"),
    (2, 2, "Partly cloudy"),
    (3, 3, "Overcast"),
    (45, 48, "Foggy"),
    (51, 55, "Drizzle"),
    (56, 57, "Freezing drizzle"),
    (61, 65, "Rain"),
    (66, 67, "Freezing rain"),
    (71, 75, "Snow"),
    (77, 77, "Snow grains"),
    (80, 82, "Rain showers"),
    (85, 86, "Snow showers"),
    (95, 95, "Thunderstorm"),
    (96, 99, "Thunderstorm with hail"),
)


def weather_icon(code: int | None) -> IconName:
    if code is None:
        return UNKNOWN_ICON
    for low, high, icon in _ICON_RANGES:
        if low <= code <= high:
            return icon
    return UNKNOWN_ICON


def weather_description(code: int | None) -> str:
    if code is None:
        return UNKNOWN_DESCRIPTION
    for low, high, description in _DESCRIPTION_RANGES:
        if low <= code <= high:
            return description
    return UNKNOWN_DESCRIPTION

# weather_math.py
"""Small numeric helpers: rounding and the wind‑chill apparent temperature."""

import math
from typing import Any, Optional

# WMO / NOAA wind chill applies at or below 10 °C and above 4.68 km/h (1.3 m/s)
WIND_CHILL_MAX_TEMP_C = 10.0
WIND_CHILL_MIN_WIND_KMH = 4.68
MS_TO_KMH = 3.6


def round_tenth(value: float) -> float:
    """Round to one decimal, halves away from zero (2.25 -> 2.3, -2.25 -> -2.3)."""
    return math.copysign(math.floor(abs(value) * 10 + 0.5) / 10, value)


def is_number(value: Any) -> bool:
    """True for finite ints and floats (bools excluded)."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def wind_chill(temperature_c: float, wind_speed_kmh: float) -> float:
    v016 = wind_speed_kmh ** 0.16
    return 13.12 + 0.6215 * temperature_c - 11.37 * v016 + 0.3965 * temperature_c * v016


def feels_like(temperature_c: Any, wind_speed_ms: Any) -> Optional[float]:
    """
    Apparent temperature in °C, or ``None`` when either input is missing.

    Below the wind‑chill envelope the air temperature is returned as is.
    """
    temp = _as_float(temperature_c)
    wind_ms = _as_float(wind_speed_ms)
    if temp is None or wind_ms is None:
        return None

    wind_kmh = wind_ms * MS_TO_KMH
    if temp <= WIND_CHILL_MAX_TEMP_C and wind_kmh > WIND_CHILL_MIN_WIND_KMH:
        return round_tenth(wind_chill(temp, wind_kmh))
    return temp

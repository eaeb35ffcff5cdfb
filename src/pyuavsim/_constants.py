"""Internal constants and small numeric helpers shared across the library."""

from __future__ import annotations

import math

# ------------------------------------------------------------------
# Initial state (Seattle test field)
# ------------------------------------------------------------------

DEFAULT_LATITUDE = 47.6062
DEFAULT_LONGITUDE = -122.3321
DEFAULT_ALTITUDE = 45.2
DEFAULT_BATTERY_VOLTAGE = 12.6
DEFAULT_BATTERY_PERCENT = 85
DEFAULT_HEADING = 90.0
DEFAULT_GROUNDSPEED = 5.2

# ------------------------------------------------------------------
# Battery reference voltages (3S LiPo)
# ------------------------------------------------------------------

BATTERY_EMPTY_VOLTAGE = 10.5
BATTERY_FULL_VOLTAGE = 12.6

# ------------------------------------------------------------------
# Track geometry
# ------------------------------------------------------------------

#: Rough metres per degree of latitude; good enough for a local track plot.
METERS_PER_DEGREE = 111_000.0


def battery_percent_from_voltage(
    voltage: float,
    *,
    empty_voltage: float = BATTERY_EMPTY_VOLTAGE,
    full_voltage: float = BATTERY_FULL_VOLTAGE,
    clamp: bool = False,
) -> int:
    """Map a pack voltage linearly onto a percentage.

    Rounds half up.  The result is **not** clamped unless *clamp* is set, so
    an over-drained pack reports a negative percentage.
    """
    ratio = (voltage - empty_voltage) / (full_voltage - empty_voltage)
    percent = math.floor(ratio * 100 + 0.5)
    if clamp:
        return max(0, min(100, percent))
    return percent


def bearing_deg(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> float:
    """Compass bearing in degree space (0 = north, 90 = east), in ``[0, 360)``."""
    dx = to_lon - from_lon
    dy = to_lat - from_lat
    return (math.degrees(math.atan2(dx, dy)) + 360.0) % 360.0


def planar_distance(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
    """Euclidean distance in raw degree space."""
    return math.hypot(lat_a - lat_b, lon_a - lon_b)


def ground_distance_m(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
    """Equirectangular ground distance in metres, scaled at *lat_b*."""
    north = (lat_b - lat_a) * METERS_PER_DEGREE
    east = (lon_b - lon_a) * METERS_PER_DEGREE * math.cos(math.radians(lat_b))
    return math.hypot(north, east)

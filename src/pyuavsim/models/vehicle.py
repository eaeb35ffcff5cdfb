"""Vehicle telemetry models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pyuavsim._constants import (
    DEFAULT_ALTITUDE,
    DEFAULT_BATTERY_PERCENT,
    DEFAULT_BATTERY_VOLTAGE,
    DEFAULT_GROUNDSPEED,
    DEFAULT_HEADING,
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
)
from pyuavsim.models._base import UavBaseModel


class FlightMode(StrEnum):
    """Flight-mode labels.

    Only ``GUIDED``, ``RTL`` and ``LAND`` drive behaviour.  The others are
    listed for callers that want named constants; any non-empty label is
    accepted and stored verbatim.
    """

    GUIDED = "GUIDED"
    RTL = "RTL"
    LAND = "LAND"
    STABILIZE = "STABILIZE"
    ALT_HOLD = "ALT_HOLD"
    LOITER = "LOITER"
    AUTO = "AUTO"


class HomePosition(UavBaseModel):
    """Launch reference the vehicle returns to in RTL."""

    latitude: float = Field(default=DEFAULT_LATITUDE, ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(default=DEFAULT_LONGITUDE, ge=-180.0, le=180.0, allow_inf_nan=False)


class VehicleState(UavBaseModel):
    """Immutable telemetry snapshot.

    Parameters
    ----------
    armed : bool
        Motors armed.
    mode : str
        Flight-mode label, see :class:`FlightMode`.
    altitude : float
        Metres above the home reference.
    latitude : float
        Decimal degrees.
    longitude : float
        Decimal degrees.
    battery_voltage : float
        Pack voltage.
    battery_percent : int
        Derived from ``battery_voltage`` by the store; never set on its own.
    heading : float
        Compass bearing in degrees, ``[0, 360)``.
    groundspeed : float
        Metres per second.
    """

    armed: bool = True
    mode: str = FlightMode.GUIDED.value
    altitude: float = DEFAULT_ALTITUDE
    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    battery_voltage: float = DEFAULT_BATTERY_VOLTAGE
    battery_percent: int = DEFAULT_BATTERY_PERCENT
    heading: float = DEFAULT_HEADING
    groundspeed: float = DEFAULT_GROUNDSPEED

    @property
    def position(self) -> tuple[float, float]:
        """``(latitude, longitude)``."""
        return (self.latitude, self.longitude)

    @property
    def is_landed(self) -> bool:
        """Disarmed on the ground."""
        return not self.armed and self.altitude <= 0.0

"""Return-to-launch homing state machine.

Pure functions only: the store calls :func:`rtl_step` once per tick while
the vehicle is in ``RTL`` and applies the returned patch.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pyuavsim._constants import bearing_deg, planar_distance
from pyuavsim.config import SimulatorConfig
from pyuavsim.models.vehicle import FlightMode, HomePosition, VehicleState


class RtlPhase(StrEnum):
    APPROACHING = "approaching"
    DESCENDING = "descending"
    LANDED = "landed"


def rtl_phase(state: VehicleState, home: HomePosition, config: SimulatorConfig) -> RtlPhase:
    """Classify *state* into the homing phase it is in."""
    distance = planar_distance(state.latitude, state.longitude, home.latitude, home.longitude)
    if distance > config.rtl_arrival_threshold:
        return RtlPhase.APPROACHING
    if state.altitude > config.rtl_land_altitude:
        return RtlPhase.DESCENDING
    return RtlPhase.LANDED


def rtl_step(
    state: VehicleState,
    home: HomePosition,
    config: SimulatorConfig,
) -> tuple[RtlPhase, dict[str, Any]]:
    """Compute one homing step.

    - Approaching: close ``rtl_approach_fraction`` of the remaining distance
      and point the heading at home.  Altitude is held.
    - Descending: sink ``rtl_descent_step`` metres.
    - Landed: touch down, disarm and switch to ``LAND``, which ends homing.
    """
    phase = rtl_phase(state, home, config)
    if phase is RtlPhase.APPROACHING:
        fraction = config.rtl_approach_fraction
        latitude = state.latitude + (home.latitude - state.latitude) * fraction
        longitude = state.longitude + (home.longitude - state.longitude) * fraction
        return phase, {
            "latitude": latitude,
            "longitude": longitude,
            "heading": bearing_deg(latitude, longitude, home.latitude, home.longitude),
        }
    if phase is RtlPhase.DESCENDING:
        return phase, {"altitude": state.altitude - config.rtl_descent_step}
    return phase, {"altitude": 0.0, "armed": False, "mode": FlightMode.LAND.value}

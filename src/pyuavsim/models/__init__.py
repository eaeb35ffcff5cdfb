"""Pydantic models for vehicle telemetry and command requests."""

from pyuavsim.models._base import UavBaseModel
from pyuavsim.models.commands import (
    CommandParams,
    CommandRequest,
    CommandType,
    FlyToParams,
    SetModeParams,
    TakeoffParams,
    parse_params,
    parse_request,
)
from pyuavsim.models.vehicle import FlightMode, HomePosition, VehicleState

__all__ = [
    "CommandParams",
    "CommandRequest",
    "CommandType",
    "FlightMode",
    "FlyToParams",
    "HomePosition",
    "SetModeParams",
    "TakeoffParams",
    "UavBaseModel",
    "VehicleState",
    "parse_params",
    "parse_request",
]

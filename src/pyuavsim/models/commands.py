"""Command request models.

The intent layer (chat, voice, language model) hands the simulator a
discriminated ``{"type": ..., "params": {...}}`` value.  These models
provide a consistent "validate -> normalize -> execute" flow for it and for
the direct executor methods.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pyuavsim.exceptions import InvalidParameterError
from pyuavsim.models._base import invalid_parameter_from

TParams = TypeVar("TParams", bound="CommandParams")


class CommandType(StrEnum):
    """Command tags accepted from collaborators."""

    ARM = "arm"
    DISARM = "disarm"
    TAKEOFF = "takeoff"
    RTL = "rtl"
    SET_MODE = "setMode"
    FLY_TO = "flyTo"
    LAND = "land"


class CommandParams(BaseModel):
    """Base class for command parameter models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        validate_default=True,
        str_strip_whitespace=True,
        allow_inf_nan=False,
    )


class TakeoffParams(CommandParams):
    altitude: float | None = Field(default=None, ge=0.0)


class FlyToParams(CommandParams):
    """Fly-to target; omitted fields hold the current value."""

    lat: float | None = Field(default=None, ge=-90.0, le=90.0)
    lon: float | None = Field(default=None, ge=-180.0, le=180.0)
    alt: float | None = Field(default=None, ge=0.0)


class SetModeParams(CommandParams):
    mode: str = "GUIDED"

    @field_validator("mode", mode="before")
    @classmethod
    def _mode_default(cls, value: Any) -> Any:
        return "GUIDED" if value is None else value

    @field_validator("mode")
    @classmethod
    def _mode_non_empty(cls, value: str) -> str:
        mode = value.strip()
        if not mode:
            raise ValueError("mode must be non-empty")
        return mode


class CommandRequest(BaseModel):
    """A single command from the intent layer."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: CommandType
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value


def parse_params(model: type[TParams], data: Mapping[str, Any] | None, *, context: str) -> TParams:
    """Validate *data* into *model*, raising :class:`InvalidParameterError` on failure."""
    try:
        return model.model_validate(dict(data or {}))
    except ValidationError as exc:
        raise invalid_parameter_from(exc, context=context) from exc


def parse_request(request: CommandRequest | Mapping[str, Any]) -> CommandRequest:
    """Normalize a mapping or model into a :class:`CommandRequest`."""
    if isinstance(request, CommandRequest):
        return request
    if not isinstance(request, Mapping):
        raise InvalidParameterError(
            f"Command request must be a mapping, got {type(request).__name__}",
            parameter="request",
            value=request,
        )
    try:
        return CommandRequest.model_validate(dict(request))
    except ValidationError as exc:
        raise invalid_parameter_from(exc, context="command") from exc

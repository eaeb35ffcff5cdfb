"""Normalized state updates.

Every mutation source (periodic tick, RTL homing, commands, progressions)
expresses its change as a :class:`StateUpdate`.  Only the state store is
allowed to apply them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

#: Fields a patch may carry.  ``battery_percent`` is derived, never patched.
PATCHABLE_FIELDS: frozenset[str] = frozenset(
    {
        "armed",
        "mode",
        "altitude",
        "latitude",
        "longitude",
        "battery_voltage",
        "heading",
        "groundspeed",
    }
)


class MutationSource(StrEnum):
    TICK = "tick"
    RTL = "rtl"
    COMMAND = "command"
    PROGRESSION = "progression"


class StateUpdate(BaseModel):
    """A patch to apply to the vehicle state."""

    model_config = ConfigDict(frozen=True)

    source: MutationSource
    data: dict[str, Any] = Field(default_factory=dict, description="Field -> new value")

    @field_validator("data")
    @classmethod
    def _known_fields_only(cls, value: dict[str, Any]) -> dict[str, Any]:
        unknown = set(value) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot patch fields: {', '.join(sorted(unknown))}")
        return value

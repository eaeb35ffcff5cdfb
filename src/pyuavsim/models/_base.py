"""Base model for pyuavsim value types.

Every telemetry and command model inherits from :class:`UavBaseModel`
which provides:

* ``frozen=True`` so a snapshot handed to an observer can never be
  mutated, by the observer or by anyone else.
* ``alias_generator=to_camel`` so the UI-facing camelCase keys
  (``batteryVoltage``, ``groundspeed``) map to snake_case fields, while
  ``populate_by_name`` keeps Python callers on the snake_case names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from pyuavsim.exceptions import InvalidParameterError


class UavBaseModel(BaseModel):
    """Base for immutable pyuavsim models."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_camel_dict(self) -> dict[str, Any]:
        """Return the model as a camelCase dict, the shape UI consumers expect."""
        return self.model_dump(by_alias=True)


def invalid_parameter_from(exc: ValidationError, *, context: str) -> InvalidParameterError:
    """Convert the first pydantic error in *exc* into an :class:`InvalidParameterError`."""
    errors = exc.errors()
    if not errors:
        return InvalidParameterError(f"Invalid {context} parameters")
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return InvalidParameterError(
        f"Invalid {context} parameter {loc or '<root>'}: {message}",
        parameter=loc,
        value=first.get("input"),
    )

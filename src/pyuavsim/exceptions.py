"""Custom exception hierarchy for pyuavsim."""

from __future__ import annotations

from typing import Any


class UavSimError(Exception):
    """Base exception for all pyuavsim errors."""


class UavSimConfigError(UavSimError):
    """Invalid simulator configuration."""


class InvalidParameterError(UavSimError, ValueError):
    """A command was dispatched with malformed parameters.

    Raised for non-finite numbers, negative altitudes, coordinates outside
    their valid ranges, blank mode labels and unknown command tags.  The
    vehicle state is never modified when this is raised.
    """

    def __init__(
        self,
        message: str,
        *,
        parameter: str = "",
        value: Any = None,
    ) -> None:
        self.parameter = parameter
        self.value = value
        super().__init__(message)


class SimulatorStateError(UavSimError):
    """Simulator used outside its lifecycle (e.g. after it was closed)."""

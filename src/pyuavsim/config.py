"""Simulator configuration for pyuavsim."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyuavsim._constants import BATTERY_EMPTY_VOLTAGE, BATTERY_FULL_VOLTAGE
from pyuavsim.exceptions import UavSimConfigError
from pyuavsim.state.policy import ProgressionPolicy


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class SimulatorConfig:
    """Simulator configuration.

    Parameters
    ----------
    tick_interval : float
        Seconds between periodic ticks (noise, battery drain, RTL homing).
    sample_interval : float
        Seconds between progression samples for takeoff and fly-to.
    takeoff_duration : float
        Wall-clock seconds a takeoff ascent takes, whatever the height.
    fly_to_duration : float
        Wall-clock seconds a fly-to leg takes, whatever the distance.
    altitude_noise : float
        Half-width in metres of the uniform altitude perturbation per tick.
    battery_drain_max : float
        Upper bound in volts of the per-tick battery drain.
    battery_empty_voltage : float
        Voltage mapped to 0 %.
    battery_full_voltage : float
        Voltage mapped to 100 %.
    clamp_battery_percent : bool
        Clamp the derived percentage to ``[0, 100]``.  Off by default: the
        raw linear value is reported, so an over-drained pack goes negative.
    rtl_arrival_threshold : float
        Planar distance in degrees below which RTL considers itself home.
    rtl_approach_fraction : float
        Fraction of the remaining distance to home covered per tick.
    rtl_descent_step : float
        Metres descended per tick once home.
    rtl_land_altitude : float
        Altitude at or below which RTL touches down and disarms.
    default_takeoff_altitude : float
        Altitude used when a takeoff request omits one.
    groundspeed_min : float
        Lower bound (inclusive) of the fly-to groundspeed draw in m/s.
    groundspeed_max : float
        Upper bound (exclusive) of the fly-to groundspeed draw in m/s.
    progression_policy : ProgressionPolicy
        Whether new commands interrupt running progressions.
    seed : int or None
        Seed for the simulator's random source.  ``None`` seeds from the OS.
    """

    tick_interval: float = 1.0
    sample_interval: float = 0.1
    takeoff_duration: float = 5.0
    fly_to_duration: float = 10.0
    altitude_noise: float = 0.1
    battery_drain_max: float = 0.01
    battery_empty_voltage: float = BATTERY_EMPTY_VOLTAGE
    battery_full_voltage: float = BATTERY_FULL_VOLTAGE
    clamp_battery_percent: bool = False
    rtl_arrival_threshold: float = 1e-4
    rtl_approach_fraction: float = 0.1
    rtl_descent_step: float = 0.5
    rtl_land_altitude: float = 5.0
    default_takeoff_altitude: float = 10.0
    groundspeed_min: float = 5.0
    groundspeed_max: float = 7.0
    progression_policy: ProgressionPolicy = ProgressionPolicy.CONCURRENT
    seed: int | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise :class:`UavSimConfigError` when the values cannot drive a simulation."""
        for name in ("tick_interval", "sample_interval", "takeoff_duration", "fly_to_duration"):
            if not getattr(self, name) > 0:
                raise UavSimConfigError(f"{name} must be positive, got {getattr(self, name)!r}")
        for name in ("altitude_noise", "battery_drain_max", "rtl_descent_step", "rtl_land_altitude"):
            if getattr(self, name) < 0:
                raise UavSimConfigError(f"{name} must not be negative, got {getattr(self, name)!r}")
        if self.battery_full_voltage <= self.battery_empty_voltage:
            raise UavSimConfigError("battery_full_voltage must be greater than battery_empty_voltage")
        if not 0 < self.rtl_approach_fraction <= 1:
            raise UavSimConfigError("rtl_approach_fraction must be in (0, 1]")
        if self.rtl_arrival_threshold <= 0:
            raise UavSimConfigError("rtl_arrival_threshold must be positive")
        if self.groundspeed_max < self.groundspeed_min:
            raise UavSimConfigError("groundspeed_max must not be below groundspeed_min")
        if self.default_takeoff_altitude < 0:
            raise UavSimConfigError("default_takeoff_altitude must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> SimulatorConfig:
        """Create configuration from environment variables.

        Reads optional ``UAVSIM_*`` variables.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        SimulatorConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_FLOAT_MAP = {
            "UAVSIM_TICK_INTERVAL": "tick_interval",
            "UAVSIM_SAMPLE_INTERVAL": "sample_interval",
            "UAVSIM_TAKEOFF_DURATION": "takeoff_duration",
            "UAVSIM_FLY_TO_DURATION": "fly_to_duration",
            "UAVSIM_ALTITUDE_NOISE": "altitude_noise",
            "UAVSIM_BATTERY_DRAIN_MAX": "battery_drain_max",
            "UAVSIM_DEFAULT_TAKEOFF_ALTITUDE": "default_takeoff_altitude",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = float(val)
                except ValueError as exc:
                    raise UavSimConfigError(f"{env_key} must be numeric, got {val!r}") from exc

        if "clamp_battery_percent" not in overrides:
            config_kwargs["clamp_battery_percent"] = _env_bool(env.get("UAVSIM_CLAMP_BATTERY_PERCENT"), False)

        policy_env = env.get("UAVSIM_PROGRESSION_POLICY")
        if policy_env is not None and "progression_policy" not in overrides:
            try:
                config_kwargs["progression_policy"] = ProgressionPolicy(policy_env.strip().lower())
            except ValueError as exc:
                raise UavSimConfigError(f"Unknown progression policy {policy_env!r}") from exc

        seed_env = env.get("UAVSIM_SEED")
        if seed_env is not None and "seed" not in overrides:
            try:
                config_kwargs["seed"] = int(seed_env)
            except ValueError as exc:
                raise UavSimConfigError(f"UAVSIM_SEED must be an integer, got {seed_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

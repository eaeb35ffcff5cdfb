"""Vehicle state store.

This is the only component allowed to mutate vehicle state.  It owns the
canonical :class:`VehicleState`, the periodic tick task and the observer
registry.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from typing import Any

from pyuavsim._constants import battery_percent_from_voltage
from pyuavsim.config import SimulatorConfig
from pyuavsim.models.vehicle import FlightMode, HomePosition, VehicleState
from pyuavsim.state.events import MutationSource, StateUpdate
from pyuavsim.state.observers import ObserverRegistry, StateCallback, Subscription
from pyuavsim.state.rtl import RtlPhase, rtl_step

_logger = logging.getLogger(__name__)


class VehicleStateStore:
    """In-memory store for one simulated vehicle.

    Snapshots returned by :meth:`get_state` are immutable, and the store
    swaps in a new instance on every mutation, so a snapshot a caller holds
    never changes underneath it.

    The periodic tick is an explicit task started with :meth:`start` and
    cancelled with :meth:`stop`.  Tests may skip both and call :meth:`tick`
    directly to step time by hand.
    """

    def __init__(
        self,
        *,
        initial_state: VehicleState | None = None,
        home: HomePosition | None = None,
        config: SimulatorConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or SimulatorConfig()
        self._rng = rng or random.Random(self._config.seed)
        state = initial_state or VehicleState()
        self._state = state.model_copy(update={"battery_percent": self._percent(state.battery_voltage)})
        self._home = home or HomePosition(latitude=state.latitude, longitude=state.longitude)
        self._observers = ObserverRegistry()
        self._tick_task: asyncio.Task[None] | None = None
        self._rtl_phase: RtlPhase | None = None

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def config(self) -> SimulatorConfig:
        return self._config

    @property
    def rng(self) -> random.Random:
        return self._rng

    @property
    def home(self) -> HomePosition:
        return self._home

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def get_state(self) -> VehicleState:
        """Return the current snapshot."""
        return self._state

    def subscribe(self, callback: StateCallback) -> Subscription:
        """Register *callback* and deliver the current snapshot to it immediately."""
        handle = self._observers.subscribe(callback)
        self._observers.deliver(handle, self._state)
        return handle

    def unsubscribe(self, handle: object) -> None:
        self._observers.unsubscribe(handle)

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def apply(self, update: StateUpdate) -> VehicleState:
        """Apply *update*, notify observers, and return the new snapshot."""
        data: dict[str, Any] = dict(update.data)
        if "mode" in data:
            data["mode"] = str(data["mode"])
        if "battery_voltage" in data:
            data["battery_percent"] = self._percent(data["battery_voltage"])
        merged = self._state.model_dump()
        merged.update(data)
        self._state = VehicleState.model_validate(merged)
        _logger.debug("Apply source=%s fields=%s", update.source.value, sorted(update.data))
        self._observers.notify(self._state)
        return self._state

    def patch(self, source: MutationSource, **data: Any) -> VehicleState:
        """Shorthand for ``apply(StateUpdate(source=source, data=data))``."""
        return self.apply(StateUpdate(source=source, data=data))

    def tick(self) -> VehicleState:
        """Run one periodic update: noise, battery drain, and RTL homing."""
        config = self._config
        state = self._state
        data: dict[str, Any] = {
            "battery_voltage": state.battery_voltage - self._rng.random() * config.battery_drain_max,
        }
        # A vehicle sitting on the ground does not drift.
        if state.altitude > 0.0:
            noise = (self._rng.random() - 0.5) * 2.0 * config.altitude_noise
            data["altitude"] = max(0.0, state.altitude + noise)

        source = MutationSource.TICK
        if state.mode == FlightMode.RTL:
            source = MutationSource.RTL
            phase, rtl_patch = rtl_step(state.model_copy(update=data), self._home, config)
            if phase is not self._rtl_phase:
                _logger.debug("RTL phase %s -> %s", self._rtl_phase, phase)
                self._rtl_phase = phase
            data.update(rtl_patch)
        else:
            self._rtl_phase = None

        return self.apply(StateUpdate(source=source, data=data))

    def _percent(self, voltage: float) -> int:
        return battery_percent_from_voltage(
            voltage,
            empty_voltage=self._config.battery_empty_voltage,
            full_voltage=self._config.battery_full_voltage,
            clamp=self._config.clamp_battery_percent,
        )

    # ------------------------------------------------------------------
    # Periodic tick lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the periodic tick on the running event loop (no-op if running)."""
        if self.is_running:
            return
        self._tick_task = asyncio.get_running_loop().create_task(self._run_ticks(), name="pyuavsim-tick")
        _logger.debug("Tick loop started interval=%.3fs", self._config.tick_interval)

    async def stop(self) -> None:
        """Cancel the periodic tick and wait for it to finish.  Idempotent."""
        task = self._tick_task
        self._tick_task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.debug("Tick loop stopped")

    async def _run_ticks(self) -> None:
        interval = self._config.tick_interval
        while True:
            await asyncio.sleep(interval)
            try:
                self.tick()
            except Exception:
                _logger.exception("Periodic tick failed")

    async def __aenter__(self) -> VehicleStateStore:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

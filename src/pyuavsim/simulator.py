"""High-level async facade for one simulated vehicle."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pyuavsim.config import SimulatorConfig
from pyuavsim.exceptions import SimulatorStateError
from pyuavsim.executor import CommandExecutor
from pyuavsim.models.commands import CommandRequest
from pyuavsim.models.vehicle import HomePosition, VehicleState
from pyuavsim.state.observers import StateCallback, Subscription
from pyuavsim.state.store import VehicleStateStore

_logger = logging.getLogger(__name__)


class UavSimulator:
    """Owns a state store and a command executor for one session.

    Usage::

        async with UavSimulator(config) as sim:
            sim.subscribe(render)
            await sim.takeoff(20)
            await sim.fly_to(47.61, -122.33, 50)
            await sim.return_to_launch()
            await sim.wait_for_state(lambda s: s.mode == "LAND", timeout=300)
    """

    def __init__(
        self,
        config: SimulatorConfig | None = None,
        *,
        initial_state: VehicleState | None = None,
        home: HomePosition | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or SimulatorConfig()
        self._store = VehicleStateStore(initial_state=initial_state, home=home, config=self._config, rng=rng)
        self._executor = CommandExecutor(self._store, config=self._config)
        self._closed = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> UavSimulator:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def start(self) -> None:
        if self._closed:
            raise SimulatorStateError("Simulator already closed")
        self._store.start()

    async def close(self) -> None:
        """Cancel progressions and stop the tick.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._executor.cancel_progressions()
        await self._store.stop()
        _logger.debug("Simulator closed")

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def store(self) -> VehicleStateStore:
        return self._store

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    @property
    def home(self) -> HomePosition:
        return self._store.home

    def get_state(self) -> VehicleState:
        return self._store.get_state()

    def subscribe(self, callback: StateCallback) -> Subscription:
        return self._store.subscribe(callback)

    def unsubscribe(self, handle: object) -> None:
        self._store.unsubscribe(handle)

    async def wait_for_state(
        self,
        predicate: Callable[[VehicleState], bool],
        *,
        timeout: float | None = None,
    ) -> VehicleState:
        """Wait until a snapshot satisfies *predicate* and return it.

        Checks the current snapshot first.  Raises :class:`TimeoutError`
        when *timeout* elapses; an exception raised by *predicate* is
        re-raised to the caller.
        """
        future: asyncio.Future[VehicleState] = asyncio.get_running_loop().create_future()

        def _on_state(snapshot: VehicleState) -> None:
            if future.done():
                return
            try:
                matched = predicate(snapshot)
            except Exception as exc:
                future.set_exception(exc)
                return
            if matched:
                future.set_result(snapshot)

        handle = self._store.subscribe(_on_state)
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        finally:
            handle.unsubscribe()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _require_open(self) -> CommandExecutor:
        if self._closed:
            raise SimulatorStateError("Simulator closed. Create a new UavSimulator for a new session.")
        return self._executor

    async def arm(self) -> bool:
        return await self._require_open().arm()

    async def disarm(self) -> bool:
        return await self._require_open().disarm()

    async def set_mode(self, mode: str) -> bool:
        return await self._require_open().set_mode(mode)

    async def takeoff(self, target_altitude: float | None = None) -> bool:
        return await self._require_open().takeoff(target_altitude)

    async def fly_to(self, lat: float | None = None, lon: float | None = None, alt: float | None = None) -> bool:
        return await self._require_open().fly_to(lat, lon, alt)

    async def return_to_launch(self) -> bool:
        return await self._require_open().return_to_launch()

    async def land(self) -> bool:
        return await self._require_open().land()

    async def execute(self, request: CommandRequest | Mapping[str, Any]) -> bool:
        return await self._require_open().execute(request)

    async def execute_all(self, requests: Iterable[CommandRequest | Mapping[str, Any]]) -> bool:
        return await self._require_open().execute_all(requests)

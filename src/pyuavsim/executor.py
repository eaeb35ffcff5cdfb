"""Command executor.

Validates command parameters, performs inline preconditions (auto-arm,
auto-GUIDED) and drives time-bounded progressions by repeatedly patching
the state store.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pyuavsim._constants import bearing_deg
from pyuavsim.config import SimulatorConfig
from pyuavsim.exceptions import UavSimError
from pyuavsim.models.commands import (
    CommandRequest,
    CommandType,
    FlyToParams,
    SetModeParams,
    TakeoffParams,
    parse_params,
    parse_request,
)
from pyuavsim.models.vehicle import FlightMode
from pyuavsim.state.events import MutationSource
from pyuavsim.state.policy import should_preempt
from pyuavsim.state.store import VehicleStateStore

_logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CommandExecutor:
    """Async command surface over a :class:`VehicleStateStore`.

    Every command resolves to ``True`` on success.  Malformed parameters
    raise :class:`~pyuavsim.exceptions.InvalidParameterError` before the
    state is touched.  A progression interrupted under
    :attr:`~pyuavsim.state.policy.ProgressionPolicy.PREEMPT` resolves ``False``.

    Under the default ``CONCURRENT`` policy a new command does not stop a
    running takeoff or fly-to; both keep writing state, and the periodic
    tick keeps running alongside them.
    """

    def __init__(
        self,
        store: VehicleStateStore,
        *,
        config: SimulatorConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._config = config or store.config
        self._clock = clock
        self._progressions: set[asyncio.Task[bool]] = set()

    @property
    def store(self) -> VehicleStateStore:
        return self._store

    @property
    def active_progressions(self) -> int:
        return sum(1 for task in self._progressions if not task.done())

    # ------------------------------------------------------------------
    # Instant commands
    # ------------------------------------------------------------------

    async def arm(self) -> bool:
        self._preempt(CommandType.ARM)
        self._store.patch(MutationSource.COMMAND, armed=True)
        return True

    async def disarm(self) -> bool:
        self._preempt(CommandType.DISARM)
        self._store.patch(MutationSource.COMMAND, armed=False)
        return True

    async def set_mode(self, mode: str) -> bool:
        params = parse_params(SetModeParams, {"mode": mode}, context="setMode")
        self._preempt(CommandType.SET_MODE)
        self._store.patch(MutationSource.COMMAND, mode=params.mode)
        return True

    async def return_to_launch(self) -> bool:
        """Switch to RTL.  Homing itself runs on the store's periodic tick."""
        self._preempt(CommandType.RTL)
        self._store.patch(MutationSource.COMMAND, mode=FlightMode.RTL.value)
        return True

    async def land(self) -> bool:
        self._preempt(CommandType.LAND)
        self._store.patch(MutationSource.COMMAND, mode=FlightMode.LAND.value)
        return True

    # ------------------------------------------------------------------
    # Progressions
    # ------------------------------------------------------------------

    async def takeoff(self, target_altitude: float | None = None) -> bool:
        """Arm if needed, switch to GUIDED and climb to *target_altitude*."""
        params = parse_params(TakeoffParams, {"altitude": target_altitude}, context="takeoff")
        target = params.altitude if params.altitude is not None else self._config.default_takeoff_altitude
        self._preempt(CommandType.TAKEOFF)

        if not self._store.get_state().armed:
            await self.arm()
        self._store.patch(MutationSource.COMMAND, mode=FlightMode.GUIDED.value)

        start_alt = self._store.get_state().altitude
        _logger.debug("Takeoff %.1fm -> %.1fm", start_alt, target)

        def _sample(progress: float) -> dict[str, Any]:
            return {"altitude": start_alt + (target - start_alt) * progress}

        return await self._progress(self._config.takeoff_duration, _sample, name="takeoff")

    async def fly_to(
        self,
        lat: float | None = None,
        lon: float | None = None,
        alt: float | None = None,
    ) -> bool:
        """Fly in a straight line to ``(lat, lon, alt)``; omitted values hold."""
        params = parse_params(FlyToParams, {"lat": lat, "lon": lon, "alt": alt}, context="flyTo")
        self._preempt(CommandType.FLY_TO)

        if self._store.get_state().mode != FlightMode.GUIDED:
            await self.set_mode(FlightMode.GUIDED.value)

        start = self._store.get_state()
        start_lat, start_lon, start_alt = start.latitude, start.longitude, start.altitude
        target_lat = params.lat if params.lat is not None else start_lat
        target_lon = params.lon if params.lon is not None else start_lon
        target_alt = params.alt if params.alt is not None else start_alt

        low, high = self._config.groundspeed_min, self._config.groundspeed_max
        groundspeed = low + self._store.rng.random() * (high - low)
        self._store.patch(
            MutationSource.COMMAND,
            heading=bearing_deg(start_lat, start_lon, target_lat, target_lon),
            groundspeed=groundspeed,
        )
        _logger.debug(
            "Fly-to (%.6f, %.6f, %.1f) -> (%.6f, %.6f, %.1f)",
            start_lat,
            start_lon,
            start_alt,
            target_lat,
            target_lon,
            target_alt,
        )

        def _sample(progress: float) -> dict[str, Any]:
            return {
                "latitude": start_lat + (target_lat - start_lat) * progress,
                "longitude": start_lon + (target_lon - start_lon) * progress,
                "altitude": start_alt + (target_alt - start_alt) * progress,
            }

        return await self._progress(self._config.fly_to_duration, _sample, name="fly_to")

    def cancel_progressions(self) -> int:
        """Cancel every in-flight progression; returns how many were cancelled."""
        cancelled = 0
        for task in list(self._progressions):
            if not task.done():
                task.cancel()
                cancelled += 1
        if cancelled:
            _logger.debug("Cancelled %d in-flight progression(s)", cancelled)
        return cancelled

    def _preempt(self, command: CommandType) -> None:
        if should_preempt(self._config.progression_policy, command.value):
            self.cancel_progressions()

    async def _progress(
        self,
        duration: float,
        sample: Callable[[float], dict[str, Any]],
        *,
        name: str,
    ) -> bool:
        task = asyncio.get_running_loop().create_task(self._run_progression(duration, sample), name=f"pyuavsim-{name}")
        self._progressions.add(task)
        task.add_done_callback(self._progressions.discard)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                _logger.debug("Progression %s interrupted", name)
                return False
            # The awaiting caller was cancelled, not the progression.
            task.cancel()
            raise

    async def _run_progression(self, duration: float, sample: Callable[[float], dict[str, Any]]) -> bool:
        clock = self._clock or asyncio.get_running_loop().time
        started = clock()
        while True:
            await asyncio.sleep(self._config.sample_interval)
            progress = min((clock() - started) / duration, 1.0)
            self._store.patch(MutationSource.PROGRESSION, **sample(progress))
            if progress >= 1.0:
                return True

    # ------------------------------------------------------------------
    # Collaborator requests
    # ------------------------------------------------------------------

    async def execute(self, request: CommandRequest | Mapping[str, Any]) -> bool:
        """Dispatch one ``{"type", "params"}`` request.

        Failures (unknown tag, malformed parameters) are logged and reported
        as ``False`` rather than raised.
        """
        try:
            command = parse_request(request)
            return await self._dispatch(command)
        except UavSimError as exc:
            _logger.warning("Command %r rejected: %s", _request_type(request), exc)
            return False

    async def execute_all(self, requests: Iterable[CommandRequest | Mapping[str, Any]]) -> bool:
        """Run *requests* in order, stopping at the first one that fails."""
        for request in requests:
            if not await self.execute(request):
                return False
        return True

    async def _dispatch(self, command: CommandRequest) -> bool:
        params = command.params
        _logger.debug("Dispatching %s params=%s", command.type.value, params)
        if command.type is CommandType.ARM:
            return await self.arm()
        if command.type is CommandType.DISARM:
            return await self.disarm()
        if command.type is CommandType.TAKEOFF:
            takeoff = parse_params(TakeoffParams, params, context="takeoff")
            return await self.takeoff(takeoff.altitude)
        if command.type is CommandType.RTL:
            return await self.return_to_launch()
        if command.type is CommandType.SET_MODE:
            set_mode = parse_params(SetModeParams, params, context="setMode")
            return await self.set_mode(set_mode.mode)
        if command.type is CommandType.FLY_TO:
            fly_to = parse_params(FlyToParams, params, context="flyTo")
            return await self.fly_to(fly_to.lat, fly_to.lon, fly_to.alt)
        return await self.land()


def _request_type(request: Any) -> Any:
    if isinstance(request, CommandRequest):
        return request.type.value
    if isinstance(request, Mapping):
        return request.get("type")
    return request

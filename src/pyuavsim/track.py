"""Flight-path recorder for track plots."""

from __future__ import annotations

from collections import deque
from typing import NamedTuple

from pyuavsim._constants import ground_distance_m
from pyuavsim.models.vehicle import VehicleState
from pyuavsim.state.observers import Subscription
from pyuavsim.state.store import VehicleStateStore


class TrackPoint(NamedTuple):
    latitude: float
    longitude: float


class TrackRecorder:
    """Observer that keeps the lateral path the vehicle has flown.

    A point is appended only once the vehicle has moved more than
    ``min_distance_m`` from the last recorded point, so hovering and tick
    noise do not grow the track.  The oldest points are dropped past
    ``max_points``.
    """

    def __init__(self, *, min_distance_m: float = 1.0, max_points: int = 10_000) -> None:
        if max_points < 1:
            raise ValueError("max_points must be at least 1")
        self._min_distance_m = min_distance_m
        self._points: deque[TrackPoint] = deque(maxlen=max_points)
        self._subscription: Subscription | None = None

    @property
    def points(self) -> list[TrackPoint]:
        return list(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def attach(self, store: VehicleStateStore) -> None:
        self.detach()
        self._subscription = store.subscribe(self)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def clear(self) -> None:
        self._points.clear()

    def __call__(self, state: VehicleState) -> None:
        point = TrackPoint(state.latitude, state.longitude)
        if not self._points:
            self._points.append(point)
            return
        last = self._points[-1]
        if ground_distance_m(last.latitude, last.longitude, point.latitude, point.longitude) > self._min_distance_m:
            self._points.append(point)

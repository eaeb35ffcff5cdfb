from __future__ import annotations

import pytest

from pyuavsim.models.vehicle import VehicleState
from pyuavsim.state.events import MutationSource
from pyuavsim.state.store import VehicleStateStore
from pyuavsim.track import TrackPoint, TrackRecorder


def test_recorder_seeds_with_current_position() -> None:
    store = VehicleStateStore(initial_state=VehicleState(latitude=1.0, longitude=2.0))
    recorder = TrackRecorder()

    recorder.attach(store)

    assert recorder.points == [TrackPoint(1.0, 2.0)]


def test_recorder_ignores_small_moves() -> None:
    store = VehicleStateStore(initial_state=VehicleState(latitude=0.0, longitude=0.0))
    recorder = TrackRecorder(min_distance_m=1.0)
    recorder.attach(store)

    # ~0.55 m north: below threshold.
    store.patch(MutationSource.PROGRESSION, latitude=0.000005)
    assert len(recorder) == 1

    # ~11 m north: recorded.
    store.patch(MutationSource.PROGRESSION, latitude=0.0001)
    assert recorder.points[-1] == TrackPoint(0.0001, 0.0)


def test_recorder_is_bounded() -> None:
    recorder = TrackRecorder(max_points=3)
    for step in range(10):
        recorder(VehicleState(latitude=step * 0.001, longitude=0.0))

    assert len(recorder) == 3
    assert recorder.points[0].latitude == pytest.approx(0.007)


def test_detach_stops_recording() -> None:
    store = VehicleStateStore(initial_state=VehicleState(latitude=0.0, longitude=0.0))
    recorder = TrackRecorder()
    recorder.attach(store)
    recorder.detach()

    store.patch(MutationSource.PROGRESSION, latitude=0.01)

    assert len(recorder) == 1
    assert store.observer_count == 0


def test_invalid_max_points() -> None:
    with pytest.raises(ValueError):
        TrackRecorder(max_points=0)

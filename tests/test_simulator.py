"""End-to-end flows through :class:`UavSimulator`."""

from __future__ import annotations

import asyncio

import pytest

from pyuavsim import (
    HomePosition,
    SimulatorConfig,
    SimulatorStateError,
    TrackRecorder,
    UavSimulator,
    VehicleState,
)
from pyuavsim._constants import bearing_deg

FAST = SimulatorConfig(
    tick_interval=0.005,
    sample_interval=0.005,
    takeoff_duration=0.1,
    fly_to_duration=0.15,
    seed=2024,
)


@pytest.mark.asyncio
async def test_takeoff_from_ground() -> None:
    initial = VehicleState(armed=False, mode="STABILIZE", altitude=0.0)
    async with UavSimulator(FAST, initial_state=initial) as sim:
        assert await sim.takeoff(10) is True
        state = sim.get_state()

    assert state.armed is True
    assert state.mode == "GUIDED"
    assert state.altitude == pytest.approx(10.0, abs=0.2)


@pytest.mark.asyncio
async def test_fly_to_target() -> None:
    initial = VehicleState(latitude=47.6062, longitude=-122.3321, altitude=45.2)
    async with UavSimulator(FAST, initial_state=initial) as sim:
        assert await sim.fly_to(47.61, -122.33, 50) is True
        state = sim.get_state()

    assert state.latitude == pytest.approx(47.61)
    assert state.longitude == pytest.approx(-122.33)
    assert state.altitude == pytest.approx(50.0, abs=0.2)
    assert state.heading == pytest.approx(bearing_deg(47.6062, -122.3321, 47.61, -122.33))


@pytest.mark.asyncio
async def test_return_to_launch_lands_at_home() -> None:
    config = SimulatorConfig(tick_interval=0.001, rtl_descent_step=5.0, seed=11)
    initial = VehicleState(armed=True, mode="GUIDED", altitude=45.2, latitude=47.6062, longitude=-122.3321)

    async with UavSimulator(config, initial_state=initial) as sim:
        assert await sim.return_to_launch() is True
        assert sim.get_state().mode == "RTL"
        landed = await sim.wait_for_state(lambda s: s.mode == "LAND", timeout=5.0)

    assert landed.latitude == pytest.approx(47.6062)
    assert landed.longitude == pytest.approx(-122.3321)
    assert landed.altitude == 0.0
    assert landed.armed is False


@pytest.mark.asyncio
async def test_wait_for_state_checks_current_snapshot() -> None:
    sim = UavSimulator(FAST)

    state = await sim.wait_for_state(lambda s: s.armed, timeout=0.01)

    assert state.armed is True
    assert sim.store.observer_count == 0


@pytest.mark.asyncio
async def test_wait_for_state_times_out() -> None:
    sim = UavSimulator(FAST)

    with pytest.raises(TimeoutError):
        await sim.wait_for_state(lambda s: s.mode == "LAND", timeout=0.02)

    assert sim.store.observer_count == 0


@pytest.mark.asyncio
async def test_wait_for_state_propagates_predicate_error() -> None:
    sim = UavSimulator(FAST)

    def _broken(snapshot: VehicleState) -> bool:
        raise KeyError("battery")

    with pytest.raises(KeyError):
        await sim.wait_for_state(_broken, timeout=5.0)

    assert sim.store.observer_count == 0


@pytest.mark.asyncio
async def test_close_cancels_progressions_and_tick() -> None:
    sim = UavSimulator(SimulatorConfig(tick_interval=0.01, takeoff_duration=5.0, sample_interval=0.01))
    sim.start()
    takeoff = asyncio.create_task(sim.takeoff(50))
    await asyncio.sleep(0.03)

    await sim.close()

    assert await takeoff is False
    assert not sim.store.is_running
    with pytest.raises(SimulatorStateError):
        await sim.arm()
    with pytest.raises(SimulatorStateError):
        sim.start()
    # Reads still work after close.
    assert sim.get_state().altitude > 0


@pytest.mark.asyncio
async def test_execute_all_and_track_recording() -> None:
    home = HomePosition(latitude=0.0, longitude=0.0)
    initial = VehicleState(armed=False, mode="STABILIZE", altitude=0.0, latitude=0.0, longitude=0.0)
    recorder = TrackRecorder()

    async with UavSimulator(FAST, initial_state=initial, home=home) as sim:
        recorder.attach(sim.store)
        ok = await sim.execute_all(
            [
                {"type": "takeoff", "params": {"altitude": 5}},
                {"type": "flyTo", "params": {"lat": 0.001, "lon": 0.0, "alt": 5}},
            ]
        )
        recorder.detach()

    assert ok is True
    assert len(recorder) > 2
    assert recorder.points[0] == (0.0, 0.0)
    assert recorder.points[-1].latitude == pytest.approx(0.001, abs=2e-5)
    assert sim.home == home


@pytest.mark.asyncio
async def test_isolated_simulators_do_not_share_state() -> None:
    first = UavSimulator(FAST)
    second = UavSimulator(FAST)

    await first.disarm()

    assert first.get_state().armed is False
    assert second.get_state().armed is True

from __future__ import annotations

import logging

import pytest

from pyuavsim.models.vehicle import VehicleState
from pyuavsim.state.events import MutationSource
from pyuavsim.state.observers import ObserverRegistry, Subscription
from pyuavsim.state.store import VehicleStateStore


def _state(altitude: float) -> VehicleState:
    return VehicleState(altitude=altitude)


def test_notify_delivers_in_subscription_order() -> None:
    registry = ObserverRegistry()
    calls: list[str] = []
    registry.subscribe(lambda _s: calls.append("a"))
    registry.subscribe(lambda _s: calls.append("b"))
    registry.subscribe(lambda _s: calls.append("c"))

    registry.notify(_state(1.0))

    assert calls == ["a", "b", "c"]


def test_failing_observer_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    registry = ObserverRegistry()
    received: list[VehicleState] = []

    def _boom(_snapshot: VehicleState) -> None:
        raise RuntimeError("observer bug")

    registry.subscribe(_boom)
    registry.subscribe(received.append)

    with caplog.at_level(logging.WARNING, logger="pyuavsim.state.observers"):
        registry.notify(_state(2.0))

    assert [s.altitude for s in received] == [2.0]
    assert "raised" in caplog.text


def test_failing_observer_does_not_corrupt_store() -> None:
    store = VehicleStateStore()
    store.subscribe(lambda _s: 1 / 0)

    store.patch(MutationSource.COMMAND, mode="LOITER")

    assert store.get_state().mode == "LOITER"


def test_unsubscribe_from_inside_callback() -> None:
    registry = ObserverRegistry()
    calls: list[str] = []
    handles: dict[str, Subscription] = {}

    def _first(_snapshot: VehicleState) -> None:
        calls.append("first")
        handles["second"].unsubscribe()

    handles["first"] = registry.subscribe(_first)
    handles["second"] = registry.subscribe(lambda _s: calls.append("second"))

    registry.notify(_state(1.0))
    registry.notify(_state(2.0))

    assert calls == ["first", "first"]
    assert len(registry) == 1


def test_subscribe_from_inside_callback_takes_effect_next_notify() -> None:
    registry = ObserverRegistry()
    late: list[VehicleState] = []

    def _adds_observer(_snapshot: VehicleState) -> None:
        if not late and len(registry) == 1:
            registry.subscribe(late.append)

    registry.subscribe(_adds_observer)
    registry.notify(_state(1.0))
    assert late == []

    registry.notify(_state(2.0))
    assert [s.altitude for s in late] == [2.0]


def test_nested_publish_preserves_per_observer_order() -> None:
    store = VehicleStateStore()
    seen_by_second: list[str] = []

    def _reacts(snapshot: VehicleState) -> None:
        if snapshot.mode == "LOITER":
            store.patch(MutationSource.COMMAND, mode="AUTO")

    store.subscribe(_reacts)
    store.subscribe(lambda s: seen_by_second.append(s.mode))

    store.patch(MutationSource.COMMAND, mode="LOITER")

    assert seen_by_second == ["GUIDED", "LOITER", "AUTO"]
    assert store.get_state().mode == "AUTO"


def test_observer_added_mid_fan_out_sees_queued_snapshot_once() -> None:
    store = VehicleStateStore(initial_state=_state(1.0))
    late: list[float] = []

    def _bumps(snapshot: VehicleState) -> None:
        if snapshot.altitude == 2.0:
            store.patch(MutationSource.COMMAND, altitude=3.0)

    def _adds_late(snapshot: VehicleState) -> None:
        if snapshot.altitude == 2.0:
            store.subscribe(lambda s: late.append(s.altitude))

    store.subscribe(_bumps)
    store.subscribe(_adds_late)
    store.patch(MutationSource.COMMAND, altitude=2.0)

    assert late == [3.0]

    store.patch(MutationSource.COMMAND, altitude=4.0)
    assert late == [3.0, 4.0]


class _Abort(BaseException):
    pass


def test_escaping_base_exception_drops_queued_snapshots() -> None:
    registry = ObserverRegistry()
    seen: list[float] = []

    def _aborts(snapshot: VehicleState) -> None:
        if snapshot.altitude == 1.0:
            registry.notify(_state(2.0))
            raise _Abort

    registry.subscribe(_aborts)
    registry.subscribe(lambda s: seen.append(s.altitude))

    with pytest.raises(_Abort):
        registry.notify(_state(1.0))

    registry.notify(_state(5.0))

    assert seen == [5.0]


def test_subscription_handle_reports_active() -> None:
    registry = ObserverRegistry()
    handle = registry.subscribe(lambda _s: None)

    assert handle.active
    handle()
    assert not handle.active


def test_registry_does_not_leak_after_unsubscribe() -> None:
    store = VehicleStateStore()
    handles = [store.subscribe(lambda _s: None) for _ in range(50)]
    assert store.observer_count == 50

    for handle in handles:
        handle()

    assert store.observer_count == 0


def test_clear_detaches_every_handle() -> None:
    registry = ObserverRegistry()
    handles = [registry.subscribe(lambda _s: None) for _ in range(3)]

    registry.clear()

    assert len(registry) == 0
    assert not any(handle.active for handle in handles)

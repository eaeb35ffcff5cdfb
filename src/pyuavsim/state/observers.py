"""Observer registry: fan-out of state snapshots to subscribers."""

from __future__ import annotations

import itertools
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from pyuavsim.models.vehicle import VehicleState

_logger = logging.getLogger(__name__)

StateCallback = Callable[[VehicleState], None]

_handle_ids = itertools.count(1)


@dataclass(eq=False, slots=True)
class Subscription:
    """Handle returned by :meth:`ObserverRegistry.subscribe`.

    Calling the handle (or :meth:`unsubscribe`) removes the callback.
    Both are idempotent.
    """

    registry: ObserverRegistry | None
    id: int = field(default_factory=lambda: next(_handle_ids))

    @property
    def active(self) -> bool:
        return self.registry is not None and self.registry.is_registered(self)

    def unsubscribe(self) -> None:
        registry = self.registry
        if registry is None:
            return
        self.registry = None
        registry.unsubscribe(self)

    def __call__(self) -> None:
        self.unsubscribe()


class ObserverRegistry:
    """Ordered mapping of subscription handle to callback.

    Delivery follows registration order.  A callback that raises is logged
    and skipped; the remaining observers still receive the snapshot.

    Dispatch is re-entrant safe: callbacks may subscribe or unsubscribe, and
    a snapshot published from inside a callback is queued until the current
    fan-out completes, so every observer sees snapshots in publish order.
    """

    def __init__(self) -> None:
        self._observers: dict[Subscription, StateCallback] = {}
        self._pending: deque[VehicleState] = deque()
        # Handles that already received a queued snapshot on subscribe.
        self._primed: dict[Subscription, VehicleState] = {}
        self._dispatching = False

    def __len__(self) -> int:
        return len(self._observers)

    def is_registered(self, handle: Subscription) -> bool:
        return handle in self._observers

    def subscribe(self, callback: StateCallback) -> Subscription:
        """Register *callback* and return its handle."""
        handle = Subscription(registry=self)
        self._observers[handle] = callback
        return handle

    def unsubscribe(self, handle: object) -> None:
        """Remove *handle*; unknown or already-removed handles are ignored."""
        if not isinstance(handle, Subscription):
            return
        self._observers.pop(handle, None)
        self._primed.pop(handle, None)
        if handle.registry is self:
            handle.registry = None

    def deliver(self, handle: Subscription, snapshot: VehicleState) -> None:
        """Deliver *snapshot* to a single observer, isolating failures.

        During a fan-out, *snapshot* may still be waiting in the queue.  The
        handle then skips every queued snapshot up to and including it, so it
        is neither seen twice nor followed by an older one.
        """
        callback = self._observers.get(handle)
        if callback is None:
            return
        if self._dispatching and any(queued is snapshot for queued in self._pending):
            self._primed[handle] = snapshot
        self._invoke(handle, callback, snapshot)

    def notify(self, snapshot: VehicleState) -> None:
        """Push *snapshot* to every registered observer."""
        self._pending.append(snapshot)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for handle, callback in list(self._observers.items()):
                    # Removed by an earlier callback during this fan-out.
                    if handle not in self._observers:
                        continue
                    primed = self._primed.get(handle)
                    if primed is not None:
                        if primed is current:
                            del self._primed[handle]
                        continue
                    self._invoke(handle, callback, current)
        finally:
            # Drop leftovers when a callback escaped with a BaseException.
            self._pending.clear()
            self._primed.clear()
            self._dispatching = False

    def clear(self) -> None:
        for handle in list(self._observers):
            self.unsubscribe(handle)

    @staticmethod
    def _invoke(handle: Subscription, callback: StateCallback, snapshot: VehicleState) -> None:
        try:
            callback(snapshot)
        except Exception:
            _logger.warning("State observer %d raised; continuing fan-out", handle.id, exc_info=True)

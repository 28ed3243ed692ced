"""StateChangeEmitter: in-process event channel with explicit subscriptions.

Delivery contract:
  - Listeners are called in subscription order.
  - Events are delivered strictly one at a time. An emit() issued from inside
    a listener is queued and delivered after the current event finishes, so
    no listener is ever re-entered.
  - Subscription.dispose() takes effect immediately, including for events
    already queued.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from runreport.domain.events import Event

logger = logging.getLogger(__name__)


class EmitterSubscription:
    """Subscription handle returned by StateChangeEmitter.on()."""

    __slots__ = ("_emitter", "_listener", "_disposed")

    def __init__(self, emitter: StateChangeEmitter, listener: Callable[[Event], None]) -> None:
        self._emitter = emitter
        self._listener = listener
        self._disposed = False

    @property
    def disposed(self) -> bool:
        """Whether dispose() was called."""
        return self._disposed

    def dispose(self) -> None:
        """Detach listener. Idempotent."""
        if self._disposed:
            return
        self._disposed = True
        self._emitter._remove(self)  # noqa: SLF001

    def _deliver(self, event: Event) -> None:
        if not self._disposed:
            self._listener(event)


class StateChangeEmitter:
    """Single-channel event emitter satisfying StateChangeSource."""

    __slots__ = ("_dispatching", "_lock", "_pending", "_subscriptions")

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._subscriptions: list[EmitterSubscription] = []
        self._pending: deque[Event] = deque()
        self._dispatching = False

    @property
    def listener_count(self) -> int:
        """Number of live subscriptions."""
        with self._lock:
            return len(self._subscriptions)

    def on(self, listener: Callable[[Event], None]) -> EmitterSubscription:
        """Subscribe listener for every subsequent event.

        Raises:
            TypeError: If listener is not callable.
        """
        # FAIL-FIRST: validate listener immediately
        if not callable(listener):
            raise TypeError(f"listener must be callable, got {type(listener).__name__}")

        subscription = EmitterSubscription(self, listener)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("listener subscribed (%d live)", len(self._subscriptions))
        return subscription

    def emit(self, event: Event) -> None:
        """Deliver event to every live listener.

        Listener exceptions propagate to the caller. Events queued behind a
        failing one stay queued and are delivered by the next emit().
        """
        with self._lock:
            self._pending.append(event)
            if self._dispatching:
                return
            self._dispatching = True
            try:
                while self._pending:
                    current = self._pending.popleft()
                    for subscription in tuple(self._subscriptions):
                        subscription._deliver(current)  # noqa: SLF001
            finally:
                self._dispatching = False

    def _remove(self, subscription: EmitterSubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
        logger.debug("listener disposed (%d live)", len(self._subscriptions))

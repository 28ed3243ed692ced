"""Event source protocol: where run lifecycle events come from."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from runreport.domain.events import Event


class Subscription(Protocol):
    """Handle returned by StateChangeSource.on().

    dispose() detaches the listener. Idempotent.
    """

    def dispose(self) -> None:
        """Stop delivering events to the listener."""
        ...


class StateChangeSource(Protocol):
    """Single notification channel of typed events.

    Events are delivered one at a time, in emission order.
    A listener is never re-entered while it is still handling an event.
    """

    def on(self, listener: Callable[[Event], None]) -> Subscription:
        """Subscribe listener for every subsequent event.

        Args:
            listener: Called once per event.

        Returns:
            Subscription whose dispose() unsubscribes the listener.
        """
        ...

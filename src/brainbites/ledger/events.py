"""Ledger events and the observer channel that broadcasts them."""

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class LedgerEventType(str, Enum):
    """Kinds of balance change broadcast by the ledger."""

    CREDITS_ADDED = "creditsAdded"
    TIME_UPDATE = "timeUpdate"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class LedgerEvent:
    """A single balance notification."""

    event: LedgerEventType
    balance: int | None = None
    delta: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire form, omitting absent fields."""
        data: dict[str, Any] = {"event": self.event.value}
        if self.balance is not None:
            data["balance"] = self.balance
        if self.delta is not None:
            data["delta"] = self.delta
        return data


Listener = Callable[[LedgerEvent], None]


class EventBroadcaster:
    """Delivers events to listeners in registration order.

    Dispatch runs over a snapshot, so listeners may unregister themselves
    or others while an event is being delivered.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, Listener] = {}
        self._handles = itertools.count()

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A function that unregisters it; calling it twice is harmless.
        """
        handle = next(self._handles)
        self._listeners[handle] = listener

        def unsubscribe() -> None:
            self._listeners.pop(handle, None)

        return unsubscribe

    def emit(self, event: LedgerEvent) -> None:
        """Deliver an event to every current listener."""
        for handle, listener in list(self._listeners.items()):
            if handle not in self._listeners:
                continue  # removed earlier in this dispatch
            try:
                listener(event)
            except Exception:
                logger.exception("Ledger listener failed on %s", event.event.value)

    def clear(self) -> None:
        """Drop every listener."""
        self._listeners.clear()

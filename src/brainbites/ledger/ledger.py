"""Time-credit ledger with a live countdown."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from ..errors import InvalidReward, StorageError
from ..storage import BackgroundWriter, KeyValueStore
from .events import EventBroadcaster, LedgerEvent, LedgerEventType, Listener

logger = logging.getLogger(__name__)


def format_time(seconds: int | float | None) -> str:
    """Format a balance as MM:SS, or HH:MM:SS from one hour up."""
    if seconds is None or seconds <= 0:
        return "00:00"
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


@dataclass
class LedgerConfig:
    """Configuration for the time ledger."""

    tick_interval: float = 1.0  # seconds of wall clock per debited credit
    storage_key: str = "time_ledger_balance"

    def __post_init__(self) -> None:
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")


class TimeLedger:
    """Owns the spendable time balance.

    Credits are added by the quiz flow; while spending is active a
    background task debits one credit per tick until the balance hits
    zero. Every change is persisted and broadcast to listeners.
    """

    format_time = staticmethod(format_time)

    def __init__(
        self,
        store: KeyValueStore,
        config: LedgerConfig | None = None,
        writer: BackgroundWriter | None = None,
    ) -> None:
        self.store = store
        self.config = config or LedgerConfig()
        self.writer = writer or BackgroundWriter(store)
        self._balance = 0
        self._last_persisted_at: datetime | None = None
        self._active = False
        self._countdown_task: asyncio.Task | None = None
        self._events = EventBroadcaster()

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def last_persisted_at(self) -> datetime | None:
        """When the balance was last written, or as restored at load."""
        return self._last_persisted_at

    @property
    def is_spending(self) -> bool:
        return self._active

    def get_available_time(self) -> int:
        """Current balance in seconds."""
        return self._balance

    async def load_saved_time(self) -> int:
        """Restore the balance from the last write; 0 if none exists."""
        try:
            data = self.store.get_json(self.config.storage_key)
        except StorageError as e:
            logger.warning("Cannot load saved time: %s", e)
            return self._balance

        if isinstance(data, dict):
            balance = data.get("balanceSeconds")
            if isinstance(balance, int) and not isinstance(balance, bool):
                self._balance = max(0, balance)
            persisted_at = data.get("lastPersistedAt")
            if isinstance(persisted_at, str):
                try:
                    self._last_persisted_at = datetime.fromisoformat(persisted_at)
                except ValueError:
                    logger.debug("Ignoring bad lastPersistedAt %r", persisted_at)
        return self._balance

    def _snapshot(self) -> dict[str, Any]:
        self._last_persisted_at = datetime.now(timezone.utc)
        return {
            "balanceSeconds": self._balance,
            "lastPersistedAt": self._last_persisted_at.isoformat(),
        }

    def _persist(self) -> None:
        self.writer.schedule(self.config.storage_key, self._snapshot)

    def add_credits(self, seconds: int) -> int:
        """Add seconds to the balance.

        Returns:
            The new balance.

        Raises:
            InvalidReward: If seconds is not a positive integer.
        """
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds <= 0:
            raise InvalidReward(f"Credit amount must be a positive integer, got {seconds!r}")

        self._balance += seconds
        self._persist()
        self._events.emit(
            LedgerEvent(LedgerEventType.CREDITS_ADDED, balance=self._balance, delta=seconds)
        )
        return self._balance

    def start_spending(self) -> bool:
        """Start the countdown. Must be called from a running event loop.

        Returns:
            True if spending started, False if it was already active or
            there is nothing to spend.
        """
        if self._active:
            return False
        if self._balance <= 0:
            logger.debug("Not starting countdown with an empty balance")
            return False

        self._active = True
        self._countdown_task = asyncio.get_running_loop().create_task(self._countdown())
        return True

    def stop_spending(self) -> bool:
        """Stop the countdown. No debit happens after this returns.

        Returns:
            True if spending was active.
        """
        if not self._active:
            return False
        self._active = False
        self._cancel_countdown()
        return True

    def _cancel_countdown(self) -> None:
        task = self._countdown_task
        self._countdown_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _owns_countdown(self) -> bool:
        """Whether the calling task is the one registered countdown."""
        return self._active and self._countdown_task is asyncio.current_task()

    async def _countdown(self) -> None:
        """Background task debiting one credit per interval.

        Exits as soon as it is no longer the registered countdown, so a
        stop and restart from inside a listener leaves a single task.
        """
        while self._owns_countdown():
            try:
                await asyncio.sleep(self.config.tick_interval)
            except asyncio.CancelledError:
                break
            if not self._owns_countdown():
                break
            self.tick()

    def tick(self) -> int:
        """Debit one credit if spending is active.

        Stops the countdown and emits ``exhausted`` when the balance
        reaches zero.

        Returns:
            The balance after the tick.
        """
        if not self._active:
            return self._balance

        self._balance = max(0, self._balance - 1)
        self._persist()
        self._events.emit(LedgerEvent(LedgerEventType.TIME_UPDATE, balance=self._balance))

        if self._balance == 0:
            self._active = False
            self._cancel_countdown()
            self._events.emit(LedgerEvent(LedgerEventType.EXHAUSTED))
        return self._balance

    def add_event_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for every future event.

        Returns:
            A function that unregisters the listener.
        """
        return self._events.subscribe(listener)

    @property
    def listener_count(self) -> int:
        return len(self._events)

    async def cleanup(self) -> None:
        """Stop the countdown, drop all listeners, flush pending writes."""
        self.stop_spending()
        self._events.clear()
        await self.writer.flush()

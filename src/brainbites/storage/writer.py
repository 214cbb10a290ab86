"""Fire-and-forget persistence on top of the key-value store."""

import asyncio
import logging
from typing import Any, Callable

from ..errors import StorageError
from .store import KeyValueStore

logger = logging.getLogger(__name__)


class BackgroundWriter:
    """Schedules store writes as event loop tasks.

    The payload is built when the write runs, not when it is scheduled, so
    every write reflects the latest in-memory state. A key with a write
    already pending is not scheduled twice.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._tasks: set[asyncio.Task] = set()
        self._pending_keys: set[str] = set()

    @property
    def pending(self) -> int:
        """Number of writes not yet completed."""
        return len(self._tasks)

    def schedule(self, key: str, build: Callable[[], Any]) -> None:
        """Queue a JSON write of build() under key.

        Without a running event loop the write happens immediately.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(key, build)
            return

        if key in self._pending_keys:
            return

        self._pending_keys.add(key)
        task = loop.create_task(self._write_later(key, build))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _write_later(self, key: str, build: Callable[[], Any]) -> None:
        self._pending_keys.discard(key)
        self._write(key, build)

    def _write(self, key: str, build: Callable[[], Any]) -> None:
        try:
            self.store.set_json(key, build())
        except StorageError as e:
            logger.warning("Failed to persist %s: %s", key, e)

    async def flush(self) -> None:
        """Wait until every scheduled write has run."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

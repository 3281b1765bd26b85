"""Per-collection mutation lanes."""

import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class MutationSerializer:
    """
    One FIFO lane per collection.

    Entering a lane waits until every mutation admitted earlier for the same
    collection has finished. Lanes for different collections are independent.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: dict[str, int] = defaultdict(int)

    def _lock_for(self, collection: str) -> asyncio.Lock:
        lock = self._locks.get(collection)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[collection] = lock
        return lock

    @asynccontextmanager
    async def lane(self, collection: str) -> AsyncIterator[None]:
        """Hold the lane for a collection for the duration of the block."""
        lock = self._lock_for(collection)
        self._pending[collection] += 1
        try:
            async with lock:
                yield
        finally:
            self._pending[collection] -= 1
            if not self._pending[collection]:
                del self._pending[collection]
                # Nobody queued behind us; drop the idle lock
                if not lock.locked() and self._locks.get(collection) is lock:
                    del self._locks[collection]

    def lane_count(self) -> int:
        """Number of collections currently holding a lock."""
        return len(self._locks)

    def pending(self, collection: str) -> int:
        """Number of mutations queued or running for a collection."""
        return self._pending.get(collection, 0)

    def is_busy(self, collection: str) -> bool:
        lock = self._locks.get(collection)
        return lock is not None and lock.locked()

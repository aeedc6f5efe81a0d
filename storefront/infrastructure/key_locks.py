"""Keyed Locks — per-key mutual exclusion for read-modify-write sequences.

Invariants:
    - At most one holder per (namespace, key) at a time; waiters queue FIFO
    - Different keys never block each other
    - Registry entries are dropped once no holder or waiter remains

Design Decisions:
    - In-process asyncio.Lock registry: the service runs as a single process over a
      single storage root, so no cross-process lock is needed
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("lock", "refs")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.refs = 0


class KeyedLocks:
    """Registry of asyncio locks addressed by (namespace, key)."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], _Entry] = {}

    @asynccontextmanager
    async def hold(self, namespace: str, key: str) -> AsyncIterator[None]:
        """Hold the lock for one key for the duration of the block."""
        slot = (namespace, key)
        entry = self._entries.get(slot)
        if entry is None:
            entry = self._entries[slot] = _Entry()
        entry.refs += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.refs -= 1
            if entry.refs == 0:
                del self._entries[slot]

    def is_held(self, namespace: str, key: str) -> bool:
        entry = self._entries.get((namespace, key))
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)

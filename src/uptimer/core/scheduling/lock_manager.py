"""Per-schedule lock pool for the dispatch loop.

Manifesto:
    Overlapping dispatch cycles may both hold a result for the same
    schedule.  The status read-modify-write must not interleave, or the
    debounce decision is made against a stale row.  A keyed lock pool
    serializes work per schedule id while unrelated schedules proceed
    concurrently.

This module provides an in-process, keyed ``asyncio.Lock`` pool.  Locks
are created on first use and discarded once no task holds or waits on
them, so the pool does not grow with the number of schedules ever seen.

Tags:
    uptimer, scheduling, locks, asyncio, concurrency

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from uptimer.core.logging import get_logger

logger = get_logger(__name__)


class ScheduleLockPool:
    """Keyed ``asyncio.Lock`` pool, one lock per schedule id.

    All users must run on the same event loop.

    Example:
        >>> pool = ScheduleLockPool()
        >>> async with pool.hold(schedule.id):
        ...     current = schedules.get(schedule.id)
        ...     # decide and write against ``current``
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, schedule_id: int) -> AsyncIterator[None]:
        """Hold the lock for ``schedule_id`` for the duration of the block."""
        lock = self._locks.get(schedule_id)
        if lock is None:
            lock = self._locks[schedule_id] = asyncio.Lock()
        self._users[schedule_id] = self._users.get(schedule_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[schedule_id] -= 1
            if self._users[schedule_id] == 0:
                del self._users[schedule_id]
                del self._locks[schedule_id]

    def is_locked(self, schedule_id: int) -> bool:
        """Return True if some task currently holds the schedule's lock."""
        lock = self._locks.get(schedule_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        """Number of schedules with a live lock (held or awaited)."""
        return len(self._locks)


__all__ = ["ScheduleLockPool"]

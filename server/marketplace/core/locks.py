"""Per-key asyncio locks used to serialize writes to a single tour."""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLockRegistry:
    """
    Hand out one asyncio.Lock per key, dropping it once nobody waits on it.

    This serializes writers inside one process; cross-process writers are
    covered by the database advisory lock and the tour version check.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every service that rewrites tour-derived fields
tour_locks = KeyedLockRegistry()

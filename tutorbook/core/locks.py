"""Keyed asyncio locks for serializing ledger mutations inside one process."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLockRegistry:
    """Hand out one exclusive lock per key.

    Entries are reference counted and dropped as soon as the last holder or
    waiter releases, so the registry does not grow with every booking id.
    Cross-process exclusivity is provided by the storage layer (unique
    index and row locks); this registry only closes the in-process window.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, tuple[asyncio.Lock, int]] = {}
        self._guard = asyncio.Lock()

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Acquire the lock for `key` for the duration of the block."""
        async with self._guard:
            lock, users = self._locks.get(key, (asyncio.Lock(), 0))
            self._locks[key] = (lock, users + 1)

        try:
            async with lock:
                yield
        finally:
            async with self._guard:
                lock, users = self._locks[key]
                if users <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        return len(self._locks)


booking_locks = KeyedLockRegistry()

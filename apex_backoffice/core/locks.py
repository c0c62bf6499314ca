"""
Per-key asyncio locks.

Serializes work per key inside one process: ledger writes per investor,
attachment updates per client, cache loads per key.  Locks live in a
``WeakValueDictionary`` so a key's lock disappears once no coroutine is
holding or waiting on it.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class KeyedLock:
    """A registry handing out one :class:`asyncio.Lock` per key."""

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[Hashable, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the ``async with`` block."""
        lock = self._lock_for(key)
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every service instance in the process.
investor_locks = KeyedLock()
client_locks = KeyedLock()

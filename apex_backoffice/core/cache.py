"""
In-memory TTL cache for the ferry fare tables.

Vehicle and passenger fares are read on every booking screen and change
rarely, so ``FerryService`` serves them through ``get_or_load`` and drops
them with ``invalidate`` on every create / delete.  Investor snapshots and
transaction history never go through here: they must always reflect the
last committed ledger write.

The TTL bounds staleness across replicas, since an invalidation only
reaches the process that made the write.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Tuple

from apex_backoffice.core.config import settings
from apex_backoffice.core.locks import KeyedLock

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    """
    Key/value store whose entries expire ``ttl`` seconds after being set.

    At ``max_size`` entries, expired entries are purged first and then the
    oldest remaining one is dropped.  A disabled cache stores nothing.
    """

    def __init__(self, ttl: float = 30.0, max_size: int = 1000, enabled: bool = True):
        self.ttl = ttl
        self.max_size = max_size
        self.enabled = enabled
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._loading = KeyedLock()

    def __len__(self) -> int:
        return len(self._entries)

    def _lookup(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return _MISSING
        return value

    def get(self, key: str) -> Any:
        """Return the live value for ``key`` or ``None``."""
        value = self._lookup(key)
        return None if value is _MISSING else value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        if key not in self._entries and len(self._entries) >= self.max_size:
            now = time.monotonic()
            for stale in [k for k, (exp, _) in self._entries.items() if now >= exp]:
                del self._entries[stale]
            if len(self._entries) >= self.max_size:
                del self._entries[next(iter(self._entries))]
        self._entries[key] = (time.monotonic() + self.ttl, value)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value for ``key``, calling ``loader`` on a miss.

        Concurrent misses on one key share a single load.  An empty list is
        a real value and is cached like any other.
        """
        value = self._lookup(key)
        if value is not _MISSING:
            return value
        async with self._loading.hold(key):
            value = self._lookup(key)
            if value is _MISSING:
                value = await loader()
                self.set(key, value)
                logger.debug("Cache loaded %s", key)
        return value

    def invalidate(self, *prefixes: str) -> int:
        """Drop every entry whose key starts with one of ``prefixes``."""
        doomed = [k for k in self._entries if k.startswith(prefixes)]
        for key in doomed:
            del self._entries[key]
        if doomed:
            logger.debug("Cache invalidated %d entries for %s", len(doomed), prefixes)
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def describe(self) -> dict:
        """Summary for the health check."""
        return {"enabled": self.enabled, "entries": len(self), "ttl_seconds": self.ttl}


cache = TTLCache(
    ttl=settings.CACHE_TTL,
    max_size=settings.CACHE_MAX_SIZE,
    enabled=settings.CACHE_ENABLED,
)

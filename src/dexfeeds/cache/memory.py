"""In-process TTL cache.

Used in tests and single-process deployments where no shared database is
configured. Expired entries are evicted lazily on read and on purge.
"""

import time
from typing import Callable, Optional

from dexfeeds.cache.base import Cache, CachedValue


class InMemoryCache(Cache):
    """Dict-backed Cache with TTL expiry and an injectable clock."""

    def __init__(self, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self._entries: dict[tuple[str, int, str], CachedValue] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def _store(self, consumer_id, network_id, key, value, expires_at) -> None:
        self._entries[(consumer_id, network_id, key)] = CachedValue(value, expires_at)

    async def _load(self, consumer_id, network_id, key) -> Optional[CachedValue]:
        cache_key = (consumer_id, network_id, key)
        entry = self._entries.get(cache_key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[cache_key]
            return None
        return entry

    async def purge_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if entry.expires_at <= now]
        for cache_key in expired:
            del self._entries[cache_key]
        return len(expired)

"""Cache collaborator interface.

Values are strings (serialized JSON) keyed by (consumer_id, network_id,
key) and always written with a TTL. Readers never observe an expired value:
once the TTL lapses, get() reports absence.
"""

import time
from abc import ABC, abstractmethod
from typing import Callable, NamedTuple, Optional


class CachedValue(NamedTuple):
    value: str
    expires_at: float  # epoch seconds


class Cache(ABC):
    """Shared key-value store with TTL, plus a process-local read-through layer."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._local: dict[tuple[str, int, str], CachedValue] = {}

    async def setex(
        self,
        consumer_id: str,
        network_id: int,
        key: str,
        ttl_seconds: int,
        value: str,
    ) -> None:
        """Store value for ttl_seconds, replacing any previous value.

        Raises:
            ValueError: If ttl_seconds is not positive or value is not a string
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if not isinstance(value, str):
            raise ValueError(f"Cache values must be str, got {type(value).__name__}")

        expires_at = self._clock() + ttl_seconds
        await self._store(consumer_id, network_id, key, value, expires_at)
        self._local.pop((consumer_id, network_id, key), None)

    async def get(self, consumer_id: str, network_id: int, key: str) -> Optional[str]:
        """Return the live value, or None if absent or expired."""
        entry = await self._load(consumer_id, network_id, key)
        return entry.value if entry else None

    async def get_and_cache_locally(
        self,
        consumer_id: str,
        network_id: int,
        key: str,
        local_ttl_seconds: float,
    ) -> Optional[str]:
        """Read through a process-local copy kept for up to local_ttl_seconds.

        The local copy never outlives the remote entry's own expiry, so a
        value read here is never older than the shared cache allows. Misses
        are not cached locally.
        """
        cache_key = (consumer_id, network_id, key)
        now = self._clock()

        local = self._local.get(cache_key)
        if local is not None and local.expires_at > now:
            return local.value
        self._local.pop(cache_key, None)

        entry = await self._load(consumer_id, network_id, key)
        if entry is None:
            return None
        self._local[cache_key] = CachedValue(
            entry.value, min(now + local_ttl_seconds, entry.expires_at)
        )
        return entry.value

    @abstractmethod
    async def _store(
        self,
        consumer_id: str,
        network_id: int,
        key: str,
        value: str,
        expires_at: float,
    ) -> None:
        """Persist value with an absolute expiry (epoch seconds)."""

    @abstractmethod
    async def _load(
        self, consumer_id: str, network_id: int, key: str
    ) -> Optional[CachedValue]:
        """Return the entry if present and not expired."""

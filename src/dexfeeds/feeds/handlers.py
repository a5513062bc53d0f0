"""Reusable delivery handlers for feeds.

CacheWriteHandler persists each value into the shared cache under a
network-scoped key. StateMutationHandler derives a value and pushes it
into state owned by another component through an injected setter. HandlerChain
runs several of them in order for one feed.
"""

import inspect
import json
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog
from pydantic import BaseModel

from dexfeeds.cache.base import Cache
from dexfeeds.logging import ErrorType

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def to_json(value: Any) -> str:
    """Serialize a cast value (pydantic model, dict, list) to JSON text."""
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value, default=_json_default, separators=(",", ":"))


def _json_default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    return str(obj)


def warn_if_ttl_too_short(feed: str, interval_seconds: float, ttl_seconds: int) -> bool:
    """Log a warning when a cached value can expire between two ticks.

    Returns:
        True if the TTL exceeds the polling interval
    """
    if ttl_seconds > interval_seconds:
        return True
    logger.warning(
        "Cache TTL does not exceed polling interval, value may expire between ticks",
        feed=feed,
        interval_seconds=interval_seconds,
        ttl_seconds=ttl_seconds,
    )
    return False


class CacheWriteHandler:
    """Writes each delivered value to the cache with a TTL.

    Write failures propagate to the poller, which reports them as a
    handler error for that cycle.

    Example:
        handler = CacheWriteHandler(
            cache, consumer_id="renegade", network_id=42161,
            key="renegade_levels", ttl_seconds=30,
        )
    """

    def __init__(
        self,
        cache: Cache,
        consumer_id: str,
        network_id: int,
        key: str,
        ttl_seconds: int,
        transform: Optional[Callable[[Any], Any]] = None,
        serialize: Callable[[Any], str] = to_json,
    ):
        self._cache = cache
        self._consumer_id = consumer_id
        self._network_id = network_id
        self._key = key
        self._ttl_seconds = ttl_seconds
        self._transform = transform
        self._serialize = serialize
        self._log = logger.bind(consumer_id=consumer_id, network=network_id, key=key)

    @property
    def key(self) -> str:
        return self._key

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def __call__(self, value: Any) -> None:
        payload = self._transform(value) if self._transform else value
        serialized = self._serialize(payload)
        try:
            await self._cache.setex(
                self._consumer_id,
                self._network_id,
                self._key,
                self._ttl_seconds,
                serialized,
            )
        except Exception as e:
            self._log.warning(
                "Cache write failed",
                error_type=ErrorType.CACHE_WRITE_FAILED,
                error=str(e),
            )
            raise
        self._log.debug("Cache updated", ttl_seconds=self._ttl_seconds, size=len(serialized))


class StateMutationHandler:
    """Derives a value from each delivery and passes it to a setter.

    The setter may be synchronous or a coroutine function.

    Example:
        handler = StateMutationHandler(
            setter=adapter.set_blacklist,
            derive=lambda response: {e.address.lower() for e in response.black_list},
        )
    """

    def __init__(
        self,
        setter: Callable[[Any], Optional[Awaitable[None]]],
        derive: Optional[Callable[[Any], Any]] = None,
    ):
        self._setter = setter
        self._derive = derive

    async def __call__(self, value: Any) -> None:
        derived = self._derive(value) if self._derive else value
        outcome = self._setter(derived)
        if inspect.isawaitable(outcome):
            await outcome


class HandlerChain:
    """Runs several handlers in order for each delivered value.

    A failing handler stops the chain; the poller reports the cycle as a
    handler error.
    """

    def __init__(self, *handlers: Callable[[Any], Optional[Awaitable[None]]]):
        self._handlers = handlers

    async def __call__(self, value: Any) -> None:
        for handler in self._handlers:
            outcome = handler(value)
            if inspect.isawaitable(outcome):
                await outcome

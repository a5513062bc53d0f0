"""SQL-backed cache shared between processes.

Master instances write feed values here; slave instances (and the status
API) read them. Backed by SQLAlchemy async sessions on the cache_entries
table; SQLite in WAL mode by default.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import OperationalError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from dexfeeds.cache.base import Cache, CachedValue
from dexfeeds.database import CacheEntryModel, get_async_session_factory

logger = structlog.get_logger(__name__)

# Standard logger for tenacity before_sleep_log (requires stdlib logger)
_tenacity_logger = logging.getLogger("dexfeeds.cache.sql.retry")


def _to_datetime(epoch_seconds: float) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)


class SQLCache(Cache):
    """Cache persisted in the cache_entries table.

    Writes are upserts (session.merge on the composite primary key) and are
    retried on OperationalError, which SQLite raises for "database is locked"
    when another process holds the write lock.
    """

    def __init__(self, session_factory=None, clock: Callable[[], float] = time.time):
        """Initialize SQL cache.

        Args:
            session_factory: AsyncSession factory (default: the application's
                             lazily created factory from dexfeeds.database)
            clock: Epoch-seconds clock used for expiry
        """
        super().__init__(clock)
        self._session_factory = session_factory
        self._log = logger.bind(cache="sql")

    def _sessions(self):
        if self._session_factory is None:
            self._session_factory = get_async_session_factory()
        return self._session_factory

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=0.05, max=1, jitter=0.1),
        retry=retry_if_exception_type(OperationalError),
        reraise=True,
        before_sleep=before_sleep_log(_tenacity_logger, logging.WARNING),
    )
    async def _store(self, consumer_id, network_id, key, value, expires_at) -> None:
        async with self._sessions()() as session:
            await session.merge(
                CacheEntryModel(
                    consumer_id=consumer_id,
                    network_id=network_id,
                    key=key,
                    value=value,
                    expires_at=_to_datetime(expires_at),
                )
            )
            await session.commit()

    async def _load(self, consumer_id, network_id, key) -> Optional[CachedValue]:
        async with self._sessions()() as session:
            result = await session.execute(
                select(CacheEntryModel).where(
                    CacheEntryModel.consumer_id == consumer_id,
                    CacheEntryModel.network_id == network_id,
                    CacheEntryModel.key == key,
                )
            )
            row = result.scalar_one_or_none()

        if row is None:
            return None
        expires_at = row.expires_at.timestamp()
        if expires_at <= self._clock():
            return None
        return CachedValue(row.value, expires_at)

    async def purge_expired(self) -> int:
        """Delete expired rows.

        Returns:
            Number of rows deleted
        """
        now = _to_datetime(self._clock())
        async with self._sessions()() as session:
            result = await session.execute(
                delete(CacheEntryModel).where(CacheEntryModel.expires_at <= now)
            )
            await session.commit()
        if result.rowcount:
            self._log.info("Purged expired cache entries", count=result.rowcount)
        return result.rowcount or 0

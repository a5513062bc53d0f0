"""Database configuration and session management."""

import threading
from datetime import datetime, timezone

import structlog
from sqlalchemy import DateTime, Integer, String, Text, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, sessionmaker
from sqlalchemy.types import TypeDecorator

logger = structlog.get_logger()

# Thread-safe lock for lazy initialization of globals
_init_lock = threading.Lock()


class UtcDateTime(TypeDecorator):
    """Store timezone-aware UTC datetimes as naive UTC in SQLite.

    SQLite doesn't understand timezones, so we:
    1. Accept timezone-aware datetimes from Python
    2. Store them as naive UTC in the database
    3. Return them as timezone-aware UTC when retrieved
    """

    impl = DateTime(timezone=False)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return value.replace(tzinfo=timezone.utc)
        return value


def _utc_now():
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# SQLAlchemy declarative base for models
Base = declarative_base()

# Engine and session factory will be initialized lazily
_engine = None
_async_session = None


def create_engine_for_url(database_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine, tuning SQLite for concurrent writers.

    SQLite Configuration:
    - WAL mode: readers never block the poller's cache writes
    - PRAGMA synchronous=NORMAL: balance between safety and performance
    - 30s busy timeout before "database is locked" surfaces as OperationalError
    """
    is_sqlite = database_url.startswith("sqlite")
    connect_args = {"check_same_thread": False, "timeout": 30} if is_sqlite else {}

    engine = create_async_engine(database_url, echo=False, connect_args=connect_args)

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def setup_sqlite(dbapi_conn, connection_record):
            dbapi_conn.execute("PRAGMA journal_mode=WAL")
            dbapi_conn.execute("PRAGMA synchronous=NORMAL")
            dbapi_conn.execute("PRAGMA cache_size=10000")

    return engine


def get_engine() -> AsyncEngine:
    """Get or create the database engine (lazy initialization).

    Thread-safe using double-checked locking pattern.
    """
    global _engine
    if _engine is None:
        with _init_lock:
            if _engine is None:
                from dexfeeds.config import get_settings

                _engine = create_engine_for_url(get_settings().database_url)
    return _engine


def get_async_session_factory():
    """Get or create the async session factory (lazy initialization).

    Thread-safe using double-checked locking pattern.
    """
    global _async_session
    if _async_session is None:
        with _init_lock:
            if _async_session is None:
                _async_session = make_session_factory(get_engine())
    return _async_session


def make_session_factory(engine: AsyncEngine):
    """Build an AsyncSession factory bound to engine."""
    return sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized", tables=sorted(Base.metadata.tables))


async def dispose_engine() -> None:
    """Dispose the lazily created engine and forget the session factory."""
    global _engine, _async_session
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session = None


# ============================================================================
# ORM Models for the shared feed cache
# ============================================================================


class CacheEntryModel(Base):
    """SQLAlchemy ORM model for cache_entries table.

    One row per (consumer_id, network_id, key). Rows past expires_at are
    treated as absent by readers and removed by purge_expired().
    """

    __tablename__ = "cache_entries"

    consumer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    network_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        UtcDateTime, index=True, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UtcDateTime, default=_utc_now, onupdate=_utc_now, nullable=False
    )

"""Shared pytest fixtures."""

import pytest

from dexfeeds.cache.memory import InMemoryCache
from dexfeeds.feeds.mock import MockTransport
from dexfeeds.feeds.ticker import ManualTicker


@pytest.fixture(autouse=True)
def reset_settings_singleton():
    """Reset settings singleton before each test."""
    import dexfeeds.config

    dexfeeds.config._settings_instance = None
    yield
    dexfeeds.config._settings_instance = None


@pytest.fixture(autouse=True)
def isolate_database(tmp_path, monkeypatch):
    """Point the lazily created engine at a per-test SQLite file."""
    import dexfeeds.database

    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    dexfeeds.database._engine = None
    dexfeeds.database._async_session = None
    yield
    dexfeeds.database._engine = None
    dexfeeds.database._async_session = None


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio for async tests."""
    return "asyncio"


@pytest.fixture
def ticker() -> ManualTicker:
    """Virtual clock starting at t=0."""
    return ManualTicker()


@pytest.fixture
def transport() -> MockTransport:
    """Scripted transport with an empty script."""
    return MockTransport()


class FakeClock:
    """Epoch-seconds clock the test moves by hand."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock) -> InMemoryCache:
    """In-memory cache driven by the fake clock."""
    return InMemoryCache(clock=clock)

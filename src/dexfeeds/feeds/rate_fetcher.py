"""Base class for an adapter's set of pollers."""

import asyncio
from typing import Iterable, Optional

import structlog

from dexfeeds.feeds.base import FeedSource
from dexfeeds.feeds.exceptions import FeedConfigurationError
from dexfeeds.feeds.observers import FeedObserver, LoggingFeedObserver
from dexfeeds.feeds.poller import Poller
from dexfeeds.feeds.results import FetchResult
from dexfeeds.feeds.ticker import Ticker
from dexfeeds.feeds.transport import Transport

logger = structlog.get_logger(__name__)


class RateFetcher:
    """Owns one Poller per feed for a single adapter.

    Pollers run independently; start()/stop() fan out to all of them.
    Subclasses register their feeds in __init__ via add_feed().
    """

    def __init__(
        self,
        dex_key: str,
        network: int,
        transport: Transport,
        ticker: Optional[Ticker] = None,
        observers: Iterable[FeedObserver] = (),
    ):
        self.dex_key = dex_key
        self.network = network
        self._transport = transport
        self._ticker = ticker
        self._observers = list(observers)
        self._pollers: dict[str, Poller] = {}
        self._log = logger.bind(dex_key=dex_key, network=network)

    @property
    def pollers(self) -> list[Poller]:
        return list(self._pollers.values())

    @property
    def is_polling(self) -> bool:
        return any(poller.is_polling for poller in self._pollers.values())

    def add_feed(self, feed: FeedSource) -> Poller:
        """Create and register the poller for feed.

        Raises:
            FeedConfigurationError: If a feed with the same name is registered
        """
        if feed.name in self._pollers:
            raise FeedConfigurationError(f"Feed {feed.name!r} is already registered")
        poller = Poller(
            feed,
            self._transport,
            ticker=self._ticker,
            observers=[LoggingFeedObserver(), *self._observers],
        )
        self._pollers[feed.name] = poller
        return poller

    def poller(self, name: str) -> Poller:
        return self._pollers[name]

    def start(self) -> None:
        """Start every poller; the first ticks fire one interval from now."""
        for poller in self._pollers.values():
            poller.start()
        self._log.info("Rate fetcher started", feeds=list(self._pollers))

    def stop(self) -> None:
        for poller in self._pollers.values():
            poller.stop()
        self._log.info("Rate fetcher stopped", feeds=list(self._pollers))

    async def fetch_once(self) -> list[FetchResult]:
        """Force one cycle of every feed concurrently (startup warm-up)."""
        results = await asyncio.gather(
            *(poller.fetch(force=True) for poller in self._pollers.values())
        )
        self._log.info(
            "Warm-up fetch completed",
            ok=[r.feed for r in results if r.ok],
            failed=[r.feed for r in results if r.failed],
        )
        return list(results)

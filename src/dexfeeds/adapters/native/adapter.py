"""Native DEX adapter."""

import json
from typing import Iterable, Optional

import structlog

from dexfeeds.adapters.base import DexAdapter
from dexfeeds.adapters.native.constants import (
    DEX_KEY,
    NATIVE_ORDERBOOK_CACHE_KEY,
    NATIVE_ORDERBOOK_CACHE_TTL_SECONDS,
)
from dexfeeds.adapters.native.rate_fetcher import NativeRateFetcher
from dexfeeds.cache.base import Cache
from dexfeeds.feeds.observers import FeedObserver
from dexfeeds.feeds.rate_fetcher import RateFetcher
from dexfeeds.feeds.ticker import Ticker
from dexfeeds.feeds.transport import Transport
from dexfeeds.models import Token

logger = structlog.get_logger(__name__)


class NativeAdapter(DexAdapter):
    """Serves the cached Native orderbook and the current blacklist.

    The orderbook lives in the shared cache; the blacklist is held in
    memory and replaced wholesale by the blacklist feed.
    """

    def __init__(
        self,
        network: int,
        cache: Cache,
        transport: Transport,
        api_key: str,
        is_slave: bool = False,
        ticker: Optional[Ticker] = None,
        observers: Iterable[FeedObserver] = (),
    ):
        super().__init__(network, is_slave)
        self._cache = cache
        self._blacklist: frozenset[str] = frozenset()
        self._rate_fetcher = NativeRateFetcher(
            network,
            cache,
            transport,
            api_key=api_key,
            set_blacklist=self.set_blacklist,
            ticker=ticker,
            observers=observers,
            dex_key=self.dex_key,
        )
        self._log = logger.bind(dex_key=self.dex_key, network=network)

    @property
    def dex_key(self) -> str:
        return DEX_KEY

    @property
    def rate_fetcher(self) -> RateFetcher:
        return self._rate_fetcher

    @property
    def blacklist(self) -> frozenset[str]:
        return self._blacklist

    async def initialize_pricing(self) -> None:
        if self.is_slave:
            self._log.info("Slave instance, reading cached orderbook only")
            return
        await self._rate_fetcher.fetch_once()
        self._rate_fetcher.start()

    def set_blacklist(self, addresses: Iterable[str]) -> None:
        self._blacklist = frozenset(address.lower() for address in addresses)
        self._log.debug("Blacklist updated", size=len(self._blacklist))

    def is_blacklisted(self, address: str) -> bool:
        return address.lower() in self._blacklist

    async def get_cached_orderbook(self) -> Optional[list[dict]]:
        """Normalized orderbook entries, or None if no fresh copy is cached."""
        cached = await self._cache.get_and_cache_locally(
            self.dex_key,
            self.network,
            NATIVE_ORDERBOOK_CACHE_KEY,
            NATIVE_ORDERBOOK_CACHE_TTL_SECONDS,
        )
        if cached is None:
            return None
        return json.loads(cached)

    async def get_pool_identifiers(self, src_token: Token, dest_token: Token) -> list[str]:
        src = src_token.address.lower()
        dest = dest_token.address.lower()
        if src == dest:
            return []

        orderbook = await self.get_cached_orderbook()
        if not orderbook:
            return []

        pair = {src, dest}
        for entry in orderbook:
            if {entry["base_address"], entry["quote_address"]} == pair:
                return [self.get_pool_identifier(src, dest)]
        return []

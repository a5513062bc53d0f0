"""Native orderbook and blacklist feeds."""

from functools import partial
from typing import Any, Callable, Iterable, Optional

import structlog
from pydantic import ValidationError

from dexfeeds.adapters.native.constants import (
    DEX_KEY,
    NATIVE_API_KEY_HEADER,
    NATIVE_API_URL,
    NATIVE_BLACKLIST_ENDPOINT,
    NATIVE_BLACKLIST_POLLING_INTERVAL_SECONDS,
    NATIVE_CHAIN_NAMES,
    NATIVE_ORDERBOOK_CACHE_KEY,
    NATIVE_ORDERBOOK_CACHE_TTL_SECONDS,
    NATIVE_ORDERBOOK_ENDPOINT,
    NATIVE_ORDERBOOK_POLLING_INTERVAL_SECONDS,
)
from dexfeeds.adapters.native.schemas import (
    NativeBlacklistResponse,
    NativeOrderbookEntry,
)
from dexfeeds.cache.base import Cache
from dexfeeds.feeds.base import CallbackFeed
from dexfeeds.feeds.exceptions import FeedConfigurationError, FeedValidationError
from dexfeeds.feeds.handlers import (
    CacheWriteHandler,
    StateMutationHandler,
    warn_if_ttl_too_short,
)
from dexfeeds.feeds.observers import FeedObserver
from dexfeeds.feeds.rate_fetcher import RateFetcher
from dexfeeds.feeds.results import FetchResult
from dexfeeds.feeds.ticker import Ticker
from dexfeeds.feeds.transport import Transport
from dexfeeds.models import RequestOptions

logger = structlog.get_logger(__name__)


def cast_orderbook(data: Any) -> list[NativeOrderbookEntry]:
    """Validate the orderbook payload; anything but a list is an empty book."""
    if not isinstance(data, list):
        return []
    try:
        return [NativeOrderbookEntry.model_validate(entry) for entry in data]
    except ValidationError as e:
        raise FeedValidationError(f"Invalid Native orderbook entry: {e}") from e


def normalize_orderbook(entries: list[NativeOrderbookEntry]) -> list[dict]:
    """Lowercase pair addresses and collapse side to "ask" or "bid"."""
    return [
        {
            **entry.model_dump(),
            "base_address": entry.base_address.lower(),
            "quote_address": entry.quote_address.lower(),
            "side": "ask" if entry.side == "ask" else "bid",
        }
        for entry in entries
    ]


def cast_blacklist(data: Any) -> NativeBlacklistResponse:
    try:
        return NativeBlacklistResponse.model_validate(data)
    except ValidationError as e:
        raise FeedValidationError(f"Invalid Native blacklist response: {e}") from e


def blacklisted_addresses(response: NativeBlacklistResponse, network: int) -> list[str]:
    """Lowercased addresses blacklisted on network."""
    return [
        entry.address.lower()
        for entry in response.black_list
        if entry.chainId == network
    ]


class NativeRateFetcher(RateFetcher):
    """Polls the Native orderbook into the cache and the blacklist into a setter.

    Raises:
        FeedConfigurationError: Unsupported network or missing API key
    """

    def __init__(
        self,
        network: int,
        cache: Cache,
        transport: Transport,
        api_key: str,
        set_blacklist: Callable[[list[str]], Any],
        ticker: Optional[Ticker] = None,
        observers: Iterable[FeedObserver] = (),
        dex_key: str = DEX_KEY,
    ):
        super().__init__(dex_key, network, transport, ticker=ticker, observers=observers)

        chain_name = NATIVE_CHAIN_NAMES.get(network)
        if chain_name is None:
            raise FeedConfigurationError(f"Network {network} is not supported by Native")
        if not api_key:
            raise FeedConfigurationError(
                "Native API key is not set (NATIVE_API_KEY)"
            )

        headers = {NATIVE_API_KEY_HEADER: api_key}

        orderbook_name = f"{dex_key}.orderbook"
        warn_if_ttl_too_short(
            orderbook_name,
            NATIVE_ORDERBOOK_POLLING_INTERVAL_SECONDS,
            NATIVE_ORDERBOOK_CACHE_TTL_SECONDS,
        )
        self.orderbook_poller = self.add_feed(
            CallbackFeed(
                name=orderbook_name,
                interval_seconds=NATIVE_ORDERBOOK_POLLING_INTERVAL_SECONDS,
                request_template=RequestOptions(
                    url=f"{NATIVE_API_URL}{NATIVE_ORDERBOOK_ENDPOINT}",
                    params={"chain": chain_name},
                    headers=headers,
                ),
                cast=cast_orderbook,
                on_result=CacheWriteHandler(
                    cache,
                    consumer_id=dex_key,
                    network_id=network,
                    key=NATIVE_ORDERBOOK_CACHE_KEY,
                    ttl_seconds=NATIVE_ORDERBOOK_CACHE_TTL_SECONDS,
                    transform=normalize_orderbook,
                ),
            )
        )

        self.blacklist_poller = self.add_feed(
            CallbackFeed(
                name=f"{dex_key}.blacklist",
                interval_seconds=NATIVE_BLACKLIST_POLLING_INTERVAL_SECONDS,
                request_template=RequestOptions(
                    url=f"{NATIVE_API_URL}{NATIVE_BLACKLIST_ENDPOINT}",
                    headers=headers,
                ),
                cast=cast_blacklist,
                on_result=StateMutationHandler(
                    setter=set_blacklist,
                    derive=partial(blacklisted_addresses, network=network),
                ),
            )
        )

    async def fetch_once(self) -> list[FetchResult]:
        """Force one orderbook refresh so pricing has data before the first tick."""
        return [await self.orderbook_poller.fetch(force=True)]

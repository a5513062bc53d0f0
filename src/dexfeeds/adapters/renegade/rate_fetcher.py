"""Renegade price-level and token-metadata feeds."""

from typing import Any, Callable, Iterable, Optional

import structlog
from pydantic import ValidationError

from dexfeeds.adapters.renegade.auth import RenegadeAuthenticator
from dexfeeds.adapters.renegade.constants import (
    DEX_KEY,
    RENEGADE_LEVELS_CACHE_KEY,
    RENEGADE_LEVELS_CACHE_TTL_SECONDS,
    RENEGADE_LEVELS_ENDPOINT,
    RENEGADE_LEVELS_POLLING_INTERVAL_SECONDS,
    RENEGADE_TOKEN_MAPPINGS_BASE_URL,
    RENEGADE_TOKEN_METADATA_CACHE_KEY,
    RENEGADE_TOKEN_METADATA_CACHE_TTL_SECONDS,
    RENEGADE_TOKEN_METADATA_POLLING_INTERVAL_SECONDS,
    network_params,
)
from dexfeeds.adapters.renegade.levels import RenegadeLevelsResponse
from dexfeeds.adapters.renegade.schemas import RenegadeTokenRemap
from dexfeeds.cache.base import Cache
from dexfeeds.feeds.base import CallbackFeed
from dexfeeds.feeds.exceptions import FeedValidationError
from dexfeeds.feeds.handlers import (
    CacheWriteHandler,
    HandlerChain,
    StateMutationHandler,
    warn_if_ttl_too_short,
)
from dexfeeds.feeds.observers import FeedObserver
from dexfeeds.feeds.rate_fetcher import RateFetcher
from dexfeeds.feeds.ticker import Ticker
from dexfeeds.feeds.transport import Transport
from dexfeeds.models import RequestOptions

logger = structlog.get_logger(__name__)


def cast_token_remap(data: Any) -> RenegadeTokenRemap:
    try:
        return RenegadeTokenRemap.model_validate(data)
    except ValidationError as e:
        raise FeedValidationError(f"Invalid Renegade token metadata: {e}") from e


def token_map(remap: RenegadeTokenRemap) -> dict[str, dict]:
    """{lowercase address: {address, decimals, symbol}} for the cache."""
    return {
        token.address.lower(): {
            "address": token.address,
            "decimals": token.decimals,
            "symbol": token.ticker,
        }
        for token in remap.tokens
    }


class RenegadeRateFetcher(RateFetcher):
    """Polls signed price levels and the public token mappings into the cache.

    Raises:
        FeedConfigurationError: Unsupported network or unusable credentials
    """

    def __init__(
        self,
        network: int,
        cache: Cache,
        transport: Transport,
        api_key: str,
        api_secret: str,
        ticker: Optional[Ticker] = None,
        observers: Iterable[FeedObserver] = (),
        dex_key: str = DEX_KEY,
        clock_ms: Optional[Callable[[], int]] = None,
        set_tokens: Optional[Callable[[dict[str, dict]], Any]] = None,
    ):
        super().__init__(dex_key, network, transport, ticker=ticker, observers=observers)

        params = network_params(network)
        self.usdc_address = params["usdc_address"]
        authenticator = RenegadeAuthenticator(api_key, api_secret, clock_ms=clock_ms)

        levels_name = f"{dex_key}.levels"
        warn_if_ttl_too_short(
            levels_name,
            RENEGADE_LEVELS_POLLING_INTERVAL_SECONDS,
            RENEGADE_LEVELS_CACHE_TTL_SECONDS,
        )
        self.levels_poller = self.add_feed(
            CallbackFeed(
                name=levels_name,
                interval_seconds=RENEGADE_LEVELS_POLLING_INTERVAL_SECONDS,
                request_template=RequestOptions(
                    url=f"{params['base_url']}{RENEGADE_LEVELS_ENDPOINT}",
                    headers={"Content-Type": "application/json"},
                ),
                authenticate=authenticator,
                cast=self._cast_levels,
                on_result=CacheWriteHandler(
                    cache,
                    consumer_id=dex_key,
                    network_id=network,
                    key=RENEGADE_LEVELS_CACHE_KEY,
                    ttl_seconds=RENEGADE_LEVELS_CACHE_TTL_SECONDS,
                    transform=lambda levels: levels.raw_data,
                ),
            )
        )

        # Metadata expires long before the next daily tick; adapters refetch
        # on a cache miss via fetch_token_metadata_once().
        on_token_metadata = CacheWriteHandler(
            cache,
            consumer_id=dex_key,
            network_id=network,
            key=RENEGADE_TOKEN_METADATA_CACHE_KEY,
            ttl_seconds=RENEGADE_TOKEN_METADATA_CACHE_TTL_SECONDS,
            transform=token_map,
        )
        if set_tokens is not None:
            on_token_metadata = HandlerChain(
                on_token_metadata,
                StateMutationHandler(set_tokens, derive=token_map),
            )
        self.token_metadata_poller = self.add_feed(
            CallbackFeed(
                name=f"{dex_key}.token_metadata",
                interval_seconds=RENEGADE_TOKEN_METADATA_POLLING_INTERVAL_SECONDS,
                request_template=RequestOptions(
                    url=f"{RENEGADE_TOKEN_MAPPINGS_BASE_URL}{params['chain_name']}.json",
                ),
                cast=cast_token_remap,
                on_result=on_token_metadata,
            )
        )

    def _cast_levels(self, data: Any) -> RenegadeLevelsResponse:
        return RenegadeLevelsResponse.from_raw(data, self.usdc_address)

    async def fetch_token_metadata_once(self) -> bool:
        """Force a token metadata refresh.

        Returns:
            True if the metadata was fetched and cached
        """
        result = await self.token_metadata_poller.fetch(force=True)
        return result.ok

"""Renegade DEX adapter."""

import json
from typing import Callable, Iterable, Optional

import structlog

from dexfeeds.adapters.base import DexAdapter
from dexfeeds.adapters.renegade.constants import (
    DEX_KEY,
    RENEGADE_LEVELS_CACHE_KEY,
    RENEGADE_LEVELS_CACHE_TTL_SECONDS,
    RENEGADE_TOKEN_METADATA_CACHE_KEY,
    RENEGADE_TOKEN_METADATA_CACHE_TTL_SECONDS,
)
from dexfeeds.adapters.renegade.levels import RenegadeLevelsResponse
from dexfeeds.adapters.renegade.rate_fetcher import RenegadeRateFetcher
from dexfeeds.cache.base import Cache
from dexfeeds.feeds.exceptions import FeedConfigurationError
from dexfeeds.feeds.observers import FeedObserver
from dexfeeds.feeds.rate_fetcher import RateFetcher
from dexfeeds.feeds.ticker import Ticker
from dexfeeds.feeds.transport import Transport
from dexfeeds.models import Token

logger = structlog.get_logger(__name__)

DEFAULT_TOKEN_DECIMALS = 18
UNKNOWN_TOKEN_SYMBOL = "UNKNOWN"


class RenegadeAdapter(DexAdapter):
    """Serves cached Renegade price levels and token metadata.

    Only Arbitrum and Base are supported; construction fails fast for any
    other network or for missing credentials.
    """

    def __init__(
        self,
        network: int,
        cache: Cache,
        transport: Transport,
        api_key: str,
        api_secret: str,
        is_slave: bool = False,
        ticker: Optional[Ticker] = None,
        observers: Iterable[FeedObserver] = (),
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        super().__init__(network, is_slave)
        if not api_key:
            raise FeedConfigurationError(
                "Renegade API key is not set (RENEGADE_API_KEY)"
            )
        if not api_secret:
            raise FeedConfigurationError(
                "Renegade API secret is not set (RENEGADE_API_SECRET)"
            )

        self._cache = cache
        self._tokens_map: dict[str, Token] = {}
        self._rate_fetcher = RenegadeRateFetcher(
            network,
            cache,
            transport,
            api_key=api_key,
            api_secret=api_secret,
            ticker=ticker,
            observers=observers,
            dex_key=self.dex_key,
            clock_ms=clock_ms,
            set_tokens=self.set_tokens,
        )
        self._log = logger.bind(dex_key=self.dex_key, network=network)

    @property
    def dex_key(self) -> str:
        return DEX_KEY

    @property
    def rate_fetcher(self) -> RateFetcher:
        return self._rate_fetcher

    @property
    def usdc_address(self) -> str:
        return self._rate_fetcher.usdc_address

    @property
    def tokens_map(self) -> dict[str, Token]:
        return dict(self._tokens_map)

    async def initialize_pricing(self) -> None:
        await self.set_tokens_map()
        if not self.is_slave:
            self._rate_fetcher.start()

    async def set_tokens_map(self) -> None:
        """Load token metadata from the cache, fetching it once on a miss.

        On failure the previous map is kept and a warning is logged.
        """
        metadata = await self.get_cached_token_metadata()
        if metadata is None:
            if await self._rate_fetcher.fetch_token_metadata_once():
                metadata = await self.get_cached_token_metadata()

        if metadata is None:
            self._log.warning("Failed to fetch token metadata")
            return
        self._tokens_map = metadata
        self._log.info("Token metadata loaded", tokens=len(metadata))

    def set_tokens(self, tokens: dict[str, dict]) -> None:
        """Replace the token map with freshly fetched metadata."""
        self._tokens_map = {
            address: Token.model_validate(token) for address, token in tokens.items()
        }
        self._log.info("Token metadata refreshed", tokens=len(self._tokens_map))

    async def update_pool_state(self) -> None:
        await self.set_tokens_map()

    async def get_cached_levels(self) -> Optional[RenegadeLevelsResponse]:
        cached = await self._cache.get_and_cache_locally(
            self.dex_key,
            self.network,
            RENEGADE_LEVELS_CACHE_KEY,
            RENEGADE_LEVELS_CACHE_TTL_SECONDS,
        )
        if cached is None:
            return None
        return RenegadeLevelsResponse.from_raw(json.loads(cached), self.usdc_address)

    async def get_cached_token_metadata(self) -> Optional[dict[str, Token]]:
        cached = await self._cache.get_and_cache_locally(
            self.dex_key,
            self.network,
            RENEGADE_TOKEN_METADATA_CACHE_KEY,
            RENEGADE_TOKEN_METADATA_CACHE_TTL_SECONDS,
        )
        if cached is None:
            return None
        return {
            address: Token.model_validate(token)
            for address, token in json.loads(cached).items()
        }

    async def get_pool_identifiers(self, src_token: Token, dest_token: Token) -> list[str]:
        """One pool id when the pair is quoted by Renegade, else empty.

        Errors reading or decoding the cached levels are logged and
        reported as "no pools" so pricing never fails on this adapter.
        """
        if src_token.address.lower() == dest_token.address.lower():
            return []

        try:
            levels = await self.get_cached_levels()
        except Exception as e:
            self._log.error("Error checking Renegade pool identifiers", error=str(e))
            return []

        if levels is None or levels.resolve_pair(src_token, dest_token) is None:
            return []
        return [self.get_pool_identifier(src_token.address, dest_token.address)]

    def get_token_from_address(self, address: str) -> Token:
        """Token metadata for address, or an 18-decimal UNKNOWN placeholder."""
        token = self._tokens_map.get(address.lower())
        if token is None:
            return Token(
                address=address,
                decimals=DEFAULT_TOKEN_DECIMALS,
                symbol=UNKNOWN_TOKEN_SYMBOL,
            )
        return token

"""Abstract base class for DEX adapters.

An adapter owns the rate fetcher (pollers) for one exchange on one network
and exposes the cached market data to pricing code. Adapters never block
pricing on the network: readers only see what the pollers last cached.
"""

from abc import ABC, abstractmethod

from dexfeeds.feeds.poller import Poller
from dexfeeds.feeds.rate_fetcher import RateFetcher
from dexfeeds.models import Token


class DexAdapter(ABC):
    """Abstract base class for all DEX adapter implementations.

    Typical usage:
        adapter = RenegadeAdapter(network=42161, cache=cache, transport=transport,
                                  api_key=key, api_secret=secret)
        await adapter.initialize_pricing()   # warm-up, then start polling
        ids = await adapter.get_pool_identifiers(src, dest)
        await adapter.release_resources()
    """

    def __init__(self, network: int, is_slave: bool = False):
        self.network = network
        self.is_slave = is_slave

    @property
    @abstractmethod
    def dex_key(self) -> str:
        """Unique identifier for this DEX (also the cache consumer id)."""

    @property
    @abstractmethod
    def rate_fetcher(self) -> RateFetcher:
        """Rate fetcher owning this adapter's pollers."""

    @property
    def pollers(self) -> list[Poller]:
        return self.rate_fetcher.pollers

    @abstractmethod
    async def initialize_pricing(self) -> None:
        """Prepare cached data and start polling (unless slave).

        Raises:
            FeedConfigurationError: If the adapter can never fetch as configured
        """

    @abstractmethod
    async def get_pool_identifiers(self, src_token: Token, dest_token: Token) -> list[str]:
        """Pool identifiers usable for a src -> dest swap; empty if none."""

    async def update_pool_state(self) -> None:
        """Re-read shared state written by the pollers. No-op by default."""

    async def release_resources(self) -> None:
        """Stop polling. Slave instances never started pollers."""
        if not self.is_slave:
            self.rate_fetcher.stop()

    def get_pool_identifier(self, token_a: str, token_b: str) -> str:
        """Canonical pool id: dex key plus both addresses, lowercased and sorted."""
        addresses = sorted((token_a.lower(), token_b.lower()))
        return f"{self.dex_key}_{'_'.join(addresses)}"

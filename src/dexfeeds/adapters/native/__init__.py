"""Native RFQ orderbook integration."""

from dexfeeds.adapters.native.adapter import NativeAdapter
from dexfeeds.adapters.native.rate_fetcher import NativeRateFetcher

__all__ = ["NativeAdapter", "NativeRateFetcher"]

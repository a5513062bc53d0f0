"""Renegade dark-pool RFQ integration."""

from dexfeeds.adapters.renegade.adapter import RenegadeAdapter
from dexfeeds.adapters.renegade.auth import RenegadeAuthenticator
from dexfeeds.adapters.renegade.levels import RenegadeLevelsResponse
from dexfeeds.adapters.renegade.rate_fetcher import RenegadeRateFetcher

__all__ = [
    "RenegadeAdapter",
    "RenegadeAuthenticator",
    "RenegadeLevelsResponse",
    "RenegadeRateFetcher",
]

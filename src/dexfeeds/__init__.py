"""Polling rate fetchers and persisted caches for DEX liquidity feeds."""

__version__ = "0.1.0"

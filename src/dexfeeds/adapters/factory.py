"""Build the adapters enabled in Settings."""

from typing import Iterable, Optional

import structlog

from dexfeeds.adapters.base import DexAdapter
from dexfeeds.adapters.native.adapter import NativeAdapter
from dexfeeds.adapters.renegade.adapter import RenegadeAdapter
from dexfeeds.cache.base import Cache
from dexfeeds.config import Settings
from dexfeeds.feeds.observers import FeedObserver
from dexfeeds.feeds.ticker import Ticker
from dexfeeds.feeds.transport import Transport

logger = structlog.get_logger(__name__)


def build_adapters(
    settings: Settings,
    cache: Cache,
    transport: Transport,
    observers: Iterable[FeedObserver] = (),
    ticker: Optional[Ticker] = None,
) -> list[DexAdapter]:
    """Create one adapter per enabled DEX for settings.network.

    Raises:
        FeedConfigurationError: If an enabled DEX cannot run as configured
    """
    observers = list(observers)
    adapters: list[DexAdapter] = []

    for dex_key in settings.enabled_dexes:
        if dex_key == "native":
            adapter: DexAdapter = NativeAdapter(
                settings.network,
                cache,
                transport,
                api_key=settings.native_api_key,
                is_slave=settings.is_slave,
                ticker=ticker,
                observers=observers,
            )
        elif dex_key == "renegade":
            adapter = RenegadeAdapter(
                settings.network,
                cache,
                transport,
                api_key=settings.renegade_api_key,
                api_secret=settings.renegade_api_secret,
                is_slave=settings.is_slave,
                ticker=ticker,
                observers=observers,
            )
        else:
            # Settings validation rejects unknown keys
            continue
        adapters.append(adapter)
        logger.info(
            "Adapter created",
            dex_key=dex_key,
            network=settings.network,
            is_slave=settings.is_slave,
        )

    return adapters

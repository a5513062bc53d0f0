"""Polling feed engine.

Defines the feed descriptor interface, the Poller with its overlap guard
and fixed-rate scheduling, the ticker port, transports, observers, and the
reusable cache-write and state-mutation handlers.
"""

from dexfeeds.feeds.exceptions import (
    FeedConfigurationError,
    FeedConnectionError,
    FeedError,
    FeedHandlerError,
    FeedHTTPStatusError,
    FeedTimeoutError,
    FeedTransportError,
    FeedValidationError,
)
from dexfeeds.feeds.base import CallbackFeed, FeedSource
from dexfeeds.feeds.results import FetchResult
from dexfeeds.feeds.ticker import AsyncioTicker, ManualTicker, Ticker
from dexfeeds.feeds.transport import HttpxTransport, Transport
from dexfeeds.feeds.mock import MockTransport
from dexfeeds.feeds.observers import FeedObserver, FeedStats, LoggingFeedObserver
from dexfeeds.feeds.poller import Poller
from dexfeeds.feeds.handlers import (
    CacheWriteHandler,
    HandlerChain,
    StateMutationHandler,
)
from dexfeeds.feeds.rate_fetcher import RateFetcher

__all__ = [
    # Core
    "Poller",
    "FetchResult",
    "FeedSource",
    "CallbackFeed",
    "RateFetcher",
    # Scheduling
    "Ticker",
    "AsyncioTicker",
    "ManualTicker",
    # Transports
    "Transport",
    "HttpxTransport",
    "MockTransport",
    # Observers
    "FeedObserver",
    "FeedStats",
    "LoggingFeedObserver",
    # Handlers
    "CacheWriteHandler",
    "StateMutationHandler",
    "HandlerChain",
    # Exceptions (all inherit from FeedError)
    "FeedError",
    "FeedTransportError",
    "FeedTimeoutError",
    "FeedConnectionError",
    "FeedHTTPStatusError",
    "FeedValidationError",
    "FeedHandlerError",
    "FeedConfigurationError",
]

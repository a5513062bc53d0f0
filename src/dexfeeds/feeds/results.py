"""Structured outcome of a poller cycle."""

from dataclasses import dataclass
from typing import Literal, Optional

from dexfeeds.feeds.exceptions import (
    FeedHTTPStatusError,
    FeedTimeoutError,
)
from dexfeeds.logging import ErrorType
from dexfeeds.models import RequestOptions

FetchStatus = Literal[
    "ok",
    "skipped",
    "transport_error",
    "validation_error",
    "handler_error",
]


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch-cast-deliver cycle.

    Attributes:
        feed: Name of the feed the cycle ran for.
        status: "ok", "skipped" (overlap guard), or the failure category.
        started_at: Ticker time when the cycle started (seconds).
        duration: Ticker seconds spent in the cycle.
        forced: Whether the cycle bypassed the overlap guard.
        error: Exception that ended the cycle, if any.
        request: Options actually sent, after authentication.
    """

    feed: str
    status: FetchStatus
    started_at: float
    duration: float = 0.0
    forced: bool = False
    error: Optional[BaseException] = None
    request: Optional[RequestOptions] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def failed(self) -> bool:
        return not (self.ok or self.skipped)

    @property
    def error_type(self) -> Optional[str]:
        """ErrorType code for failed cycles, None otherwise."""
        if self.status == "validation_error":
            return ErrorType.FEED_VALIDATION_FAILED
        if self.status == "handler_error":
            return ErrorType.FEED_HANDLER_FAILED
        if self.status != "transport_error":
            return None
        if isinstance(self.error, FeedTimeoutError):
            return ErrorType.FEED_TIMEOUT
        if isinstance(self.error, FeedHTTPStatusError):
            return ErrorType.FEED_HTTP_ERROR
        return ErrorType.FEED_CONNECTION_FAILED

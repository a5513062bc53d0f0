"""Observers that receive every poller FetchResult.

The poller never lets a tick failure escape; instead each cycle's outcome
is pushed to its observers. LoggingFeedObserver turns failures into
structured log lines, FeedStats keeps per-feed counters for the status API.
"""

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Protocol

import structlog

from dexfeeds.feeds.exceptions import FeedHTTPStatusError
from dexfeeds.feeds.results import FetchResult
from dexfeeds.logging import redact_headers, sanitize_url
from dexfeeds.models import FeedStatus

logger = structlog.get_logger(__name__)


class FeedObserver(Protocol):
    """Receives the outcome of every cycle, including skipped ones."""

    def on_result(self, result: FetchResult) -> None: ...


class LoggingFeedObserver:
    """Logs cycle outcomes with error type codes and redacted request context.

    Successful and skipped cycles log at debug; transport and validation
    failures at warning; handler failures at error since they indicate a
    bug or a broken cache rather than a flaky upstream.
    """

    def __init__(self, log=None):
        self._log = log or logger

    def on_result(self, result: FetchResult) -> None:
        log = self._log.bind(feed=result.feed, forced=result.forced)

        if result.ok:
            log.debug("Feed cycle completed", duration_ms=_ms(result.duration))
            return
        if result.skipped:
            log.debug("Feed cycle skipped, previous cycle still in flight")
            return

        context = {
            "status": result.status,
            "error_type": result.error_type,
            "error": str(result.error),
            "duration_ms": _ms(result.duration),
        }
        if result.request is not None:
            context["url"] = sanitize_url(result.request.url)
            context["headers"] = redact_headers(result.request.headers)
        if isinstance(result.error, FeedHTTPStatusError):
            context["status_code"] = result.error.status_code
            context["response_body"] = result.error.body

        if result.status == "handler_error":
            log.error("Feed handler failed", **context)
        else:
            log.warning("Feed cycle failed", **context)


class FeedStats:
    """Per-feed success/failure counters.

    Skipped cycles are counted separately and do not reset or extend the
    consecutive failure streak.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._stats: dict[str, FeedStatus] = {}

    def on_result(self, result: FetchResult) -> None:
        status = self._stats.setdefault(result.feed, FeedStatus(feed=result.feed))
        status.last_status = result.status

        if result.skipped:
            status.skipped += 1
        elif result.ok:
            status.successes += 1
            status.consecutive_failures = 0
            status.last_success_at = self._clock()
        else:
            status.failures += 1
            status.consecutive_failures += 1
            status.last_error = str(result.error)
            status.last_error_type = result.error_type

    def get(self, feed: str) -> FeedStatus:
        """Counters for feed (zeroed if it has not reported yet)."""
        return self._stats.get(feed, FeedStatus(feed=feed)).model_copy()

    def snapshot(self, pollers: Iterable = ()) -> list[FeedStatus]:
        """Status of every known feed, with live state taken from pollers.

        Args:
            pollers: Pollers whose polling/in-flight flags are reported

        Returns:
            One FeedStatus per feed, sorted by feed name
        """
        statuses = {name: status.model_copy() for name, status in self._stats.items()}
        for poller in pollers:
            status = statuses.setdefault(poller.name, FeedStatus(feed=poller.name))
            status.polling = poller.is_polling
            status.in_flight = poller.in_flight
        return [statuses[name] for name in sorted(statuses)]


def _ms(seconds: float) -> int:
    return int(seconds * 1000)

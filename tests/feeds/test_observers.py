"""Tests for FeedStats and LoggingFeedObserver."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from dexfeeds.feeds.exceptions import (
    FeedHandlerError,
    FeedHTTPStatusError,
    FeedValidationError,
)
from dexfeeds.feeds.observers import FeedStats, LoggingFeedObserver
from dexfeeds.feeds.results import FetchResult
from dexfeeds.logging import ErrorType
from dexfeeds.models import RequestOptions

FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def result(status="ok", error=None, feed="renegade.levels", request=None):
    """Helper to create a FetchResult."""
    return FetchResult(feed=feed, status=status, started_at=0.0, error=error, request=request)


class TestFeedStats:
    """Tests for per-feed counters."""

    def test_counts_successes_and_failures(self):
        stats = FeedStats(clock=lambda: FIXED_NOW)

        stats.on_result(result())
        stats.on_result(result("transport_error", FeedHTTPStatusError("HTTP 503", 503)))
        stats.on_result(result("validation_error", FeedValidationError("bad shape")))

        status = stats.get("renegade.levels")
        assert status.successes == 1
        assert status.failures == 2
        assert status.consecutive_failures == 2
        assert status.last_status == "validation_error"
        assert status.last_error == "bad shape"
        assert status.last_error_type == ErrorType.FEED_VALIDATION_FAILED
        assert status.last_success_at == FIXED_NOW

    def test_success_resets_streak(self):
        stats = FeedStats()

        stats.on_result(result("handler_error", FeedHandlerError("cache down")))
        stats.on_result(result())

        assert stats.get("renegade.levels").consecutive_failures == 0

    def test_skips_do_not_touch_streak(self):
        stats = FeedStats()

        stats.on_result(result("handler_error", FeedHandlerError("cache down")))
        stats.on_result(result("skipped"))

        status = stats.get("renegade.levels")
        assert status.skipped == 1
        assert status.consecutive_failures == 1

    def test_snapshot_merges_live_poller_state(self):
        stats = FeedStats()
        stats.on_result(result(feed="native.orderbook"))
        poller = MagicMock()
        poller.name = "native.blacklist"
        poller.is_polling = True
        poller.in_flight = False

        snapshot = stats.snapshot([poller])

        assert [s.feed for s in snapshot] == ["native.blacklist", "native.orderbook"]
        assert snapshot[0].polling is True
        assert snapshot[0].successes == 0
        assert snapshot[1].successes == 1

    def test_get_returns_copy(self):
        stats = FeedStats()
        stats.on_result(result())

        stats.get("renegade.levels").successes = 99

        assert stats.get("renegade.levels").successes == 1


class TestLoggingFeedObserver:
    """Tests for structured failure logging."""

    def test_failure_logged_with_redacted_headers(self):
        log = MagicMock()
        log.bind.return_value = log
        observer = LoggingFeedObserver(log=log)
        request = RequestOptions(
            url="https://api.example.com/levels?api_key=topsecret",
            headers={"x-renegade-api-key": "abcdef123456", "Accept": "application/json"},
        )

        observer.on_result(
            result("transport_error", FeedHTTPStatusError("HTTP 401", 401, "denied"), request=request)
        )

        log.warning.assert_called_once()
        kwargs = log.warning.call_args.kwargs
        assert kwargs["error_type"] == ErrorType.FEED_HTTP_ERROR
        assert kwargs["status_code"] == 401
        assert kwargs["headers"]["x-renegade-api-key"] == "abcd..."
        assert kwargs["headers"]["Accept"] == "application/json"
        assert "topsecret" not in kwargs["url"]

    def test_handler_failure_logged_as_error(self):
        log = MagicMock()
        log.bind.return_value = log
        observer = LoggingFeedObserver(log=log)

        observer.on_result(result("handler_error", FeedHandlerError("boom")))

        log.error.assert_called_once()
        assert log.error.call_args.kwargs["error_type"] == ErrorType.FEED_HANDLER_FAILED

    def test_success_logged_at_debug(self):
        log = MagicMock()
        log.bind.return_value = log
        observer = LoggingFeedObserver(log=log)

        observer.on_result(result())

        log.debug.assert_called_once()
        log.warning.assert_not_called()

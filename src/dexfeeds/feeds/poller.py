"""Poller: periodic fetch-cast-deliver cycles for one feed.

Each cycle builds the request from the feed's template, authenticates it,
sends it through the transport, casts the payload and hands the typed
value to the feed's handler. At most one cycle runs at a time unless the
caller forces one; failures are contained to the cycle and reported to
observers as a FetchResult.

Scheduling is fixed-rate: the next tick is armed when a cycle resolves,
interval seconds after that cycle started (immediately if it overran).
"""

import inspect
from functools import partial
from typing import Any, Iterable, Optional

import structlog

from dexfeeds.feeds.base import FeedSource
from dexfeeds.feeds.exceptions import (
    FeedConfigurationError,
    FeedError,
    FeedHandlerError,
    FeedTransportError,
    FeedValidationError,
)
from dexfeeds.feeds.observers import FeedObserver, LoggingFeedObserver
from dexfeeds.feeds.results import FetchResult, FetchStatus
from dexfeeds.feeds.ticker import AsyncioTicker, Ticker, TimerHandle
from dexfeeds.feeds.transport import Transport
from dexfeeds.logging import ErrorType
from dexfeeds.models import RequestOptions

logger = structlog.get_logger(__name__)


class Poller:
    """Owns the polling loop of a single feed.

    Lifecycle: Idle -> start() -> Polling -> stop() -> Idle. Both calls are
    idempotent. stop() cancels only the pending timer; a cycle already in
    flight runs to completion but does not schedule another tick.

    Typical usage:
        poller = Poller(feed, transport)
        await poller.fetch(force=True)   # warm-up
        poller.start()
        ...
        poller.stop()
    """

    def __init__(
        self,
        feed: FeedSource,
        transport: Transport,
        ticker: Optional[Ticker] = None,
        observers: Optional[Iterable[FeedObserver]] = None,
    ):
        """Initialize poller.

        Args:
            feed: Feed descriptor; its interval and request template are
                  captured here and never re-read
            transport: Transport used for every send
            ticker: Clock/scheduler (default: AsyncioTicker)
            observers: Receive every FetchResult (default: a LoggingFeedObserver)

        Raises:
            FeedConfigurationError: If the feed interval is not positive
        """
        interval = float(feed.interval_seconds)
        if interval <= 0:
            raise FeedConfigurationError(
                f"Feed {feed.name!r} interval must be positive, got {interval}"
            )

        self._feed = feed
        self._name = feed.name
        self._interval = interval
        self._template: RequestOptions = feed.request_template
        self._transport = transport
        self._ticker = ticker or AsyncioTicker()
        self._observers: list[FeedObserver] = (
            list(observers) if observers is not None else [LoggingFeedObserver()]
        )

        self._is_polling = False
        self._timer: Optional[TimerHandle] = None
        self._in_flight = 0
        # Bumped on every start(); ticks from an older start never re-arm
        self._generation = 0

        self._log = logger.bind(feed=self._name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_polling(self) -> bool:
        return self._is_polling

    @property
    def in_flight(self) -> bool:
        """True while at least one cycle is executing."""
        return self._in_flight > 0

    @property
    def has_pending_tick(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        """Begin polling; the first tick fires one full interval from now.

        No-op if already polling.

        Raises:
            RuntimeError: If the ticker cannot schedule (no running event loop)
        """
        if self._is_polling:
            return

        generation = self._generation + 1
        self._timer = self._ticker.call_later(
            self._interval, partial(self._on_timer, generation)
        )
        self._generation = generation
        self._is_polling = True
        self._log.info("Polling started", interval_seconds=self._interval)

    def stop(self) -> None:
        """Stop polling. No-op if not polling."""
        if not self._is_polling:
            return

        self._is_polling = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._log.info("Polling stopped", in_flight=self.in_flight)

    async def fetch(self, force: bool = False) -> FetchResult:
        """Run one cycle now, independent of the timer.

        Args:
            force: Run even if another cycle is in flight

        Returns:
            FetchResult; status "skipped" when the overlap guard suppressed
            the call. Tick failures are reported here, never raised.
        """
        started = self._ticker.now()

        if self._in_flight and not force:
            result = FetchResult(feed=self._name, status="skipped", started_at=started)
            self._notify(result)
            return result

        self._in_flight += 1
        try:
            status, error, request = await self._run_cycle()
        finally:
            self._in_flight -= 1

        result = FetchResult(
            feed=self._name,
            status=status,
            started_at=started,
            duration=self._ticker.now() - started,
            forced=force,
            error=error,
            request=request,
        )
        self._notify(result)
        return result

    async def _run_cycle(
        self,
    ) -> tuple[FetchStatus, Optional[FeedError], Optional[RequestOptions]]:
        request = None
        try:
            request = self._feed.authenticate(self._template.model_copy(deep=True))
            raw = await self._transport.send(request)
        except FeedValidationError as e:
            return "validation_error", e, request
        except FeedTransportError as e:
            return "transport_error", e, request
        except Exception as e:
            return "transport_error", _wrap(FeedTransportError, "Request failed", e), request

        try:
            value = self._feed.cast(raw)
        except FeedValidationError as e:
            return "validation_error", e, request
        except Exception as e:
            return "validation_error", _wrap(FeedValidationError, "Cast failed", e), request

        try:
            outcome: Any = self._feed.on_result(value)
            if inspect.isawaitable(outcome):
                await outcome
        except FeedHandlerError as e:
            return "handler_error", e, request
        except Exception as e:
            return "handler_error", _wrap(FeedHandlerError, "Handler failed", e), request

        return "ok", None, request

    def _on_timer(self, generation: int) -> None:
        if not self._is_polling or generation != self._generation:
            return
        self._timer = None
        self._ticker.spawn(self._tick(generation))

    async def _tick(self, generation: int) -> None:
        started = self._ticker.now()
        await self.fetch(force=False)

        if not self._is_polling or generation != self._generation:
            return
        elapsed = self._ticker.now() - started
        delay = max(0.0, self._interval - elapsed)
        self._timer = self._ticker.call_later(delay, partial(self._on_timer, generation))

    def _notify(self, result: FetchResult) -> None:
        for observer in self._observers:
            try:
                observer.on_result(result)
            except Exception as e:
                self._log.error(
                    "Feed observer failed",
                    error_type=ErrorType.OBSERVER_FAILED,
                    observer=type(observer).__name__,
                    error=str(e),
                )


def _wrap(error_cls: type, message: str, cause: Exception) -> FeedError:
    error = error_cls(f"{message}: {type(cause).__name__}: {cause}")
    error.__cause__ = cause
    return error

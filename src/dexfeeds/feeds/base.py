"""Feed descriptor interface.

A feed bundles everything a Poller needs for one upstream data source:
the immutable request template, the optional request authenticator, the
response caster, and the delivery handler. Each concrete feed implements
FeedSource; CallbackFeed assembles one from plain callables.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from dexfeeds.feeds.exceptions import FeedConfigurationError
from dexfeeds.models import RequestOptions

T = TypeVar("T")

HandlerResult = Union[None, Awaitable[None]]


class FeedSource(ABC, Generic[T]):
    """Capability interface for one polled feed.

    Implementations must keep name, interval_seconds and request_template
    constant for their lifetime; the Poller reads them once at construction.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique feed name within the process (e.g. "renegade.levels")."""

    @property
    @abstractmethod
    def interval_seconds(self) -> float:
        """Polling period in seconds."""

    @property
    @abstractmethod
    def request_template(self) -> RequestOptions:
        """Request sent on every cycle, before authentication."""

    def authenticate(self, options: RequestOptions) -> RequestOptions:
        """Return the options to send, e.g. with freshly signed headers.

        Called on every send with a private copy of request_template.
        The default sends the request unchanged.
        """
        return options

    @abstractmethod
    def cast(self, data: Any) -> T:
        """Validate raw transport output and turn it into the typed value.

        Raises:
            FeedValidationError: If data does not have the expected shape
        """

    @abstractmethod
    def on_result(self, value: T) -> HandlerResult:
        """Deliver a successfully cast value (cache write, state update).

        May be a coroutine function; the Poller awaits it before the next
        cycle can be scheduled.
        """


class CallbackFeed(FeedSource[T]):
    """FeedSource built from plain functions.

    Example:
        feed = CallbackFeed(
            name="native.orderbook",
            interval_seconds=1.0,
            request_template=RequestOptions(url=url),
            cast=cast_orderbook,
            on_result=handler,
        )
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        request_template: RequestOptions,
        cast: Callable[[Any], T],
        on_result: Callable[[T], HandlerResult],
        authenticate: Optional[Callable[[RequestOptions], RequestOptions]] = None,
    ):
        if not name:
            raise FeedConfigurationError("Feed name cannot be empty")
        if interval_seconds <= 0:
            raise FeedConfigurationError(
                f"Feed {name!r} interval must be positive, got {interval_seconds}"
            )
        self._name = name
        self._interval_seconds = float(interval_seconds)
        self._request_template = request_template
        self._cast = cast
        self._on_result = on_result
        self._authenticate = authenticate

    @property
    def name(self) -> str:
        return self._name

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def request_template(self) -> RequestOptions:
        return self._request_template

    def authenticate(self, options: RequestOptions) -> RequestOptions:
        if self._authenticate is None:
            return options
        return self._authenticate(options)

    def cast(self, data: Any) -> T:
        return self._cast(data)

    def on_result(self, value: T) -> HandlerResult:
        return self._on_result(value)

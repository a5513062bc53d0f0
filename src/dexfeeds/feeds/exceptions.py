"""Feed exception hierarchy.

Everything raised inside a tick derives from FeedError so the poller can
contain it. FeedConfigurationError is the exception to that rule: it is
raised from constructors and is never deferred into the polling loop.
"""


class FeedError(Exception):
    """Base exception for all feed-related errors."""

    pass


class FeedTransportError(FeedError):
    """Request could not be completed (DNS, connect, timeout, non-2xx).

    The poller treats every subclass the same way: the cycle aborts, no
    handler is called, and the next tick proceeds on schedule.
    """

    pass


class FeedTimeoutError(FeedTransportError):
    """Upstream did not respond within the transport's timeout."""

    pass


class FeedConnectionError(FeedTransportError):
    """Connection to the upstream failed (refused, reset, DNS, TLS)."""

    pass


class FeedHTTPStatusError(FeedTransportError):
    """Upstream answered with a non-2xx status code."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class FeedValidationError(FeedError):
    """Upstream payload does not match the shape the caster expects.

    Raised by casters, including for bodies that are not valid JSON.
    """

    pass


class FeedHandlerError(FeedError):
    """The delivery step raised after a successful cast.

    The fresh value is dropped for this cycle; it is refetched next tick.
    """

    pass


class FeedConfigurationError(FeedError):
    """Feed can never succeed as configured (unsupported network, no credentials).

    Raised at construction time to the adapter's caller.
    """

    pass

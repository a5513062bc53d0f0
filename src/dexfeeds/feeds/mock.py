"""Scripted transport for testing and local development.

Returns queued payloads without touching the network and records every
request it receives, along with how many sends overlapped.
"""

import copy
import inspect
from collections import deque
from typing import Any

import structlog

from dexfeeds.feeds.exceptions import FeedConnectionError
from dexfeeds.feeds.transport import Transport
from dexfeeds.models import RequestOptions

logger = structlog.get_logger(__name__)

_NO_DEFAULT = object()


class MockTransport(Transport):
    """Transport that replays a script of responses.

    Each scripted item is consumed by one send():
    - an exception instance is raised
    - an awaitable (e.g. an asyncio.Future) is awaited and its result used
    - a callable receives the RequestOptions and its return value is used
    - anything else is returned as the payload (deep-copied)

    When the script is exhausted, default is returned if one was given,
    otherwise FeedConnectionError is raised.

    Example:
        transport = MockTransport({"a": 1}, FeedTimeoutError("slow"), {"a": 2})
    """

    def __init__(self, *responses: Any, default: Any = _NO_DEFAULT):
        self._script: deque = deque(responses)
        self._default = default
        self._in_flight = 0
        self.max_in_flight = 0
        self.requests: list[RequestOptions] = []
        self._log = logger.bind(transport="mock")

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def in_flight(self) -> int:
        """Number of send() calls currently awaiting their response."""
        return self._in_flight

    def queue(self, *responses: Any) -> None:
        """Append responses to the script."""
        self._script.extend(responses)

    async def send(self, options: RequestOptions) -> Any:
        self.requests.append(options)
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            item = self._next_item()
            if callable(item) and not isinstance(item, BaseException):
                item = item(options)
            if inspect.isawaitable(item):
                item = await item
            if isinstance(item, BaseException):
                raise item
            self._log.debug("Mock response served", url=options.url)
            return copy.deepcopy(item)
        finally:
            self._in_flight -= 1

    def _next_item(self) -> Any:
        if self._script:
            return self._script.popleft()
        if self._default is _NO_DEFAULT:
            return FeedConnectionError("Mock transport has no scripted response")
        return self._default

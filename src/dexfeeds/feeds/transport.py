"""Transport collaborator: performs one HTTP request for a feed.

Every failure to obtain a usable response is mapped to a FeedTransportError
subclass at this boundary, so the poller never sees httpx exceptions.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
import structlog

from dexfeeds.feeds.exceptions import (
    FeedConnectionError,
    FeedHTTPStatusError,
    FeedTimeoutError,
    FeedValidationError,
)
from dexfeeds.logging import sanitize_url, truncate_body
from dexfeeds.models import RequestOptions

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class Transport(ABC):
    """Sends a request and returns the decoded response payload."""

    @abstractmethod
    async def send(self, options: RequestOptions) -> Any:
        """Perform the request described by options.

        Returns:
            Decoded JSON payload

        Raises:
            FeedTransportError: Network failure, timeout or non-2xx status
            FeedValidationError: Response body is not valid JSON
        """

    async def aclose(self) -> None:
        """Release underlying connections."""


class HttpxTransport(Transport):
    """Transport backed by a shared httpx.AsyncClient.

    The timeout configured here is the only timeout applied to feed
    requests; RequestOptions.timeout_seconds overrides it per request.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds)
        )
        self._log = logger.bind(transport="httpx")

    async def send(self, options: RequestOptions) -> Any:
        kwargs: dict[str, Any] = {
            "headers": options.headers,
            "params": options.params or None,
        }
        if options.timeout_seconds is not None:
            kwargs["timeout"] = options.timeout_seconds
        if isinstance(options.body, (str, bytes)):
            kwargs["content"] = options.body
        elif options.body is not None:
            kwargs["json"] = options.body

        url = sanitize_url(options.url)
        try:
            response = await self._client.request(options.method, options.url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FeedTimeoutError(f"Request to {url} timed out") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise FeedHTTPStatusError(
                f"Request to {url} failed with HTTP {status_code}",
                status_code=status_code,
                body=truncate_body(e.response.text),
            ) from e
        except httpx.HTTPError as e:
            raise FeedConnectionError(f"Request to {url} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise FeedValidationError(
                f"Response from {url} is not valid JSON: {truncate_body(response.text, 200)}"
            ) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
            self._log.debug("HTTP client closed")

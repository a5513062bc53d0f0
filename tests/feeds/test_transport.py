"""Tests for HttpxTransport error mapping, using httpx.MockTransport."""

import json

import httpx
import pytest

from dexfeeds.feeds.exceptions import (
    FeedConnectionError,
    FeedHTTPStatusError,
    FeedTimeoutError,
    FeedValidationError,
)
from dexfeeds.feeds.mock import MockTransport
from dexfeeds.feeds.transport import HttpxTransport
from dexfeeds.models import RequestOptions


def make_transport(handler) -> HttpxTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client=client)


class TestHttpxTransport:
    """Tests for request building and failure mapping."""

    @pytest.mark.asyncio
    async def test_returns_decoded_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["api_key"] = request.headers.get("apiKey")
            return httpx.Response(200, json=[{"side": "ask"}])

        transport = make_transport(handler)
        options = RequestOptions(
            url="https://api.example.com/v1/orderbook",
            params={"chain": "arbitrum"},
            headers={"apiKey": "secret-key"},
        )

        data = await transport.send(options)

        assert data == [{"side": "ask"}]
        assert seen["method"] == "GET"
        assert seen["url"] == "https://api.example.com/v1/orderbook?chain=arbitrum"
        assert seen["api_key"] == "secret-key"

    @pytest.mark.asyncio
    async def test_string_body_sent_verbatim(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = request.content
            return httpx.Response(200, json={})

        transport = make_transport(handler)
        await transport.send(
            RequestOptions(url="https://api.example.com/x", method="POST", body='{"a":1}')
        )

        assert seen["body"] == b'{"a":1}'

    @pytest.mark.asyncio
    async def test_dict_body_sent_as_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        transport = make_transport(handler)
        await transport.send(
            RequestOptions(url="https://api.example.com/x", method="POST", body={"a": 1})
        )

        assert seen["body"] == {"a": 1}

    @pytest.mark.asyncio
    async def test_non_2xx_maps_to_http_status_error(self):
        def handler(request):
            return httpx.Response(503, text="maintenance")

        transport = make_transport(handler)

        with pytest.raises(FeedHTTPStatusError) as exc_info:
            await transport.send(RequestOptions(url="https://api.example.com/x"))

        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "maintenance"

    @pytest.mark.asyncio
    async def test_timeout_maps_to_timeout_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        transport = make_transport(handler)

        with pytest.raises(FeedTimeoutError):
            await transport.send(RequestOptions(url="https://api.example.com/x"))

    @pytest.mark.asyncio
    async def test_connect_error_maps_to_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        transport = make_transport(handler)

        with pytest.raises(FeedConnectionError):
            await transport.send(RequestOptions(url="https://api.example.com/x"))

    @pytest.mark.asyncio
    async def test_invalid_json_maps_to_validation_error(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        transport = make_transport(handler)

        with pytest.raises(FeedValidationError):
            await transport.send(RequestOptions(url="https://api.example.com/x"))

    @pytest.mark.asyncio
    async def test_error_message_hides_secret_query_params(self):
        def handler(request):
            return httpx.Response(401)

        transport = make_transport(handler)

        with pytest.raises(FeedHTTPStatusError) as exc_info:
            await transport.send(
                RequestOptions(url="https://api.example.com/x?api_key=abcdef")
            )

        assert "abcdef" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        transport = HttpxTransport(client=client)

        await transport.aclose()

        assert client.is_closed is False
        await client.aclose()


class TestMockTransport:
    """Tests for the scripted transport."""

    @pytest.mark.asyncio
    async def test_replays_script_then_default(self):
        transport = MockTransport({"a": 1}, default={"a": 0})
        options = RequestOptions(url="https://api.example.com/x")

        assert await transport.send(options) == {"a": 1}
        assert await transport.send(options) == {"a": 0}
        assert transport.call_count == 2

    @pytest.mark.asyncio
    async def test_raises_scripted_exception(self):
        transport = MockTransport(FeedTimeoutError("slow"))

        with pytest.raises(FeedTimeoutError):
            await transport.send(RequestOptions(url="https://api.example.com/x"))

    @pytest.mark.asyncio
    async def test_exhausted_script_without_default_fails(self):
        transport = MockTransport()

        with pytest.raises(FeedConnectionError):
            await transport.send(RequestOptions(url="https://api.example.com/x"))

    @pytest.mark.asyncio
    async def test_callable_receives_options(self):
        transport = MockTransport(lambda options: {"url": options.url})

        data = await transport.send(RequestOptions(url="https://api.example.com/x"))

        assert data == {"url": "https://api.example.com/x"}

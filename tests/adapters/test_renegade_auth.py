"""Tests for Renegade HMAC request signing."""

import base64
import hashlib
import hmac

import pytest

from dexfeeds.adapters.renegade.auth import (
    RenegadeAuthenticator,
    compute_signature,
    decode_secret,
    generate_auth_headers,
    serialize_body,
)
from dexfeeds.feeds.exceptions import FeedConfigurationError
from dexfeeds.models import RequestOptions

SECRET_BYTES = b"renegade-test-secret-32-bytes!!!"
SECRET = base64.b64encode(SECRET_BYTES).decode("ascii")
NOW_MS = 1_700_000_000_000


def expected_signature(message: bytes) -> str:
    digest = hmac.new(SECRET_BYTES, message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii").rstrip("=")


class TestDecodeSecret:
    def test_tolerates_missing_padding(self):
        assert decode_secret(SECRET.rstrip("=")) == SECRET_BYTES

    def test_rejects_invalid_base64(self):
        with pytest.raises(FeedConfigurationError):
            decode_secret("not base64!")

    def test_rejects_empty(self):
        with pytest.raises(FeedConfigurationError):
            decode_secret("")


class TestSignature:
    """Tests for the signed message layout."""

    def test_signs_path_sorted_renegade_headers_and_body(self):
        headers = {
            "x-renegade-b": "2",
            "Content-Type": "application/json",
            "x-renegade-a": "1",
            "x-renegade-auth": "ignored",
        }

        signature = compute_signature("/rfqt/v3/levels", headers, '{"a":1}', SECRET_BYTES)

        assert signature == expected_signature(
            b'/rfqt/v3/levelsx-renegade-a1x-renegade-b2{"a":1}'
        )
        assert not signature.endswith("=")

    def test_auth_headers_set(self):
        headers = generate_auth_headers(
            "/rfqt/v3/levels", "", {}, "my-key", SECRET_BYTES, now_ms=NOW_MS
        )

        assert headers["x-renegade-api-key"] == "my-key"
        assert headers["x-renegade-auth-expiration"] == str(NOW_MS + 10_000)
        assert headers["x-renegade-auth"] == expected_signature(
            b"/rfqt/v3/levels"
            + b"x-renegade-api-keymy-key"
            + b"x-renegade-auth-expiration"
            + str(NOW_MS + 10_000).encode()
        )

    def test_body_serialized_compactly(self):
        assert serialize_body({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'
        assert serialize_body(None) == ""


class TestRenegadeAuthenticator:
    """Tests for the feed authenticator."""

    def test_returns_signed_copy(self):
        auth = RenegadeAuthenticator("my-key", SECRET, clock_ms=lambda: NOW_MS)
        template = RequestOptions(
            url="https://arbitrum-one.auth-server.renegade.fi/rfqt/v3/levels",
            headers={"Content-Type": "application/json"},
        )

        signed = auth(template)

        assert "x-renegade-auth" in signed.headers
        assert signed.headers["Content-Type"] == "application/json"
        assert "x-renegade-auth" not in template.headers

    def test_each_call_uses_fresh_expiration(self):
        now = iter([NOW_MS, NOW_MS + 15_000])
        auth = RenegadeAuthenticator("my-key", SECRET, clock_ms=lambda: next(now))
        template = RequestOptions(url="https://example.com/rfqt/v3/levels")

        first = auth(template)
        second = auth(template)

        assert first.headers["x-renegade-auth-expiration"] == str(NOW_MS + 10_000)
        assert second.headers["x-renegade-auth-expiration"] == str(NOW_MS + 25_000)
        assert first.headers["x-renegade-auth"] != second.headers["x-renegade-auth"]

    def test_body_replaced_by_signed_text(self):
        auth = RenegadeAuthenticator("my-key", SECRET, clock_ms=lambda: NOW_MS)

        signed = auth(
            RequestOptions(url="https://example.com/quote", method="POST", body={"a": 1})
        )

        assert signed.body == '{"a":1}'

    def test_missing_key_rejected(self):
        with pytest.raises(FeedConfigurationError):
            RenegadeAuthenticator("", SECRET)

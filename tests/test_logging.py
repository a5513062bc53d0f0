"""Tests for centralized logging utilities.

Tests cover:
- HTTP header redaction for API keys and request signatures
- Body truncation at 1KB boundary
- URL sanitization for secret query params
- Structlog JSON configuration
- Error type constants
"""

import io
import json
import sys

import pytest


class TestRedactHeaders:
    """Tests for redact_headers() function."""

    def test_redacts_renegade_auth_headers(self):
        from dexfeeds.logging import redact_headers

        headers = {
            "x-renegade-api-key": "0123456789abcdef",
            "x-renegade-auth": "c2lnbmF0dXJl",
            "x-renegade-auth-expiration": "1700000010000",
        }
        result = redact_headers(headers)

        assert result["x-renegade-api-key"] == "0123..."
        assert result["x-renegade-auth"] == "c2ln..."
        assert result["x-renegade-auth-expiration"] == "1700000010000"

    def test_redacts_native_api_key_case_insensitive(self):
        from dexfeeds.logging import redact_headers

        assert redact_headers({"apiKey": "native-secret"}) == {"apiKey": "nati..."}

    def test_short_values_fully_masked(self):
        from dexfeeds.logging import redact_headers

        assert redact_headers({"Authorization": "abc"}) == {"Authorization": "***"}

    def test_none_is_empty(self):
        from dexfeeds.logging import redact_headers

        assert redact_headers(None) == {}


class TestTruncateBody:
    """Tests for truncate_body() function."""

    def test_short_body_unchanged(self):
        from dexfeeds.logging import truncate_body

        assert truncate_body("ok") == "ok"

    def test_long_body_truncated_with_indicator(self):
        from dexfeeds.logging import truncate_body

        result = truncate_body("x" * 1500)

        assert result.startswith("x" * 1024)
        assert result.endswith("[TRUNCATED 476 bytes]")

    def test_dict_body_serialized(self):
        from dexfeeds.logging import truncate_body

        assert json.loads(truncate_body({"error": "rate limited"})) == {"error": "rate limited"}

    def test_bytes_body_decoded(self):
        from dexfeeds.logging import truncate_body

        assert truncate_body(b"upstream error") == "upstream error"


class TestSanitizeUrl:
    """Tests for sanitize_url() function."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://api.example.com/x?api_key=secret123",
            "https://api.example.com/x?chain=arbitrum&token=secret123",
            "https://api.example.com/x?APIKEY=secret123",
        ],
    )
    def test_secret_params_redacted(self, url):
        from dexfeeds.logging import sanitize_url

        result = sanitize_url(url)

        assert "secret123" not in result
        assert "***" in result

    def test_plain_params_kept(self):
        from dexfeeds.logging import sanitize_url

        url = "https://api.example.com/orderbook?chain=arbitrum"
        assert sanitize_url(url) == url


class TestConfigureLogging:
    """Tests for structlog configuration."""

    def test_json_output(self, monkeypatch):
        import structlog

        from dexfeeds.logging import configure_logging

        stream = io.StringIO()
        monkeypatch.setattr(sys, "stdout", stream)
        configure_logging(json_output=True)
        try:
            structlog.get_logger().info("Feed cycle failed", feed="renegade.levels")
        finally:
            structlog.reset_defaults()

        data = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert data["event"] == "Feed cycle failed"
        assert data["feed"] == "renegade.levels"
        assert data["level"] == "info"
        assert "timestamp" in data


class TestErrorType:
    def test_error_codes_are_self_named(self):
        from dexfeeds.logging import ErrorType

        for name in (
            "FEED_TIMEOUT",
            "FEED_CONNECTION_FAILED",
            "FEED_HTTP_ERROR",
            "FEED_VALIDATION_FAILED",
            "FEED_HANDLER_FAILED",
            "OBSERVER_FAILED",
            "CACHE_WRITE_FAILED",
            "CONFIGURATION_ERROR",
        ):
            assert getattr(ErrorType, name) == name

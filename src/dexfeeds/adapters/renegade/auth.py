"""HMAC-SHA256 request signing for the Renegade API.

Each request is signed over:
- the request path
- every x-renegade-* header except the signature itself, sorted by
  lowercased name, as name then value
- the request body (empty string for GET)

The signature is sent base64-encoded without padding in x-renegade-auth,
alongside the API key and an expiration timestamp 10 seconds ahead.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Callable, Mapping, Optional

from dexfeeds.adapters.renegade.constants import (
    RENEGADE_API_KEY_HEADER,
    RENEGADE_AUTH_EXPIRATION_HEADER,
    RENEGADE_AUTH_HEADER,
    RENEGADE_HEADER_PREFIX,
    REQUEST_SIGNATURE_DURATION_MS,
)
from dexfeeds.feeds.exceptions import FeedConfigurationError
from dexfeeds.models import RequestOptions


def _now_ms() -> int:
    return int(time.time() * 1000)


def decode_secret(api_secret: str) -> bytes:
    """Decode a base64 API secret, tolerating missing padding.

    Raises:
        FeedConfigurationError: If the secret is empty or not base64
    """
    if not api_secret:
        raise FeedConfigurationError("Renegade API secret is empty")
    padded = api_secret + "=" * (-len(api_secret) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FeedConfigurationError("Renegade API secret is not valid base64") from e


def compute_signature(
    path: str, headers: Mapping[str, str], body: str, secret: bytes
) -> str:
    """HMAC-SHA256 over path, canonical x-renegade headers and body."""
    signed = sorted(
        (
            (name, str(value))
            for name, value in headers.items()
            if name.lower().startswith(RENEGADE_HEADER_PREFIX)
            and name.lower() != RENEGADE_AUTH_HEADER
        ),
        key=lambda item: item[0].lower(),
    )

    mac = hmac.new(secret, digestmod=hashlib.sha256)
    mac.update(path.encode("utf-8"))
    for name, value in signed:
        mac.update(name.encode("utf-8"))
        mac.update(value.encode("utf-8"))
    mac.update(body.encode("utf-8"))

    return base64.b64encode(mac.digest()).decode("ascii").rstrip("=")


def generate_auth_headers(
    path: str,
    body: str,
    headers: Mapping[str, str],
    api_key: str,
    secret: bytes,
    now_ms: Optional[int] = None,
) -> dict[str, str]:
    """Return a copy of headers with API key, expiration and signature set."""
    signed_headers = dict(headers)
    now_ms = _now_ms() if now_ms is None else now_ms
    signed_headers[RENEGADE_AUTH_EXPIRATION_HEADER] = str(
        now_ms + REQUEST_SIGNATURE_DURATION_MS
    )
    signed_headers[RENEGADE_API_KEY_HEADER] = api_key
    signed_headers[RENEGADE_AUTH_HEADER] = compute_signature(
        path, signed_headers, body, secret
    )
    return signed_headers


def serialize_body(body) -> str:
    """Request body exactly as it will be sent (compact JSON, or as-is for text)."""
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8")
    if isinstance(body, str):
        return body
    return json.dumps(body, separators=(",", ":"))


class RenegadeAuthenticator:
    """Feed authenticator that re-signs every request just before it is sent.

    Raises:
        FeedConfigurationError: On construction, if key or secret is unusable
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        if not api_key:
            raise FeedConfigurationError("Renegade API key is empty")
        self._api_key = api_key
        self._secret = decode_secret(api_secret)
        self._clock_ms = clock_ms or _now_ms

    def __call__(self, options: RequestOptions) -> RequestOptions:
        body = serialize_body(options.body)
        headers = generate_auth_headers(
            options.path,
            body,
            options.headers,
            self._api_key,
            self._secret,
            now_ms=self._clock_ms(),
        )
        update: dict = {"headers": headers}
        if options.body is not None:
            # Send the exact bytes that were signed
            update["body"] = body
        return options.model_copy(update=update)

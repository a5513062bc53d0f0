"""Centralized logging utilities for feed errors.

Provides:
- Structlog JSON/console configuration
- Standardized error type constants for feed failures
- Header redaction for API keys and request signatures
- Body truncation for large upstream payloads
- URL sanitization for secret query params
"""

import json as json_module
import logging
import re
import sys
from typing import Any, Mapping

import structlog

# Maximum body size before truncation
MAX_BODY_SIZE = 1024


class ErrorType:
    """Standardized error type codes for structured logging.

    Categories:
    - Transport errors: the request never produced a usable response
    - Payload errors: the response did not match the expected shape
    - Delivery errors: the handler or an observer failed
    - System errors: configuration and persistence failures
    """

    # Transport errors
    FEED_TIMEOUT = "FEED_TIMEOUT"
    FEED_CONNECTION_FAILED = "FEED_CONNECTION_FAILED"
    FEED_HTTP_ERROR = "FEED_HTTP_ERROR"

    # Payload errors
    FEED_VALIDATION_FAILED = "FEED_VALIDATION_FAILED"

    # Delivery errors
    FEED_HANDLER_FAILED = "FEED_HANDLER_FAILED"
    OBSERVER_FAILED = "OBSERVER_FAILED"

    # System errors
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


SENSITIVE_HEADERS = {
    "authorization",
    "apikey",
    "api-key",
    "x-api-key",
    "x-renegade-api-key",
    "x-renegade-auth",
    "token",
}


def redact_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Redact secrets from HTTP headers.

    Sensitive headers are redacted to show first 4 chars + "...".
    Non-sensitive headers are preserved unchanged.

    Args:
        headers: Mapping of HTTP headers (None is treated as empty)

    Returns:
        Headers with sensitive values redacted
    """
    result = {}
    for key, value in (headers or {}).items():
        value = str(value)
        if key.lower() in SENSITIVE_HEADERS:
            if len(value) > 4:
                result[key] = f"{value[:4]}..."
            else:
                result[key] = "***"
        else:
            result[key] = value
    return result


def truncate_body(body: Any, max_size: int = MAX_BODY_SIZE) -> str:
    """Truncate a payload if it exceeds max size.

    Handles string, bytes, and JSON-serializable inputs. Large bodies are
    truncated with an indicator showing how many bytes were removed.

    Args:
        body: Response body (string, bytes, dict or list)
        max_size: Maximum size in bytes (default: 1KB)

    Returns:
        Truncated body as string with indicator if truncated
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    elif not isinstance(body, str):
        body = json_module.dumps(body, default=str)

    if len(body) > max_size:
        truncated_bytes = len(body) - max_size
        return f"{body[:max_size]}... [TRUNCATED {truncated_bytes} bytes]"
    return body


def sanitize_url(url: str) -> str:
    """Remove query parameters that might contain secrets.

    Args:
        url: URL that may contain secret query params

    Returns:
        URL with secret query params redacted
    """
    return re.sub(
        r"(\?|&)(token|api_key|apikey|secret)=([^&]+)",
        r"\1\2=***",
        url,
        flags=re.IGNORECASE,
    )


def configure_logging(json_output: bool = True, level: int = logging.INFO) -> None:
    """Configure structlog for structured logging.

    Sets up structlog with:
    - JSON output (production) or console output (development)
    - ISO timestamp format
    - Log level and stack trace formatting
    - Stdout output (container-friendly)

    Args:
        json_output: Use JSON format (True) or console format (False)
        level: Minimum level that is emitted
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

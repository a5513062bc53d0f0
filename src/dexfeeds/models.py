"""Pydantic schemas shared across feeds, adapters and the API."""

from datetime import datetime
from typing import Any, Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field


class RequestOptions(BaseModel):
    """Description of one upstream HTTP request.

    Feeds hold an immutable template; authenticators receive a deep copy
    and return an updated copy via model_copy().
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="Absolute request URL")
    method: Literal["GET", "POST", "PUT", "DELETE"] = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    body: Any = Field(default=None, description="JSON-serializable request body")
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-request timeout override; None defers to the transport",
    )

    @property
    def path(self) -> str:
        """URL path component, as used by request signers."""
        return urlsplit(self.url).path


class Token(BaseModel):
    """Minimal ERC-20 token description used by adapters."""

    address: str = Field(..., min_length=1)
    decimals: int = Field(..., ge=0)
    symbol: Optional[str] = None


class FeedStatus(BaseModel):
    """Aggregated health of one feed, as reported by the status API."""

    feed: str
    polling: bool = False
    in_flight: bool = False
    successes: int = 0
    failures: int = 0
    skipped: int = 0
    consecutive_failures: int = 0
    last_status: Optional[str] = None
    last_success_at: Optional[datetime] = None
    last_error: Optional[str] = None
    last_error_type: Optional[str] = None

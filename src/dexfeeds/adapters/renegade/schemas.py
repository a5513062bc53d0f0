"""Pydantic schemas for Renegade API payloads."""

from pydantic import BaseModel, ConfigDict, Field

# (price, size) as decimal strings
PriceLevel = tuple[str, str]


class RenegadePairData(BaseModel):
    model_config = ConfigDict(extra="allow")

    bids: list[PriceLevel]
    asks: list[PriceLevel]


class RenegadeTokenInfo(BaseModel):
    """Token entry from the token-mappings repository."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    ticker: str
    address: str = Field(..., min_length=1)
    decimals: int = Field(..., ge=0)


class RenegadeTokenRemap(BaseModel):
    tokens: list[RenegadeTokenInfo]

"""Pydantic schemas for Native API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class NativeOrderbookEntry(BaseModel):
    """One orderbook entry; fields beyond the pair and side are kept as-is."""

    model_config = ConfigDict(extra="allow")

    base_address: str = Field(..., min_length=1)
    quote_address: str = Field(..., min_length=1)
    side: str


class NativeBlacklistEntry(BaseModel):
    id: str
    address: str = Field(..., pattern=r"^0x[0-9a-fA-F]{40}$")
    chainId: int = Field(..., ge=1)
    createTime: int = Field(..., ge=0)


class NativeBlacklistResponse(BaseModel):
    black_list: list[NativeBlacklistEntry]

"""Access helpers over a Renegade levels snapshot.

Renegade quotes every pair as "base/quote" with USDC fixed as the quote
token, and exposes a single midpoint level per side.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from dexfeeds.adapters.renegade.schemas import PriceLevel, RenegadePairData
from dexfeeds.feeds.exceptions import FeedValidationError
from dexfeeds.models import Token

_levels_adapter = TypeAdapter(dict[str, RenegadePairData])


@dataclass(frozen=True)
class RenegadePairContext:
    pair_id: str
    base_token: Token
    quote_token: Token
    pair_data: RenegadePairData
    src_is_base: bool


class RenegadeLevelsResponse:
    """Levels keyed by lowercase "base/quote" pair identifier."""

    def __init__(self, levels: dict[str, RenegadePairData], usdc_address: str):
        self._levels = levels
        self._usdc_address = usdc_address.lower()

    @classmethod
    def from_raw(cls, data: Any, usdc_address: str) -> "RenegadeLevelsResponse":
        """Validate a raw levels payload.

        Raises:
            FeedValidationError: If data is not a mapping of pair data
        """
        if not isinstance(data, dict):
            raise FeedValidationError(
                f"Invalid Renegade levels response: expected object, got {type(data).__name__}"
            )
        try:
            levels = _levels_adapter.validate_python(data)
        except ValidationError as e:
            raise FeedValidationError(f"Invalid Renegade levels response: {e}") from e
        return cls(levels, usdc_address)

    @property
    def raw_data(self) -> dict[str, dict]:
        """JSON-ready mapping, as stored in the cache."""
        return {pair_id: data.model_dump() for pair_id, data in self._levels.items()}

    @property
    def pair_ids(self) -> list[str]:
        return list(self._levels)

    def resolve_pair(self, src_token: Token, dest_token: Token) -> Optional[RenegadePairContext]:
        """Map (src, dest) onto Renegade's base/quote ordering.

        Returns None unless exactly one side is USDC and the pair is quoted.
        """
        src_is_usdc = self._is_usdc(src_token)
        dest_is_usdc = self._is_usdc(dest_token)
        if src_is_usdc == dest_is_usdc:
            return None

        base_token = dest_token if src_is_usdc else src_token
        quote_token = src_token if src_is_usdc else dest_token
        pair_id = f"{base_token.address.lower()}/{quote_token.address.lower()}"

        pair_data = self._levels.get(pair_id)
        if pair_data is None:
            return None

        return RenegadePairContext(
            pair_id=pair_id,
            base_token=base_token,
            quote_token=quote_token,
            pair_data=pair_data,
            src_is_base=not src_is_usdc,
        )

    def get_midpoint_level(self, context: RenegadePairContext) -> Optional[PriceLevel]:
        """Bids when the caller supplies base, asks when it supplies USDC."""
        book = context.pair_data.bids if context.src_is_base else context.pair_data.asks
        if not book:
            return None
        return book[0]

    def _is_usdc(self, token: Token) -> bool:
        if not self._usdc_address:
            return False
        return token.address.lower() == self._usdc_address

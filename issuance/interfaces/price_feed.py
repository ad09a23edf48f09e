"""Price feed protocol — round-based quote source."""
from typing import Protocol

from ..models import RoundData


class PriceFeed(Protocol):
    """Abstract interface for a round-based price feed or liveness guard."""

    decimals: int

    async def latest_round_data(self) -> RoundData: ...

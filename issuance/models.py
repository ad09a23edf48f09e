"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .interfaces.price_feed import PriceFeed

# Reserved asset identifier for the chain's native value.
NATIVE_ASSET = "native"
NATIVE_DECIMALS = 18


@dataclass(frozen=True)
class RoundData:
    """One answer from a round-based price feed."""

    round_id: int
    answer: int
    started_at: int
    updated_at: int
    answered_in_round: int


@dataclass(frozen=True)
class OracleBinding:
    """Price feed bound to an accepted asset.

    ``staleness_threshold`` of 0 disables the age check; ``liveness_guard``
    is an optional second feed whose positive answer means "upstream down".
    """

    feed: PriceFeed | None
    staleness_threshold: int = 0
    liveness_guard: PriceFeed | None = None


@dataclass(frozen=True)
class Position:
    """Remaining claim of one deposit, with its redemption guarantee."""

    id: int
    owner: str
    asset: str
    asset_amount: int
    token_amount: int

    @property
    def is_closed(self) -> bool:
        return self.asset_amount == 0 and self.token_amount == 0


# ---------------------------------------------------------------------------
# Emitted records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Initialized:
    name: str
    symbol: str
    issuance_cap: int
    conversion_rate: int
    treasury: str
    accepted_assets: tuple[str, ...]


@dataclass(frozen=True)
class Invested:
    owner: str
    position_id: int
    asset: str
    asset_amount: int
    tokens_minted: int


@dataclass(frozen=True)
class Divested:
    owner: str
    position_id: int
    tokens_burned: int
    asset: str
    asset_returned: int


@dataclass(frozen=True)
class Withdrawn:
    owner: str
    position_id: int
    tokens_unlocked: int
    asset: str
    asset_released: int


@dataclass(frozen=True)
class TreasurySkimmed:
    caller: str
    asset: str
    amount: int
    treasury: str

"""Fixed-point conversion between deposits, value and claim tokens.

All amounts are integers. Value is expressed in 18-decimal fixed point:

    value  = amount * price * 10^18 / (10^asset_decimals * 10^feed_decimals)
    tokens = value * conversion_rate / 10^18

Every division floors, and each formula forms its full product before the
single division.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from ..errors import (
    CapExceededError,
    DustAmountError,
    PositionExhaustedError,
    RedemptionExceedsBackingError,
    RedemptionExceedsPositionError,
    ZeroRedemptionError,
)
from ..models import OracleBinding, Position
from ..oracles.validator import OracleValidator

logger = logging.getLogger(__name__)

UNIT = 10**18


def scale_to_value(amount: int, price: int, asset_decimals: int, feed_decimals: int) -> int:
    """Rescale a raw asset amount at a raw feed price into 18-decimal value."""
    return amount * price * UNIT // (10**asset_decimals * 10**feed_decimals)


def proportional_amount(tokens: int, asset_amount: int, token_amount: int) -> int:
    """Asset share of ``tokens`` at the ratio asset_amount / token_amount."""
    return tokens * asset_amount // token_amount


class ConversionEngine:
    """Prices deposits into claim tokens and redemptions back into assets."""

    def __init__(
        self,
        validator: OracleValidator,
        bindings: Mapping[str, OracleBinding],
        asset_decimals: Mapping[str, int],
        conversion_rate: int,
        issuance_cap: int,
    ) -> None:
        self._validator = validator
        self._bindings = bindings
        self._asset_decimals = asset_decimals
        self.conversion_rate = conversion_rate
        self.issuance_cap = issuance_cap

    async def asset_to_value(self, asset: str, amount: int) -> int:
        binding = self._bindings.get(asset)
        price = await self._validator.get_validated_price(binding)
        value = scale_to_value(
            amount, price, self._asset_decimals[asset], binding.feed.decimals
        )
        logger.debug("%d %s at %d -> value %d", amount, asset, price, value)
        return value

    def value_to_tokens(self, value: int) -> int:
        # A deposit just above the rounding boundary still mints one unit;
        # there is no separate minimum-deposit floor.
        tokens = value * self.conversion_rate // UNIT
        if tokens == 0:
            raise DustAmountError(f"Value {value} converts to zero tokens")
        return tokens

    def check_cap(self, current_supply: int, tokens: int) -> None:
        if current_supply + tokens > self.issuance_cap:
            raise CapExceededError(
                f"Minting {tokens} on top of {current_supply} exceeds cap "
                f"{self.issuance_cap}"
            )

    async def tokens_for_deposit(self, asset: str, amount: int, current_supply: int) -> int:
        """Tokens a deposit of ``amount`` would mint now, cap-checked."""
        value = await self.asset_to_value(asset, amount)
        tokens = self.value_to_tokens(value)
        self.check_cap(current_supply, tokens)
        return tokens

    def position_ratio_to_asset_amount(
        self, position: Position, tokens_requested: int, backing: int
    ) -> int:
        """Asset amount released by ``tokens_requested`` of ``position``.

        Uses the position's own stored ratio, never a fresh price.
        """
        if position.token_amount == 0:
            raise PositionExhaustedError(f"Position {position.id} has no tokens left")

        amount = proportional_amount(
            tokens_requested, position.asset_amount, position.token_amount
        )
        if amount == 0:
            raise ZeroRedemptionError(
                f"{tokens_requested} tokens of position {position.id} redeem zero units"
            )
        if amount > position.asset_amount:
            raise RedemptionExceedsPositionError(
                f"Redemption {amount} > position {position.id} asset "
                f"{position.asset_amount}"
            )
        if amount > backing:
            raise RedemptionExceedsBackingError(
                f"Redemption {amount} > backing {backing} for {position.asset}"
            )
        return amount

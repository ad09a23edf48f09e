"""In-memory fungible tokens and the checked custody mover for them."""
from __future__ import annotations

import logging

from ..errors import TransferFailedError
from ..interfaces.fungible_token import FungibleToken

logger = logging.getLogger(__name__)


class InMemoryToken:
    """Fungible token ledger with balances and allowances.

    Transfer methods return ``False`` on insufficient balance or allowance
    rather than raising, matching the token capability contract.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = 18,
        balances: dict[str, int] | None = None,
    ) -> None:
        self.name = name
        self.symbol = symbol
        self._decimals = decimals
        self._balances: dict[str, int] = dict(balances or {})
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = sum(self._balances.values())

    @property
    def decimals(self) -> int:
        return self._decimals

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            return False
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0 or self.balance_of(sender) < amount:
            return False
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        return True

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> bool:
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            return False
        if not self.transfer(owner, recipient, amount):
            return False
        self._allowances[(owner, spender)] = allowed - amount
        return True


class ClaimToken(InMemoryToken):
    """18-decimal claim token; only the minter may create or destroy supply."""

    def __init__(self, name: str, symbol: str, minter: str) -> None:
        super().__init__(name, symbol, decimals=18)
        self.minter = minter

    def mint(self, caller: str, to: str, amount: int) -> bool:
        if caller != self.minter or amount < 0:
            return False
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount
        return True

    def burn(self, caller: str, holder: str, amount: int) -> bool:
        if caller != self.minter or amount < 0 or self.balance_of(holder) < amount:
            return False
        self._balances[holder] -= amount
        self._total_supply -= amount
        return True


class TokenAssetMover:
    """Moves a registered token in and out of custody, checking every result."""

    def __init__(self, token: FungibleToken, custody: str) -> None:
        self._token = token
        self._custody = custody

    @property
    def decimals(self) -> int:
        return self._token.decimals

    def balance(self) -> int:
        return self._token.balance_of(self._custody)

    async def pull(self, source: str, amount: int) -> None:
        """Take ``amount`` from ``source`` against its allowance to custody."""
        if not self._token.transfer_from(self._custody, source, self._custody, amount):
            raise TransferFailedError(
                f"Token transferFrom of {amount} from {source} failed"
            )
        logger.debug("Received %d tokens from %s", amount, source)

    async def push(self, destination: str, amount: int) -> None:
        if not self._token.transfer(self._custody, destination, amount):
            raise TransferFailedError(
                f"Token transfer of {amount} to {destination} failed"
            )
        logger.debug("Sent %d tokens to %s", amount, destination)

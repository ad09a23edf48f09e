"""Fungible token protocol — standard balance/transfer/allowance surface."""
from typing import Protocol


class FungibleToken(Protocol):
    """Abstract interface for a fungible token ledger.

    Transfer methods report success as a ``bool``; callers must check it.
    """

    @property
    def decimals(self) -> int: ...

    @property
    def total_supply(self) -> int: ...

    def balance_of(self, holder: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, owner: str, spender: str, amount: int) -> bool: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> bool: ...

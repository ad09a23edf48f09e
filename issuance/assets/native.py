"""Native value balances and the custody mover for the native asset."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from ..errors import TransferFailedError
from ..models import NATIVE_DECIMALS

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, int], Awaitable[None]]


class NativeLedger:
    """In-process record of native value held by each identity.

    An identity may register a receive hook; it is awaited after value lands
    in that identity's balance, the way a contract's fallback runs on receipt.
    If the hook raises, the transfer is undone and the error propagates.
    """

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = dict(balances or {})
        self._hooks: dict[str, ReceiveHook] = {}

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def register_receiver(self, holder: str, hook: ReceiveHook) -> None:
        self._hooks[holder] = hook

    async def send(self, source: str, destination: str, amount: int) -> bool:
        """Move ``amount`` from ``source`` to ``destination``; False if unfunded."""
        if amount < 0 or self._balances.get(source, 0) < amount:
            return False
        self._balances[source] -= amount
        self._balances[destination] = self._balances.get(destination, 0) + amount

        hook = self._hooks.get(destination)
        if hook is not None:
            try:
                await hook(source, amount)
            except Exception:
                # A failing receiver reverts the whole transfer.
                self._balances[destination] -= amount
                self._balances[source] += amount
                raise
        return True


class NativeAssetMover:
    """Moves native value in and out of the controller's custody."""

    def __init__(self, ledger: NativeLedger, custody: str) -> None:
        self._ledger = ledger
        self._custody = custody

    @property
    def decimals(self) -> int:
        return NATIVE_DECIMALS

    def balance(self) -> int:
        return self._ledger.balance_of(self._custody)

    async def pull(self, source: str, amount: int) -> None:
        if not await self._ledger.send(source, self._custody, amount):
            raise TransferFailedError(
                f"Native transfer of {amount} from {source} failed"
            )
        logger.debug("Received %d native from %s", amount, source)

    async def push(self, destination: str, amount: int) -> None:
        if not await self._ledger.send(self._custody, destination, amount):
            raise TransferFailedError(
                f"Native transfer of {amount} to {destination} failed"
            )
        logger.debug("Sent %d native to %s", amount, destination)

"""Asset mover protocol — moves one asset in and out of controller custody."""
from typing import Protocol


class AssetMover(Protocol):
    """Abstract interface for custody transfers of a single asset.

    Implementations raise ``TransferFailedError`` instead of returning a
    failure flag.
    """

    @property
    def decimals(self) -> int: ...

    def balance(self) -> int: ...

    async def pull(self, source: str, amount: int) -> None: ...

    async def push(self, destination: str, amount: int) -> None: ...

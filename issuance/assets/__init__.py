"""Asset custody movers and in-memory token ledgers."""
from .native import NativeAssetMover, NativeLedger
from .token import ClaimToken, InMemoryToken, TokenAssetMover

__all__ = [
    "ClaimToken",
    "InMemoryToken",
    "NativeAssetMover",
    "NativeLedger",
    "TokenAssetMover",
]

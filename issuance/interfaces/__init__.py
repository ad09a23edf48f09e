"""Protocol interfaces for the issuance ledger."""
from .asset_mover import AssetMover
from .fungible_token import FungibleToken
from .price_feed import PriceFeed

__all__ = ["AssetMover", "FungibleToken", "PriceFeed"]

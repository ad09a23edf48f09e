"""Issuance-and-redemption ledger with oracle-priced claim tokens."""

__version__ = "0.1.0"

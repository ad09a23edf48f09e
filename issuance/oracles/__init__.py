"""Price feed clients and quote validation."""
from .http_feed import HttpRoundFeed, feed_bindings
from .validator import LIVENESS_GRACE_PERIOD, OracleValidator

__all__ = ["HttpRoundFeed", "feed_bindings", "LIVENESS_GRACE_PERIOD", "OracleValidator"]

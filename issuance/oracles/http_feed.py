"""HTTP round feed — reads the latest round of a price feed over JSON."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import DeploymentConfig, FeedConfig
from ..errors import FeedUnavailableError
from ..models import OracleBinding, RoundData

logger = logging.getLogger(__name__)

# camelCase as served by most aggregator gateways, snake_case as a fallback.
_FIELDS = {
    "round_id": ("roundId", "round_id"),
    "answer": ("answer", "price"),
    "started_at": ("startedAt", "started_at"),
    "updated_at": ("updatedAt", "updated_at"),
    "answered_in_round": ("answeredInRound", "answered_in_round"),
}


def _as_int(name: str, raw: Any) -> int:
    if raw is None:
        return 0
    # bool is an int subclass; floats would be truncated.
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        digits = raw[1:] if raw.startswith("-") else raw
        if digits.isascii() and digits.isdigit():
            return int(raw)
    raise FeedUnavailableError(f"Malformed {name} in feed payload: {raw!r}")


def parse_round(payload: dict[str, Any]) -> RoundData:
    """Parse a latest-round JSON payload into ``RoundData``.

    Missing or null fields read as 0 so the validator rejects them with the
    specific error (e.g. a missing ``updatedAt`` becomes
    ``MissingTimestampError``). Values must be JSON integers or decimal
    integer strings; anything else raises ``FeedUnavailableError``.
    """
    values: dict[str, int] = {}
    for name, keys in _FIELDS.items():
        raw: Any = None
        for key in keys:
            if key in payload:
                raw = payload[key]
                break
        values[name] = _as_int(name, raw)
    return RoundData(**values)


class HttpRoundFeed:
    """Fetch the latest round of a price feed from an HTTP endpoint."""

    def __init__(self, config: FeedConfig) -> None:
        self.url = config.url
        self.decimals = config.decimals
        self.timeout = config.timeout

    async def latest_round_data(self) -> RoundData:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    self.url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        raise FeedUnavailableError(
                            f"Feed {self.url} returned HTTP {response.status}"
                        )
                    data = await response.json()
        except FeedUnavailableError:
            raise
        except Exception as e:
            logger.error("Error reading feed %s: %s", self.url, e)
            raise FeedUnavailableError(f"Feed {self.url} unreachable: {e}") from e

        if not isinstance(data, dict):
            raise FeedUnavailableError(f"Feed {self.url} returned non-object JSON")

        round_data = parse_round(data)
        logger.debug("Feed %s round %d answer %d", self.url, round_data.round_id, round_data.answer)
        return round_data


def feed_bindings(config: DeploymentConfig) -> dict[str, OracleBinding]:
    """Build an HTTP-backed oracle binding for every configured asset."""
    bindings: dict[str, OracleBinding] = {}
    for a in config.assets:
        bindings[a.asset] = OracleBinding(
            feed=HttpRoundFeed(a.feed),
            staleness_threshold=a.staleness_threshold,
            liveness_guard=HttpRoundFeed(a.liveness_guard) if a.liveness_guard else None,
        )
    return bindings

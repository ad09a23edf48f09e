"""Oracle quote validation — freshness, completeness and upstream liveness."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..errors import (
    GracePeriodNotElapsedError,
    IncompleteRoundError,
    LivenessGuardTrippedError,
    LivenessGuardUnsetError,
    MissingTimestampError,
    NonPositivePriceError,
    OracleNotConfiguredError,
    StalePriceError,
)
from ..models import OracleBinding

logger = logging.getLogger(__name__)

# A recovered liveness guard must have stayed clean this long (seconds).
LIVENESS_GRACE_PERIOD = 3600


class OracleValidator:
    """Turn a raw feed round into a trusted price, or raise a named OracleError."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    async def get_validated_price(self, binding: OracleBinding | None) -> int:
        """Return the feed's latest answer once every check has passed.

        Checks run in order: binding present, answer positive, round complete,
        timestamp present, not stale, liveness guard clean, its round set and
        past its grace interval. A quote exactly ``staleness_threshold``
        seconds old passes.
        """
        if binding is None or binding.feed is None:
            raise OracleNotConfiguredError("No price feed configured")

        rd = await binding.feed.latest_round_data()

        if rd.answer <= 0:
            logger.warning("Rejected non-positive answer %d", rd.answer)
            raise NonPositivePriceError(f"Price feed answered {rd.answer}")

        if rd.round_id == 0 or rd.answered_in_round < rd.round_id:
            logger.warning(
                "Rejected incomplete round %d (answered in %d)",
                rd.round_id, rd.answered_in_round,
            )
            raise IncompleteRoundError(
                f"Round {rd.round_id} answered in round {rd.answered_in_round}"
            )

        if rd.updated_at == 0:
            raise MissingTimestampError(f"Round {rd.round_id} has no update time")

        now = self._now()
        if binding.staleness_threshold:
            age = now - rd.updated_at
            if age > binding.staleness_threshold:
                logger.warning(
                    "Rejected stale quote: age %ds > threshold %ds",
                    age, binding.staleness_threshold,
                )
                raise StalePriceError(
                    f"Quote is {age}s old, threshold {binding.staleness_threshold}s"
                )

        if binding.liveness_guard is not None:
            await self._check_liveness(binding, now)

        return rd.answer

    async def _check_liveness(self, binding: OracleBinding, now: int) -> None:
        guard = await binding.liveness_guard.latest_round_data()

        # Positive answer: upstream degraded.
        if guard.answer > 0:
            logger.warning("Liveness guard tripped (answer %d)", guard.answer)
            raise LivenessGuardTrippedError("Upstream reported degraded")

        # No established clean state to measure the grace interval from.
        if guard.round_id == 0 or guard.started_at == 0:
            logger.warning(
                "Liveness guard round %d has no start time (%d)",
                guard.round_id, guard.started_at,
            )
            raise LivenessGuardUnsetError(
                f"Guard round {guard.round_id} started at {guard.started_at}"
            )

        clean_for = now - guard.started_at
        if clean_for < LIVENESS_GRACE_PERIOD:
            logger.warning(
                "Liveness guard clean for %ds, grace is %ds",
                clean_for, LIVENESS_GRACE_PERIOD,
            )
            raise GracePeriodNotElapsedError(
                f"Upstream recovered {clean_for}s ago, need {LIVENESS_GRACE_PERIOD}s"
            )

"""Shared test doubles and identities."""
from __future__ import annotations

from issuance.models import RoundData

NOW = 1_700_000_000
CONTROLLER = "0xCONTROLLER"
TREASURY = "0xTREASURY"
ALICE = "0xALICE"
BOB = "0xBOB"


class FakeFeed:
    """Round feed returning whatever round it was last given."""

    def __init__(self, answer: int, decimals: int = 8, updated_at: int = NOW) -> None:
        self.decimals = decimals
        self.calls = 0
        self.round = fresh_round(answer, updated_at=updated_at)

    def set(self, **changes: int) -> None:
        values = {
            "round_id": self.round.round_id,
            "answer": self.round.answer,
            "started_at": self.round.started_at,
            "updated_at": self.round.updated_at,
            "answered_in_round": self.round.answered_in_round,
        }
        values.update(changes)
        self.round = RoundData(**values)

    async def latest_round_data(self) -> RoundData:
        self.calls += 1
        return self.round


def fresh_round(answer: int, updated_at: int = NOW, round_id: int = 7) -> RoundData:
    return RoundData(
        round_id=round_id,
        answer=answer,
        started_at=updated_at,
        updated_at=updated_at,
        answered_in_round=round_id,
    )

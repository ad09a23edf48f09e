"""Position and backing bookkeeping, mutated only by the controller."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ..errors import UnknownPositionError
from ..models import Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """State touched by one operation, captured so a failure can undo it."""

    asset: str
    backing: int
    total_issued: int
    next_id: int
    position: Position | None = None


class PositionLedger:
    """Positions arena, owner index, per-asset backing and total issued supply.

    Position ids start at 1, grow monotonically and are never reused.
    Positions are never removed; a fully unwound position stays as (0, 0).
    """

    def __init__(self) -> None:
        self._positions: dict[int, Position] = {}
        self._owner_index: dict[str, list[int]] = {}
        self._backing: dict[str, int] = {}
        self._next_id = 1
        self.total_issued = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, position_id: int) -> Position:
        try:
            return self._positions[position_id]
        except KeyError:
            raise UnknownPositionError(f"Position {position_id} does not exist") from None

    def ids_of(self, owner: str) -> tuple[int, ...]:
        return tuple(self._owner_index.get(owner, ()))

    def backing_of(self, asset: str) -> int:
        return self._backing.get(asset, 0)

    def __len__(self) -> int:
        return len(self._positions)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def open_position(
        self, owner: str, asset: str, asset_amount: int, token_amount: int
    ) -> Position:
        position = Position(
            id=self._next_id,
            owner=owner,
            asset=asset,
            asset_amount=asset_amount,
            token_amount=token_amount,
        )
        self._next_id += 1
        self._positions[position.id] = position
        self._owner_index.setdefault(owner, []).append(position.id)
        self._backing[asset] = self.backing_of(asset) + asset_amount
        self.total_issued += token_amount
        return position

    def reduce_position(self, position_id: int, tokens: int, asset_amount: int) -> Position:
        """Shrink a position and its asset's backing by the given slice."""
        current = self.get(position_id)
        updated = replace(
            current,
            asset_amount=current.asset_amount - asset_amount,
            token_amount=current.token_amount - tokens,
        )
        self._positions[position_id] = updated
        self._backing[current.asset] = self.backing_of(current.asset) - asset_amount
        return updated

    def record_burn(self, tokens: int) -> None:
        self.total_issued -= tokens

    # ------------------------------------------------------------------
    # Rollback
    # ------------------------------------------------------------------

    def snapshot(self, asset: str, position_id: int | None = None) -> LedgerSnapshot:
        return LedgerSnapshot(
            asset=asset,
            backing=self.backing_of(asset),
            total_issued=self.total_issued,
            next_id=self._next_id,
            position=self._positions.get(position_id) if position_id else None,
        )

    def restore(self, snap: LedgerSnapshot) -> None:
        """Undo every change made since ``snap`` was taken."""
        for pid in range(snap.next_id, self._next_id):
            created = self._positions.pop(pid, None)
            if created is not None:
                self._owner_index[created.owner].remove(pid)
                if not self._owner_index[created.owner]:
                    del self._owner_index[created.owner]
        self._next_id = snap.next_id
        if snap.position is not None:
            self._positions[snap.position.id] = snap.position
        self._backing[snap.asset] = snap.backing
        self.total_issued = snap.total_issued
        logger.debug("Ledger restored to position id %d", snap.next_id)

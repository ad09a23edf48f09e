"""Unit tests for position and backing bookkeeping."""
from __future__ import annotations

import pytest

from issuance.errors import UnknownPositionError
from issuance.services.ledger import PositionLedger


@pytest.fixture()
def ledger() -> PositionLedger:
    return PositionLedger()


class TestOpenPosition:
    def test_ids_start_at_one_and_increase(self, ledger: PositionLedger) -> None:
        a = ledger.open_position("alice", "usdc", 100, 1000)
        b = ledger.open_position("bob", "usdc", 50, 500)
        c = ledger.open_position("alice", "native", 7, 70)
        assert (a.id, b.id, c.id) == (1, 2, 3)

    def test_updates_backing_and_supply(self, ledger: PositionLedger) -> None:
        ledger.open_position("alice", "usdc", 100, 1000)
        ledger.open_position("bob", "usdc", 50, 500)
        assert ledger.backing_of("usdc") == 150
        assert ledger.backing_of("native") == 0
        assert ledger.total_issued == 1500

    def test_owner_index(self, ledger: PositionLedger) -> None:
        ledger.open_position("alice", "usdc", 100, 1000)
        ledger.open_position("bob", "usdc", 50, 500)
        ledger.open_position("alice", "native", 7, 70)
        assert ledger.ids_of("alice") == (1, 3)
        assert ledger.ids_of("bob") == (2,)
        assert ledger.ids_of("carol") == ()

    def test_unknown_position(self, ledger: PositionLedger) -> None:
        with pytest.raises(UnknownPositionError):
            ledger.get(42)


class TestReducePosition:
    def test_reduces_position_and_backing(self, ledger: PositionLedger) -> None:
        ledger.open_position("alice", "usdc", 100, 100)
        updated = ledger.reduce_position(1, 40, 40)
        assert (updated.asset_amount, updated.token_amount) == (60, 60)
        assert ledger.get(1) == updated
        assert ledger.backing_of("usdc") == 60
        # Supply only changes on burn.
        assert ledger.total_issued == 100

    def test_record_burn(self, ledger: PositionLedger) -> None:
        ledger.open_position("alice", "usdc", 100, 100)
        ledger.record_burn(30)
        assert ledger.total_issued == 70

    def test_closed_position_is_kept(self, ledger: PositionLedger) -> None:
        ledger.open_position("alice", "usdc", 100, 100)
        ledger.reduce_position(1, 100, 100)
        assert ledger.get(1).is_closed
        assert len(ledger) == 1
        assert ledger.ids_of("alice") == (1,)


class TestSnapshotRestore:
    def test_restore_undoes_open(self, ledger: PositionLedger) -> None:
        ledger.open_position("alice", "usdc", 100, 100)
        snap = ledger.snapshot("usdc")
        ledger.open_position("bob", "usdc", 10, 10)
        ledger.restore(snap)

        assert len(ledger) == 1
        assert ledger.ids_of("bob") == ()
        assert ledger.backing_of("usdc") == 100
        assert ledger.total_issued == 100
        # The undone id is handed out again since it was never observed.
        assert ledger.open_position("carol", "usdc", 1, 1).id == 2

    def test_restore_undoes_reduce_and_burn(self, ledger: PositionLedger) -> None:
        original = ledger.open_position("alice", "usdc", 100, 100)
        snap = ledger.snapshot("usdc", 1)
        ledger.reduce_position(1, 40, 40)
        ledger.record_burn(40)
        ledger.restore(snap)

        assert ledger.get(1) == original
        assert ledger.backing_of("usdc") == 100
        assert ledger.total_issued == 100

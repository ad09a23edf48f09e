"""Unit tests for token ledgers and custody movers."""
from __future__ import annotations

import pytest

from issuance.assets import (
    ClaimToken,
    InMemoryToken,
    NativeAssetMover,
    NativeLedger,
    TokenAssetMover,
)
from issuance.errors import TransferFailedError


class TestInMemoryToken:
    def test_initial_supply(self) -> None:
        t = InMemoryToken("T", "T", decimals=6, balances={"a": 5, "b": 7})
        assert t.total_supply == 12
        assert t.decimals == 6

    def test_transfer(self) -> None:
        t = InMemoryToken("T", "T", balances={"a": 5})
        assert t.transfer("a", "b", 3)
        assert (t.balance_of("a"), t.balance_of("b")) == (2, 3)

    def test_transfer_insufficient(self) -> None:
        t = InMemoryToken("T", "T", balances={"a": 5})
        assert not t.transfer("a", "b", 6)
        assert t.balance_of("a") == 5

    def test_transfer_from_spends_allowance(self) -> None:
        t = InMemoryToken("T", "T", balances={"a": 5})
        t.approve("a", "s", 4)
        assert t.transfer_from("s", "a", "c", 3)
        assert t.allowance("a", "s") == 1
        assert t.balance_of("c") == 3

    def test_transfer_from_without_allowance(self) -> None:
        t = InMemoryToken("T", "T", balances={"a": 5})
        assert not t.transfer_from("s", "a", "c", 1)


class TestClaimToken:
    def test_only_minter_mints(self) -> None:
        t = ClaimToken("C", "C", minter="m")
        assert not t.mint("x", "x", 10)
        assert t.mint("m", "m", 10)
        assert t.total_supply == 10
        assert t.decimals == 18

    def test_only_minter_burns(self) -> None:
        t = ClaimToken("C", "C", minter="m")
        t.mint("m", "m", 10)
        assert not t.burn("x", "m", 1)
        assert t.burn("m", "m", 4)
        assert t.total_supply == 6

    def test_burn_more_than_held(self) -> None:
        t = ClaimToken("C", "C", minter="m")
        t.mint("m", "m", 1)
        assert not t.burn("m", "m", 2)


class TestNativeMover:
    @pytest.mark.asyncio
    async def test_pull_and_push(self) -> None:
        ledger = NativeLedger({"alice": 100})
        mover = NativeAssetMover(ledger, "custody")
        await mover.pull("alice", 60)
        await mover.push("bob", 25)
        assert mover.balance() == 35
        assert ledger.balance_of("bob") == 25
        assert mover.decimals == 18

    @pytest.mark.asyncio
    async def test_unfunded_transfer_raises(self) -> None:
        mover = NativeAssetMover(NativeLedger({"alice": 1}), "custody")
        with pytest.raises(TransferFailedError):
            await mover.pull("alice", 2)
        with pytest.raises(TransferFailedError):
            await mover.push("alice", 1)

    @pytest.mark.asyncio
    async def test_receive_hook_runs(self) -> None:
        ledger = NativeLedger({"custody": 10})
        seen: list[tuple[str, int]] = []

        async def hook(source: str, amount: int) -> None:
            seen.append((source, amount))

        ledger.register_receiver("bob", hook)
        await NativeAssetMover(ledger, "custody").push("bob", 4)
        assert seen == [("custody", 4)]

    @pytest.mark.asyncio
    async def test_failing_hook_reverts_transfer(self) -> None:
        ledger = NativeLedger({"custody": 10})

        async def hook(source: str, amount: int) -> None:
            raise RuntimeError("rejected")

        ledger.register_receiver("bob", hook)
        with pytest.raises(RuntimeError):
            await NativeAssetMover(ledger, "custody").push("bob", 4)
        assert ledger.balance_of("custody") == 10
        assert ledger.balance_of("bob") == 0


class TestTokenMover:
    @pytest.mark.asyncio
    async def test_pull_uses_allowance(self) -> None:
        token = InMemoryToken("U", "U", decimals=6, balances={"alice": 100})
        token.approve("alice", "custody", 100)
        mover = TokenAssetMover(token, "custody")
        await mover.pull("alice", 70)
        assert mover.balance() == 70
        assert mover.decimals == 6

    @pytest.mark.asyncio
    async def test_pull_without_allowance_raises(self) -> None:
        token = InMemoryToken("U", "U", balances={"alice": 100})
        with pytest.raises(TransferFailedError):
            await TokenAssetMover(token, "custody").pull("alice", 1)

    @pytest.mark.asyncio
    async def test_push_checks_result(self) -> None:
        token = InMemoryToken("U", "U", balances={"custody": 5})
        mover = TokenAssetMover(token, "custody")
        await mover.push("bob", 5)
        with pytest.raises(TransferFailedError):
            await mover.push("bob", 1)

"""Issuance controller — invest, divest, withdraw and treasury skim."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any

from ..assets.token import ClaimToken
from ..config import DeploymentConfig
from ..errors import (
    AssetNotAcceptedError,
    InsufficientAvailableBackingError,
    InsufficientLockedTokensError,
    InvariantViolationError,
    IssuanceLedgerError,
    ReentrantCallError,
    TransferFailedError,
    UnauthorizedCallerError,
    ZeroAmountError,
)
from ..interfaces.asset_mover import AssetMover
from ..models import (
    Divested,
    Initialized,
    Invested,
    OracleBinding,
    Position,
    TreasurySkimmed,
    Withdrawn,
)
from ..oracles.http_feed import feed_bindings
from ..oracles.validator import OracleValidator
from .conversion import ConversionEngine
from .ledger import PositionLedger

logger = logging.getLogger(__name__)


class IssuanceController:
    """Owns the position ledger, the issuance cap and the re-entrancy guard.

    Every mutating operation is all-or-nothing: a failure leaves positions,
    backing, supply and custody exactly as they were. Only one mutating
    operation may be in progress at a time; a reentrant call raises
    ``ReentrantCallError``.
    """

    def __init__(
        self,
        *,
        address: str,
        name: str,
        symbol: str,
        issuance_cap: int,
        conversion_rate: int,
        accepted_assets: Sequence[str],
        oracle_bindings: Sequence[OracleBinding],
        treasury: str,
        movers: Mapping[str, AssetMover],
        validator: OracleValidator | None = None,
    ) -> None:
        if len(accepted_assets) != len(oracle_bindings):
            raise ValueError(
                f"{len(accepted_assets)} accepted assets but "
                f"{len(oracle_bindings)} oracle bindings"
            )
        if not treasury:
            raise ValueError("Treasury identity is required")
        if not address:
            raise ValueError("Controller address is required")
        if issuance_cap <= 0 or conversion_rate <= 0:
            raise ValueError("issuance_cap and conversion_rate must be positive")
        if len(set(accepted_assets)) != len(accepted_assets):
            raise ValueError("Accepted assets contain duplicates")
        missing = [a for a in accepted_assets if a not in movers]
        if missing:
            raise ValueError(f"No asset mover for: {', '.join(missing)}")

        self.address = address
        self.treasury = treasury
        self.issuance_cap = issuance_cap
        self.conversion_rate = conversion_rate
        self.token = ClaimToken(name, symbol, minter=address)

        # Registered once; read-only afterwards.
        self._accepted: Mapping[str, bool] = MappingProxyType(
            dict.fromkeys(accepted_assets, True)
        )
        self._bindings: Mapping[str, OracleBinding] = MappingProxyType(
            dict(zip(accepted_assets, oracle_bindings))
        )
        self._movers: Mapping[str, AssetMover] = MappingProxyType(
            {a: movers[a] for a in accepted_assets}
        )

        self._ledger = PositionLedger()
        self._engine = ConversionEngine(
            validator=validator or OracleValidator(),
            bindings=self._bindings,
            asset_decimals={a: m.decimals for a, m in self._movers.items()},
            conversion_rate=conversion_rate,
            issuance_cap=issuance_cap,
        )
        self._entered = False
        self._events: list[Any] = []

        self._emit(
            Initialized(
                name=name,
                symbol=symbol,
                issuance_cap=issuance_cap,
                conversion_rate=conversion_rate,
                treasury=treasury,
                accepted_assets=tuple(accepted_assets),
            )
        )

    @classmethod
    def from_config(
        cls,
        config: DeploymentConfig,
        address: str,
        movers: Mapping[str, AssetMover],
        clock: Callable[[], float] | None = None,
    ) -> IssuanceController:
        """Build a controller from loaded deployment configuration."""
        bindings = feed_bindings(config)
        for a in config.assets:
            mover = movers.get(a.asset)
            if mover is not None and mover.decimals != a.decimals:
                raise ValueError(
                    f"Asset '{a.asset}' configured with {a.decimals} decimals, "
                    f"mover reports {mover.decimals}"
                )
        validator = OracleValidator(clock) if clock else OracleValidator()
        return cls(
            address=address,
            name=config.token.name,
            symbol=config.token.symbol,
            issuance_cap=config.issuance_cap,
            conversion_rate=config.conversion_rate,
            accepted_assets=[a.asset for a in config.assets],
            oracle_bindings=[bindings[a.asset] for a in config.assets],
            treasury=config.treasury,
            movers=movers,
            validator=validator,
        )

    # ------------------------------------------------------------------
    # Guard / helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _non_reentrant(self, operation: str) -> Iterator[None]:
        if self._entered:
            logger.warning("Reentrant %s rejected", operation)
            raise ReentrantCallError(f"{operation} called while another operation is in progress")
        self._entered = True
        try:
            yield
        except InvariantViolationError as e:
            logger.critical("INVARIANT VIOLATION in %s: %s", operation, e)
            raise
        except IssuanceLedgerError as e:
            logger.warning("%s rejected: %s", operation, e)
            raise
        finally:
            self._entered = False

    def _emit(self, event: Any) -> None:
        self._events.append(event)
        logger.info("%s", event)

    def _require_accepted(self, asset: str) -> None:
        if not self._accepted.get(asset, False):
            raise AssetNotAcceptedError(f"Asset '{asset}' is not accepted")

    def _owned_position(self, caller: str, position_id: int, tokens: int) -> Position:
        if tokens <= 0:
            raise ZeroAmountError("Token amount must be greater than zero")
        position = self._ledger.get(position_id)
        if caller != position.owner:
            raise UnauthorizedCallerError(
                f"{caller} does not own position {position_id}"
            )
        if tokens > position.token_amount:
            raise InsufficientLockedTokensError(
                f"Position {position_id} locks {position.token_amount}, "
                f"requested {tokens}"
            )
        return position

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def events(self) -> tuple[Any, ...]:
        return tuple(self._events)

    @property
    def total_issued(self) -> int:
        return self._ledger.total_issued

    @property
    def headroom(self) -> int:
        return self.issuance_cap - self._ledger.total_issued

    @property
    def accepted_assets(self) -> tuple[str, ...]:
        return tuple(self._accepted)

    def is_accepted(self, asset: str) -> bool:
        return self._accepted.get(asset, False)

    def oracle_binding(self, asset: str) -> OracleBinding | None:
        return self._bindings.get(asset)

    def get_position(self, position_id: int) -> Position:
        return self._ledger.get(position_id)

    def positions_of(self, owner: str) -> tuple[Position, ...]:
        return tuple(self._ledger.get(pid) for pid in self._ledger.ids_of(owner))

    def backing_of(self, asset: str) -> int:
        return self._ledger.backing_of(asset)

    def held_balance(self, asset: str) -> int:
        self._require_accepted(asset)
        return self._movers[asset].balance()

    def available_for_skim(self, asset: str) -> int:
        return self.held_balance(asset) - self._ledger.backing_of(asset)

    async def preview_invest(self, asset: str, amount: int) -> int:
        """Tokens ``invest`` would mint right now; changes nothing."""
        if amount <= 0:
            raise ZeroAmountError("Amount must be greater than zero")
        self._require_accepted(asset)
        return await self._engine.tokens_for_deposit(
            asset, amount, self._ledger.total_issued
        )

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    async def invest(self, caller: str, asset: str, amount: int) -> Position:
        """Lock ``amount`` of ``asset`` and mint claim tokens into custody.

        Pricing and the cap check finish before any funds move, so a rejected
        deposit never touches the caller's balance.
        """
        with self._non_reentrant("invest"):
            if amount <= 0:
                raise ZeroAmountError("Amount must be greater than zero")
            self._require_accepted(asset)

            tokens = await self._engine.tokens_for_deposit(
                asset, amount, self._ledger.total_issued
            )

            mover = self._movers[asset]
            await mover.pull(caller, amount)

            snap = self._ledger.snapshot(asset)
            position = self._ledger.open_position(caller, asset, amount, tokens)
            if not self.token.mint(self.address, self.address, tokens):
                self._ledger.restore(snap)
                await mover.push(caller, amount)
                raise TransferFailedError(f"Minting {tokens} claim tokens failed")

            self._emit(
                Invested(
                    owner=caller,
                    position_id=position.id,
                    asset=asset,
                    asset_amount=amount,
                    tokens_minted=tokens,
                )
            )
            return position

    async def divest(self, caller: str, position_id: int, tokens_to_burn: int) -> int:
        """Burn locked tokens and return the proportional asset amount."""
        with self._non_reentrant("divest"):
            position = self._owned_position(caller, position_id, tokens_to_burn)
            asset = position.asset
            amount = self._engine.position_ratio_to_asset_amount(
                position, tokens_to_burn, self._ledger.backing_of(asset)
            )

            snap = self._ledger.snapshot(asset, position_id)
            self._ledger.reduce_position(position_id, tokens_to_burn, amount)
            self._ledger.record_burn(tokens_to_burn)
            if not self.token.burn(self.address, self.address, tokens_to_burn):
                self._ledger.restore(snap)
                raise TransferFailedError(f"Burning {tokens_to_burn} claim tokens failed")

            try:
                await self._movers[asset].push(caller, amount)
            except Exception:
                self._ledger.restore(snap)
                self.token.mint(self.address, self.address, tokens_to_burn)
                raise

            self._emit(
                Divested(
                    owner=caller,
                    position_id=position_id,
                    tokens_burned=tokens_to_burn,
                    asset=asset,
                    asset_returned=amount,
                )
            )
            return amount

    async def withdraw(self, caller: str, position_id: int, tokens_to_unlock: int) -> int:
        """Release locked tokens to the caller, giving up their redemption right.

        Supply is unchanged; the matching backing becomes available for skim.
        """
        with self._non_reentrant("withdraw"):
            position = self._owned_position(caller, position_id, tokens_to_unlock)
            asset = position.asset
            amount = self._engine.position_ratio_to_asset_amount(
                position, tokens_to_unlock, self._ledger.backing_of(asset)
            )

            snap = self._ledger.snapshot(asset, position_id)
            self._ledger.reduce_position(position_id, tokens_to_unlock, amount)
            if not self.token.transfer(self.address, caller, tokens_to_unlock):
                self._ledger.restore(snap)
                raise TransferFailedError(
                    f"Releasing {tokens_to_unlock} claim tokens failed"
                )

            self._emit(
                Withdrawn(
                    owner=caller,
                    position_id=position_id,
                    tokens_unlocked=tokens_to_unlock,
                    asset=asset,
                    asset_released=amount,
                )
            )
            return amount

    async def take_to_treasury(self, caller: str, asset: str, amount: int) -> None:
        """Send held ``asset`` in excess of backing to the treasury.

        Any caller may trigger this; funds only ever go to the treasury.
        """
        with self._non_reentrant("take_to_treasury"):
            if amount <= 0:
                raise ZeroAmountError("Amount must be greater than zero")
            self._require_accepted(asset)

            available = self.available_for_skim(asset)
            if amount > available:
                raise InsufficientAvailableBackingError(
                    f"Requested {amount} {asset}, only {available} above backing"
                )

            await self._movers[asset].push(self.treasury, amount)
            self._emit(
                TreasurySkimmed(
                    caller=caller, asset=asset, amount=amount, treasury=self.treasury
                )
            )

"""Error hierarchy for the issuance ledger.

Three branches are kept apart so callers can tell them apart:

- ``IssuanceInputError``: bad input or authorization; retry with corrected input.
- ``InvariantViolationError``: internal bookkeeping is wrong; treat as a bug.
- ``OracleError``: the price source could not be trusted for this call.

``TransferFailedError`` sits directly under the base: a custody or token
movement failed, which is neither an input problem nor a bookkeeping bug.
"""
from __future__ import annotations


class IssuanceLedgerError(Exception):
    """Base exception for the issuance ledger."""


# ---------------------------------------------------------------------------
# Input / authorization errors
# ---------------------------------------------------------------------------


class IssuanceInputError(IssuanceLedgerError):
    """Operation rejected because of caller-supplied input or identity."""


class ZeroAmountError(IssuanceInputError):
    """Amount must be greater than zero."""


class AssetNotAcceptedError(IssuanceInputError):
    """Asset is not in the accepted-asset registry."""


class UnknownPositionError(IssuanceInputError):
    """No position exists under that id."""


class UnauthorizedCallerError(IssuanceInputError):
    """Caller does not own the position."""


class InsufficientLockedTokensError(IssuanceInputError):
    """Requested more tokens than the position still locks."""


class InsufficientAvailableBackingError(IssuanceInputError):
    """Skim amount exceeds held balance minus backing."""


class CapExceededError(IssuanceInputError):
    """Minting would push total issued supply above the issuance cap."""


class DustAmountError(IssuanceInputError):
    """Deposit is too small to mint a single token unit."""


class ZeroRedemptionError(IssuanceInputError):
    """Requested token slice maps to zero asset units."""


class PositionExhaustedError(IssuanceInputError):
    """Position has no remaining locked tokens."""


class ReentrantCallError(IssuanceInputError):
    """A mutating operation is already in progress on this controller."""


# ---------------------------------------------------------------------------
# Custody transfers
# ---------------------------------------------------------------------------


class TransferFailedError(IssuanceLedgerError):
    """An asset or token transfer reported failure."""


# ---------------------------------------------------------------------------
# Internal invariant violations
# ---------------------------------------------------------------------------


class InvariantViolationError(IssuanceLedgerError):
    """Bookkeeping invariant broken. Unreachable under correct accounting."""


class RedemptionExceedsPositionError(InvariantViolationError):
    """Computed redemption is larger than the position's remaining asset amount."""


class RedemptionExceedsBackingError(InvariantViolationError):
    """Computed redemption is larger than the asset's backing total."""


# ---------------------------------------------------------------------------
# Oracle errors
# ---------------------------------------------------------------------------


class OracleError(IssuanceLedgerError):
    """Price quote rejected. Never replaced with a fallback price."""


class OracleNotConfiguredError(OracleError):
    """No price feed is bound to the asset."""


class NonPositivePriceError(OracleError):
    """Quoted answer is zero or negative."""


class IncompleteRoundError(OracleError):
    """Round id is zero or the answer comes from an earlier round."""


class MissingTimestampError(OracleError):
    """Quote carries no update timestamp."""


class StalePriceError(OracleError):
    """Quote is older than the configured staleness threshold."""


class LivenessGuardTrippedError(OracleError):
    """Liveness guard reports the upstream as degraded."""


class GracePeriodNotElapsedError(OracleError):
    """Liveness guard recovered too recently to trust the primary quote."""


class LivenessGuardUnsetError(OracleError):
    """Liveness guard round has no round id or start time."""


class FeedUnavailableError(OracleError):
    """Feed could not be read (transport, HTTP status or payload)."""

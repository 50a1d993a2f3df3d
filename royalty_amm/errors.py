"""Engine error classes.

Every failure carries a machine-readable ErrorReason so callers (and the
HTTP layer) can tell which precondition or invariant failed.
"""

from enum import Enum


class ErrorReason(str, Enum):
    """Structured failure reasons."""

    # Precondition violations
    ZERO_ADDRESS = "zero_address"
    INVALID_AMOUNT = "invalid_amount"
    POOL_NOT_FOUND = "pool_not_found"
    POOL_EXISTS = "pool_exists"
    EMPTY_ITEM_LIST = "empty_item_list"
    DUPLICATE_ITEM = "duplicate_item"
    ITEM_NOT_IN_POOL = "item_not_in_pool"
    ITEM_ALREADY_IN_POOL = "item_already_in_pool"
    NOT_ITEM_OWNER = "not_item_owner"
    INSUFFICIENT_SHARES = "insufficient_shares"
    INSUFFICIENT_PAYMENT = "insufficient_payment"
    NOTHING_TO_WITHDRAW = "nothing_to_withdraw"
    INVALID_ROYALTY = "invalid_royalty"
    INVALID_FEE = "invalid_fee"
    UNAUTHORIZED = "unauthorized"
    ITEM_EXISTS = "item_exists"
    MINT_UNSUPPORTED = "mint_unsupported"
    # Arithmetic degeneracy
    ZERO_RESERVE = "zero_reserve"
    ZERO_OUTPUT = "zero_output"
    ZERO_SHARES = "zero_shares"
    INSUFFICIENT_INVENTORY = "insufficient_inventory"
    # Invariant breach
    INVARIANT_VIOLATION = "invariant_violation"
    ROYALTY_EXCEEDS_SALE = "royalty_exceeds_sale"
    RECEIPT_MISMATCH = "receipt_mismatch"
    TRANSFER_FAILED = "transfer_failed"
    REENTRANT_CALL = "reentrant_call"
    # Slippage
    SLIPPAGE = "slippage"


class AMMError(Exception):
    """Base error for engine operations."""

    default_reason = ErrorReason.INVARIANT_VIOLATION

    def __init__(self, detail: str, reason: ErrorReason | None = None) -> None:
        super().__init__(detail)
        self.reason = reason or self.default_reason
        self.detail = detail

    def to_dict(self) -> dict[str, str]:
        return {"reason": self.reason.value, "detail": self.detail}


class PreconditionError(AMMError):
    """Caller input or state does not allow the operation."""

    default_reason = ErrorReason.INVALID_AMOUNT


class PoolNotFound(PreconditionError):
    default_reason = ErrorReason.POOL_NOT_FOUND


class PoolAlreadyExists(PreconditionError):
    default_reason = ErrorReason.POOL_EXISTS


class InsufficientShares(PreconditionError):
    default_reason = ErrorReason.INSUFFICIENT_SHARES


class Unauthorized(PreconditionError):
    """Caller lacks the capability required for an admin operation."""

    default_reason = ErrorReason.UNAUTHORIZED


class ArithmeticDegeneracy(AMMError):
    """A formula would produce a zero amount or divide by zero."""

    default_reason = ErrorReason.ZERO_OUTPUT


class InvariantViolation(AMMError):
    """Ledger or royalty invariant would be broken. Never clamped."""

    default_reason = ErrorReason.INVARIANT_VIOLATION


class TransferFailed(AMMError):
    """The custody collaborator reported a failed transfer."""

    default_reason = ErrorReason.TRANSFER_FAILED


class ReentrancyError(AMMError):
    """A state-mutating operation was entered while another was running."""

    default_reason = ErrorReason.REENTRANT_CALL


class SlippageExceeded(AMMError):
    """Batch output fell below the caller's minimum."""

    default_reason = ErrorReason.SLIPPAGE

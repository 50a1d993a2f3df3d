"""Share accounting: liquidity-share issuance, burn and fee entitlement.

The currency reserve and the fee pool are tracked separately. A provider's
claim on each is computed independently from their share of total supply:

    currency_amount = floor(shares * currency_reserve / total_shares)
    fee_amount      = floor(shares * accumulated_fees / total_shares)

The first deposit into a pool with no shares (or no reserve) is issued 1:1,
which fixes the unit value of a share.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from royalty_amm.errors import (
    ArithmeticDegeneracy,
    ErrorReason,
    InsufficientShares,
    PreconditionError,
)
from royalty_amm.safe_int import S

if TYPE_CHECKING:
    from royalty_amm.pools.ledger import PoolLedger


@dataclass(frozen=True)
class Withdrawal:
    """Amounts released by burning shares."""

    currency_amount: int
    fee_amount: int

    @property
    def total(self) -> int:
        return self.currency_amount + self.fee_amount


def compute_shares_to_issue(amount: int, total_shares: int, currency_reserve: int) -> int:
    """Shares issued for depositing amount of currency.

    Bootstrap case (no shares or no reserve): 1:1.
    """
    if total_shares == 0 or currency_reserve == 0:
        return amount
    return S(amount).mul_div(total_shares, currency_reserve).value


def compute_withdrawal(
    share_amount: int,
    total_shares: int,
    currency_reserve: int,
    accumulated_fees: int,
) -> Withdrawal:
    """Currency and fee amounts released by burning share_amount shares."""
    return Withdrawal(
        currency_amount=S(share_amount).mul_div(currency_reserve, total_shares).value,
        fee_amount=compute_fee_share(share_amount, total_shares, accumulated_fees),
    )


def compute_fee_share(share_amount: int, total_shares: int, accumulated_fees: int) -> int:
    """Fee-pool entitlement of share_amount shares."""
    return S(share_amount).mul_div(accumulated_fees, total_shares).value


def deposit(ledger: PoolLedger, provider: str, amount: int) -> int:
    """Credit amount to the reserve and mint shares to provider.

    Returns:
        Number of shares issued

    Raises:
        PreconditionError: If amount is not positive
        ArithmeticDegeneracy: If the deposit is too small to earn a share
    """
    if amount <= 0:
        raise PreconditionError(f"Deposit amount must be positive: {amount}")

    shares = compute_shares_to_issue(amount, ledger.total_shares, ledger.currency_reserve)
    if shares == 0:
        raise ArithmeticDegeneracy(
            f"Deposit of {amount} issues zero shares "
            f"(reserve={ledger.currency_reserve}, supply={ledger.total_shares})",
            ErrorReason.ZERO_SHARES,
        )

    ledger.credit_reserve(amount)
    ledger.mint_shares(provider, shares)
    return shares


def withdraw(ledger: PoolLedger, provider: str, share_amount: int) -> Withdrawal:
    """Burn share_amount of provider's shares for their slice of reserve and fees.

    Raises:
        PreconditionError: If share_amount is not positive
        InsufficientShares: If provider holds fewer shares than requested
        ArithmeticDegeneracy: If the burn would release nothing
    """
    if share_amount <= 0:
        raise PreconditionError(f"Share amount must be positive: {share_amount}")
    held = ledger.shares_of(provider)
    if share_amount > held:
        raise InsufficientShares(
            f"Provider {provider} holds {held} shares, requested {share_amount}"
        )
    if ledger.total_shares == 0:
        raise InsufficientShares("Pool has no outstanding shares")

    result = compute_withdrawal(
        share_amount, ledger.total_shares, ledger.currency_reserve, ledger.accumulated_fees
    )
    if result.total == 0:
        raise ArithmeticDegeneracy(
            f"Burning {share_amount} shares releases nothing", ErrorReason.NOTHING_TO_WITHDRAW
        )

    ledger.debit_reserve(result.currency_amount)
    ledger.debit_fees(result.fee_amount)
    ledger.burn_shares(provider, share_amount)
    return result


def withdraw_fees_only(ledger: PoolLedger, provider: str) -> int:
    """Release provider's fee-pool entitlement without burning shares.

    Raises:
        InsufficientShares: If provider holds no shares
        ArithmeticDegeneracy: If the entitlement rounds to zero
    """
    held = ledger.shares_of(provider)
    if held == 0 or ledger.total_shares == 0:
        raise InsufficientShares(f"Provider {provider} holds no shares")

    fee_amount = compute_fee_share(held, ledger.total_shares, ledger.accumulated_fees)
    if fee_amount == 0:
        raise ArithmeticDegeneracy(
            f"No fees owed to provider {provider}", ErrorReason.NOTHING_TO_WITHDRAW
        )

    ledger.debit_fees(fee_amount)
    return fee_amount

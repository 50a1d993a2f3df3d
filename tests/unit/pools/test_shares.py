"""Tests for share issuance, burning and fee entitlement."""

import pytest

from royalty_amm.errors import (
    ArithmeticDegeneracy,
    ErrorReason,
    InsufficientShares,
    PreconditionError,
)
from royalty_amm.pools import PoolLedger, shares
from tests.helpers import ALICE, BOB, CAROL, NATIVE, PUNKS


@pytest.fixture
def ledger() -> PoolLedger:
    return PoolLedger(collection=PUNKS, currency=NATIVE)


class TestDeposit:
    def test_bootstrap_is_one_to_one(self, ledger):
        """Depositing 500 into a pool with no shares issues exactly 500."""
        assert shares.deposit(ledger, ALICE, 500) == 500
        assert ledger.total_shares == 500
        assert ledger.currency_reserve == 500

    def test_bootstrap_when_reserve_drained(self, ledger):
        """Outstanding shares but an empty reserve also issue 1:1."""
        ledger.mint_shares(ALICE, 100)
        assert shares.deposit(ledger, BOB, 40) == 40

    def test_proportional_issue(self, ledger):
        shares.deposit(ledger, ALICE, 1000)
        ledger.credit_reserve(1000)  # reserve doubled, supply unchanged
        # 300 * 1000 / 2000 = 150
        assert shares.deposit(ledger, BOB, 300) == 150

    def test_proportional_issue_floors(self, ledger):
        shares.deposit(ledger, ALICE, 3)
        ledger.credit_reserve(4)  # reserve 7, supply 3
        # 10 * 3 / 7 = 4.28 -> 4
        assert shares.deposit(ledger, BOB, 10) == 4

    def test_dust_deposit_rejected(self, ledger):
        shares.deposit(ledger, ALICE, 1)
        ledger.credit_reserve(999)  # reserve 1000, supply 1
        with pytest.raises(ArithmeticDegeneracy) as exc:
            shares.deposit(ledger, BOB, 999)
        assert exc.value.reason is ErrorReason.ZERO_SHARES
        assert ledger.total_shares == 1

    def test_zero_deposit_rejected(self, ledger):
        with pytest.raises(PreconditionError):
            shares.deposit(ledger, ALICE, 0)


class TestWithdraw:
    def test_withdraw_all_empties_pool(self, ledger):
        shares.deposit(ledger, ALICE, 1000)
        ledger.credit_fees(77)
        result = shares.withdraw(ledger, ALICE, 1000)
        assert result.currency_amount == 1000
        assert result.fee_amount == 77
        assert result.total == 1077
        assert ledger.currency_reserve == 0
        assert ledger.accumulated_fees == 0
        assert ledger.total_shares == 0

    def test_partial_withdraw_floors(self, ledger):
        shares.deposit(ledger, ALICE, 100)
        shares.deposit(ledger, BOB, 200)
        ledger.credit_fees(10)
        result = shares.withdraw(ledger, ALICE, 100)
        # 100 * 300 / 300 = 100 ; 100 * 10 / 300 = 3.33 -> 3
        assert result.currency_amount == 100
        assert result.fee_amount == 3
        assert ledger.accumulated_fees == 7

    def test_remainders_bounded_by_provider_count(self, ledger):
        """Everyone withdrawing everything leaves at most one unit per provider."""
        shares.deposit(ledger, ALICE, 333)
        shares.deposit(ledger, BOB, 333)
        shares.deposit(ledger, CAROL, 334)
        ledger.credit_fees(100)
        ledger.credit_reserve(2)
        for provider in (ALICE, BOB, CAROL):
            shares.withdraw(ledger, provider, ledger.shares_of(provider))
        assert ledger.currency_reserve <= 3
        assert ledger.accumulated_fees <= 3
        assert ledger.total_shares == 0

    def test_more_than_held_rejected(self, ledger):
        shares.deposit(ledger, ALICE, 100)
        with pytest.raises(InsufficientShares):
            shares.withdraw(ledger, ALICE, 101)
        assert ledger.currency_reserve == 100

    def test_zero_value_withdraw_rejected(self, ledger):
        ledger.mint_shares(ALICE, 10)  # shares, but nothing in the pool
        with pytest.raises(ArithmeticDegeneracy) as exc:
            shares.withdraw(ledger, ALICE, 10)
        assert exc.value.reason is ErrorReason.NOTHING_TO_WITHDRAW


class TestWithdrawFeesOnly:
    def test_fee_share_without_burn(self, ledger):
        shares.deposit(ledger, ALICE, 300)
        shares.deposit(ledger, BOB, 100)
        ledger.credit_fees(40)
        assert shares.withdraw_fees_only(ledger, ALICE) == 30
        assert ledger.shares_of(ALICE) == 300
        assert ledger.accumulated_fees == 10

    def test_no_fees_rejected(self, ledger):
        shares.deposit(ledger, ALICE, 300)
        with pytest.raises(ArithmeticDegeneracy):
            shares.withdraw_fees_only(ledger, ALICE)

    def test_no_position_rejected(self, ledger):
        shares.deposit(ledger, ALICE, 300)
        ledger.credit_fees(10)
        with pytest.raises(InsufficientShares):
            shares.withdraw_fees_only(ledger, BOB)

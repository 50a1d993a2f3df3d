"""Tests for the in-memory custody ledger."""

from royalty_amm.custody import (
    CurrencyCustody,
    InMemoryCustody,
    ItemCustody,
    PriceRecorder,
    SupportsMint,
    SupportsRollback,
)
from tests.conftest import MockPriceRecorder
from tests.helpers import ALICE, BOB, NATIVE, PUNKS, USDC


class TestProtocols:
    def test_in_memory_custody_implements_all(self):
        custody = InMemoryCustody()
        assert isinstance(custody, CurrencyCustody)
        assert isinstance(custody, ItemCustody)
        assert isinstance(custody, SupportsRollback)
        assert isinstance(custody, SupportsMint)

    def test_mock_recorder_is_price_recorder(self):
        assert isinstance(MockPriceRecorder(), PriceRecorder)


class TestCurrency:
    def test_transfer_moves_balance(self):
        custody = InMemoryCustody()
        custody.mint(NATIVE, ALICE, 100)
        assert custody.transfer(NATIVE, ALICE, BOB, 40)
        assert custody.balance_of(NATIVE, ALICE) == 60
        assert custody.balance_of(NATIVE, BOB) == 40

    def test_insufficient_balance_fails_without_change(self):
        custody = InMemoryCustody()
        custody.mint(USDC, ALICE, 10)
        assert not custody.transfer(USDC, ALICE, BOB, 11)
        assert custody.balance_of(USDC, ALICE) == 10
        assert custody.balance_of(USDC, BOB) == 0

    def test_negative_amount_fails(self):
        custody = InMemoryCustody()
        custody.mint(NATIVE, ALICE, 10)
        assert not custody.transfer(NATIVE, ALICE, BOB, -1)

    def test_currencies_are_separate(self):
        custody = InMemoryCustody()
        custody.mint(NATIVE, ALICE, 10)
        assert custody.balance_of(USDC, ALICE) == 0

    def test_transfer_tax_withheld(self):
        custody = InMemoryCustody(transfer_tax_bps={USDC: 100})
        custody.mint(USDC, ALICE, 1000)
        assert custody.transfer(USDC, ALICE, BOB, 1000)
        assert custody.balance_of(USDC, ALICE) == 0
        assert custody.balance_of(USDC, BOB) == 990


class TestItems:
    def test_owner_transfers_item(self):
        custody = InMemoryCustody()
        custody.mint_item(PUNKS, 7, ALICE)
        assert custody.transfer_item(PUNKS, ALICE, BOB, 7)
        assert custody.owner_of(PUNKS, 7) == BOB

    def test_non_owner_cannot_transfer(self):
        custody = InMemoryCustody()
        custody.mint_item(PUNKS, 7, ALICE)
        assert not custody.transfer_item(PUNKS, BOB, BOB, 7)
        assert custody.owner_of(PUNKS, 7) == ALICE

    def test_unknown_item_has_no_owner(self):
        assert InMemoryCustody().owner_of(PUNKS, 1) is None


class TestJournal:
    def test_rollback_undoes_changes(self):
        custody = InMemoryCustody()
        custody.mint(NATIVE, ALICE, 100)
        custody.mint_item(PUNKS, 1, ALICE)
        custody.begin()

        custody.transfer(NATIVE, ALICE, BOB, 100)
        custody.transfer_item(PUNKS, ALICE, BOB, 1)
        custody.rollback()

        assert custody.balance_of(NATIVE, ALICE) == 100
        assert custody.balance_of(NATIVE, BOB) == 0
        assert (NATIVE, BOB) not in custody.balances
        assert custody.owner_of(PUNKS, 1) == ALICE

    def test_commit_keeps_changes(self):
        custody = InMemoryCustody()
        custody.mint(NATIVE, ALICE, 10)
        custody.begin()
        custody.transfer(NATIVE, ALICE, BOB, 4)
        custody.commit()
        custody.rollback()
        assert custody.balance_of(NATIVE, BOB) == 4

    def test_journal_records_only_touched_entries(self):
        custody = InMemoryCustody()
        for i in range(1000):
            custody.mint_item(PUNKS, i, ALICE)
            custody.mint(USDC, f"0x{i:040x}", 1)
        custody.begin()
        custody.transfer_item(PUNKS, ALICE, BOB, 5)
        assert custody.pending_changes == 1
        custody.rollback()
        assert custody.owner_of(PUNKS, 5) == ALICE
        assert custody.pending_changes == 0

    def test_nothing_recorded_outside_a_journal(self):
        custody = InMemoryCustody()
        custody.mint(NATIVE, ALICE, 1)
        assert custody.pending_changes == 0
        custody.rollback()
        assert custody.balance_of(NATIVE, ALICE) == 1

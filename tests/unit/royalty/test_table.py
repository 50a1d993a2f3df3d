"""Tests for the internal royalty table."""

import pytest

from royalty_amm.errors import ErrorReason, PreconditionError
from royalty_amm.royalty import RoyaltyEntry, RoyaltyMode, RoyaltyTable
from tests.helpers import ARTIST, NULL, PUNKS, STUDIO


class TestValidate:
    def test_normalizes_recipients(self):
        table = RoyaltyTable()
        record = table.validate([(ARTIST.upper().replace("0X", "0x"), 500)])
        assert record == (RoyaltyEntry(recipient=ARTIST, basis_points=500),)

    def test_total_may_reach_full_sale(self):
        table = RoyaltyTable()
        assert len(table.validate([(ARTIST, 6000), (STUDIO, 4000)])) == 2

    def test_total_above_full_sale_rejected(self):
        with pytest.raises(PreconditionError) as exc:
            RoyaltyTable().validate([(ARTIST, 6000), (STUDIO, 4001)])
        assert exc.value.reason is ErrorReason.INVALID_ROYALTY

    @pytest.mark.parametrize("bps", [-1, 10001, True, 1.5])
    def test_bad_basis_points_rejected(self, bps):
        with pytest.raises(PreconditionError) as exc:
            RoyaltyTable().validate([(ARTIST, bps)])
        assert exc.value.reason is ErrorReason.INVALID_ROYALTY

    def test_single_mode_accepts_one_entry(self):
        table = RoyaltyTable(RoyaltyMode.SINGLE)
        assert len(table.validate([(ARTIST, 500)])) == 1
        with pytest.raises(PreconditionError) as exc:
            table.validate([(ARTIST, 500), (STUDIO, 100)])
        assert exc.value.reason is ErrorReason.INVALID_ROYALTY

    def test_zero_address_recipient_allowed(self):
        """A null recipient is stored; resolution drops it."""
        record = RoyaltyTable().validate([(NULL, 100)])
        assert record[0].recipient == NULL

    def test_malformed_recipient_rejected(self):
        with pytest.raises(PreconditionError):
            RoyaltyTable().validate([("0x1234", 100)])


class TestSetAndGet:
    def test_set_replaces_record(self):
        table = RoyaltyTable()
        table.set(PUNKS, 1, [(ARTIST, 500)])
        table.set(PUNKS, 1, [(STUDIO, 250)])
        assert table.get(PUNKS, 1) == (RoyaltyEntry(STUDIO, 250),)

    def test_empty_entries_clear_record(self):
        table = RoyaltyTable()
        table.set(PUNKS, 1, [(ARTIST, 500)])
        table.set(PUNKS, 1, [])
        assert table.get(PUNKS, 1) == ()
        assert len(table) == 0

    def test_invalid_set_keeps_previous_record(self):
        table = RoyaltyTable()
        table.set(PUNKS, 1, [(ARTIST, 500)])
        with pytest.raises(PreconditionError):
            table.set(PUNKS, 1, [(ARTIST, 20000)])
        assert table.get(PUNKS, 1) == (RoyaltyEntry(ARTIST, 500),)

    def test_context_falls_back_to_default(self):
        table = RoyaltyTable()
        table.set(PUNKS, 1, [(ARTIST, 500)])
        table.set(PUNKS, 1, [(STUDIO, 100)], context="primary")
        assert table.get(PUNKS, 1, "primary") == (RoyaltyEntry(STUDIO, 100),)
        assert table.get(PUNKS, 1, "secondary") == (RoyaltyEntry(ARTIST, 500),)
        assert table.get(PUNKS, 1) == (RoyaltyEntry(ARTIST, 500),)

    def test_records_are_per_item(self):
        table = RoyaltyTable()
        table.set(PUNKS, 1, [(ARTIST, 500)])
        assert table.get(PUNKS, 2) == ()

"""Internal royalty table keyed by (collection, item_id, sale context)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from royalty_amm.constants import BPS_DENOMINATOR
from royalty_amm.errors import ErrorReason, PreconditionError
from royalty_amm.models.types import require_address

RoyaltyKey = tuple[str, int, str | None]


class RoyaltyMode(str, Enum):
    """How many beneficiaries a royalty record may name."""

    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class RoyaltyEntry:
    """One beneficiary and their cut of the sale value in basis points."""

    recipient: str
    basis_points: int


class RoyaltyTable:
    """Ordered (recipient, bps) records per item.

    A record stored without a sale context acts as the default for every
    context of that item.
    """

    def __init__(self, mode: RoyaltyMode = RoyaltyMode.MULTI) -> None:
        self.mode = mode
        self._records: dict[RoyaltyKey, tuple[RoyaltyEntry, ...]] = {}

    def __len__(self) -> int:
        return len(self._records)

    def validate(self, entries: list[tuple[str, int]]) -> tuple[RoyaltyEntry, ...]:
        """Normalize entries and check the basis-point bounds.

        Raises:
            PreconditionError: On a malformed entry, a total above 10000 bps,
                or more than one entry in single-recipient mode
        """
        if self.mode is RoyaltyMode.SINGLE and len(entries) > 1:
            raise PreconditionError(
                f"Single-recipient royalties accept one entry, got {len(entries)}",
                ErrorReason.INVALID_ROYALTY,
            )

        normalized: list[RoyaltyEntry] = []
        total = 0
        for recipient, bps in entries:
            if isinstance(bps, bool) or not isinstance(bps, int) or not 0 <= bps <= BPS_DENOMINATOR:
                raise PreconditionError(
                    f"Royalty basis points must be within 0..{BPS_DENOMINATOR}: {bps!r}",
                    ErrorReason.INVALID_ROYALTY,
                )
            total += bps
            recipient = require_address("recipient", recipient, allow_zero=True)
            normalized.append(RoyaltyEntry(recipient=recipient, basis_points=bps))

        if total > BPS_DENOMINATOR:
            raise PreconditionError(
                f"Royalty total {total} bps exceeds {BPS_DENOMINATOR}", ErrorReason.INVALID_ROYALTY
            )
        return tuple(normalized)

    def set(
        self,
        collection: str,
        item_id: int,
        entries: list[tuple[str, int]],
        context: str | None = None,
    ) -> tuple[RoyaltyEntry, ...]:
        """Replace the record for (collection, item_id, context). Empty clears it."""
        record = self.validate(entries)
        key = (collection, item_id, context)
        if record:
            self._records[key] = record
        else:
            self._records.pop(key, None)
        return record

    def get(
        self, collection: str, item_id: int, context: str | None = None
    ) -> tuple[RoyaltyEntry, ...]:
        """Record for the item, falling back from a sale context to the default."""
        if context is not None:
            record = self._records.get((collection, item_id, context))
            if record is not None:
                return record
        return self._records.get((collection, item_id, None), ())

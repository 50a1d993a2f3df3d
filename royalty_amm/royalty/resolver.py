"""Royalty resolution: turn a sale value into (recipient, amount) payments.

Resolution consults the internal RoyaltyTable unless an external resolver is
configured and marked trusted, in which case it is delegated. Whatever the
source, the payments may never add up to more than the sale value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from royalty_amm.constants import BPS_DENOMINATOR, ZERO_ADDRESS
from royalty_amm.errors import ErrorReason, InvariantViolation
from royalty_amm.models.types import normalize_address
from royalty_amm.royalty.table import RoyaltyMode, RoyaltyTable
from royalty_amm.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class RoyaltyPayment:
    recipient: str
    amount: int


NO_ROYALTY = RoyaltyPayment(recipient=ZERO_ADDRESS, amount=0)


@runtime_checkable
class ExternalRoyaltyResolver(Protocol):
    """Royalty lookup service (e.g. an on-chain royalty registry)."""

    def resolve(self, collection: str, item_id: int, sale_value: int) -> list[tuple[str, int]]:
        """Return (recipient, amount) pairs for a sale."""
        ...


class RoyaltyResolver:
    """Resolve royalty distributions from the internal table or a trusted delegate.

    Args:
        table: Internal royalty table. Its mode decides single vs multi recipient.
        delegate: Optional external resolver.
        delegate_trusted: Only a trusted delegate is consulted.
    """

    def __init__(
        self,
        table: RoyaltyTable | None = None,
        delegate: ExternalRoyaltyResolver | None = None,
        delegate_trusted: bool = False,
    ) -> None:
        self.table = table if table is not None else RoyaltyTable()
        self.delegate = delegate
        self.delegate_trusted = delegate_trusted

    @property
    def mode(self) -> RoyaltyMode:
        return self.table.mode

    def configure_delegate(self, delegate: ExternalRoyaltyResolver | None, trusted: bool) -> None:
        self.delegate = delegate
        self.delegate_trusted = trusted and delegate is not None

    def resolve(
        self,
        collection: str,
        item_id: int,
        sale_value: int,
        context: str | None = None,
    ) -> list[RoyaltyPayment]:
        """Royalty payments owed on a sale of sale_value.

        Returns:
            Non-null payments, or [NO_ROYALTY] when nobody is owed anything

        Raises:
            InvariantViolation: If the payments exceed the sale value
        """
        if self.delegate is not None and self.delegate_trusted:
            raw = [
                (normalize_address(recipient), int(amount))
                for recipient, amount in self.delegate.resolve(collection, item_id, sale_value)
            ]
            source = "delegate"
        else:
            raw = [
                (entry.recipient, S(sale_value).mul_div(entry.basis_points, BPS_DENOMINATOR).value)
                for entry in self.table.get(collection, item_id, context)
            ]
            source = "table"

        if self.mode is RoyaltyMode.SINGLE:
            raw = raw[:1]

        if any(amount < 0 for _, amount in raw):
            raise InvariantViolation(
                f"Negative royalty amount from {source}", ErrorReason.ROYALTY_EXCEEDS_SALE
            )
        total = sum(amount for _, amount in raw)
        if total > sale_value:
            raise InvariantViolation(
                f"Royalties {total} exceed sale value {sale_value} ({source})",
                ErrorReason.ROYALTY_EXCEEDS_SALE,
            )

        payments = [RoyaltyPayment(r, a) for r, a in raw if r != ZERO_ADDRESS]
        if not payments:
            return [NO_ROYALTY]

        logger.debug(
            "royalty_resolved",
            collection=collection[-8:],
            item_id=item_id,
            sale_value=sale_value,
            source=source,
            recipients=len(payments),
            total=total,
        )
        return payments

    def royalty_info(self, collection: str, item_id: int, sale_value: int) -> tuple[str, int]:
        """Single-recipient view: the first beneficiary and their amount."""
        first = self.resolve(collection, item_id, sale_value)[0]
        return first.recipient, first.amount

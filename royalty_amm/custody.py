"""Custody collaborators: currency transfers, item ownership, price history.

The engine only talks to custody through these Protocols. Every transfer is
all-or-nothing and reports success as a bool. InMemoryCustody is a complete
ledger-backed implementation used by the HTTP service and the tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import structlog

from royalty_amm.constants import BPS_DENOMINATOR

logger = structlog.get_logger()

_MISSING = object()


@runtime_checkable
class CurrencyCustody(Protocol):
    """Native and token-style currency transfers."""

    def balance_of(self, currency: str, account: str) -> int: ...

    def transfer(self, currency: str, sender: str, recipient: str, amount: int) -> bool:
        """Move amount of currency from sender to recipient."""
        ...


@runtime_checkable
class ItemCustody(Protocol):
    """Non-fungible item ownership transfers."""

    def owner_of(self, collection: str, item_id: int) -> str | None: ...

    def transfer_item(self, collection: str, sender: str, recipient: str, item_id: int) -> bool:
        """Move item_id from sender (who must own it) to recipient."""
        ...


@runtime_checkable
class SupportsRollback(Protocol):
    """Custody that can roll back alongside the engine.

    begin() opens a journal, commit() discards it and rollback() undoes every
    change made since begin().
    """

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@runtime_checkable
class SupportsMint(Protocol):
    """Custody that can create currency and items, for seeding a service."""

    def mint(self, currency: str, account: str, amount: int) -> None: ...

    def mint_item(self, collection: str, item_id: int, owner: str) -> None: ...


@runtime_checkable
class PriceRecorder(Protocol):
    """Fire-and-forget sink for swap price and volume."""

    def record(self, collection: str, currency: str, price: int, volume: int) -> None: ...


@dataclass
class InMemoryCustody:
    """Dictionary-backed currency balances and item owners.

    Attributes:
        balances: (currency, account) -> balance
        owners: (collection, item_id) -> owner
        transfer_tax_bps: Per-currency tax withheld from every transfer, for
            modelling fee-on-transfer tokens
    """

    balances: dict[tuple[str, str], int] = field(default_factory=dict)
    owners: dict[tuple[str, int], str] = field(default_factory=dict)
    transfer_tax_bps: dict[str, int] = field(default_factory=dict)
    _journal: list[tuple[dict[Any, Any], Any, Any]] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def balance_of(self, currency: str, account: str) -> int:
        return self.balances.get((currency, account), 0)

    def mint(self, currency: str, account: str, amount: int) -> None:
        """Credit amount of currency to account out of thin air."""
        self._set(self.balances, (currency, account), self.balance_of(currency, account) + amount)

    def transfer(self, currency: str, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0:
            return False
        balance = self.balance_of(currency, sender)
        if balance < amount:
            logger.debug(
                "transfer_insufficient_balance",
                currency=currency[-8:],
                sender=sender[-8:],
                balance=balance,
                amount=amount,
            )
            return False
        received = amount - amount * self.transfer_tax_bps.get(currency, 0) // BPS_DENOMINATOR
        self._set(self.balances, (currency, sender), balance - amount)
        self._set(
            self.balances, (currency, recipient), self.balance_of(currency, recipient) + received
        )
        return True

    def owner_of(self, collection: str, item_id: int) -> str | None:
        return self.owners.get((collection, item_id))

    def mint_item(self, collection: str, item_id: int, owner: str) -> None:
        self._set(self.owners, (collection, item_id), owner)

    def transfer_item(self, collection: str, sender: str, recipient: str, item_id: int) -> bool:
        if self.owners.get((collection, item_id)) != sender:
            return False
        self._set(self.owners, (collection, item_id), recipient)
        return True

    # --- Undo journal ---

    def begin(self) -> None:
        self._journal = []

    def commit(self) -> None:
        self._journal = None

    def rollback(self) -> None:
        journal, self._journal = self._journal or [], None
        for mapping, key, prior in reversed(journal):
            if prior is _MISSING:
                mapping.pop(key, None)
            else:
                mapping[key] = prior

    @property
    def pending_changes(self) -> int:
        return len(self._journal) if self._journal is not None else 0

    def _set(self, mapping: dict[Any, Any], key: Any, value: Any) -> None:
        if self._journal is not None:
            self._journal.append((mapping, key, mapping.get(key, _MISSING)))
        mapping[key] = value

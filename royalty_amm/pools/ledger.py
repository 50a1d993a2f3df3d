"""Reserve ledger: the single source of truth for one pool's balances.

Mutators go through SafeInt so an overdraw raises instead of leaving a
negative balance, and credits are bounded to uint256. The registry opens an
undo journal on the ledger before each operation (begin) and rolls it back on
failure, so a raise from here never leaves partial state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from royalty_amm.errors import ErrorReason, InsufficientShares, InvariantViolation
from royalty_amm.pools.inventory import ItemInventory
from royalty_amm.safe_int import S, SafeInt, Uint256Overflow, Underflow

PoolKey = tuple[str, str]


@dataclass
class _Journal:
    """Pre-operation scalars and the prior value of each touched position."""

    currency_reserve: int
    accumulated_fees: int
    total_shares: int
    positions: dict[str, int | None] = field(default_factory=dict)


def _bounded(amount: SafeInt, what: str) -> int:
    try:
        return amount.to_uint256()
    except Uint256Overflow as err:
        raise InvariantViolation(f"{what} out of range: {err}") from err


@dataclass
class PoolLedger:
    """Balances, share supply and item inventory of a (collection, currency) pool."""

    collection: str
    currency: str
    currency_reserve: int = 0
    accumulated_fees: int = 0
    total_shares: int = 0
    provider_shares: dict[str, int] = field(default_factory=dict)
    inventory: ItemInventory = field(default_factory=ItemInventory)
    _journal: _Journal | None = field(default=None, init=False, repr=False, compare=False)

    @property
    def key(self) -> PoolKey:
        return (self.collection, self.currency)

    @property
    def item_reserve_count(self) -> int:
        return len(self.inventory)

    def shares_of(self, provider: str) -> int:
        return self.provider_shares.get(provider, 0)

    # --- Undo journal ---

    def begin(self) -> None:
        """Start journaling changes to this ledger and its inventory."""
        self._journal = _Journal(self.currency_reserve, self.accumulated_fees, self.total_shares)
        self.inventory.begin()

    def commit(self) -> None:
        self._journal = None
        self.inventory.commit()

    def rollback(self) -> None:
        """Restore the state recorded at begin()."""
        journal, self._journal = self._journal, None
        if journal is not None:
            self.currency_reserve = journal.currency_reserve
            self.accumulated_fees = journal.accumulated_fees
            self.total_shares = journal.total_shares
            for provider, prior in journal.positions.items():
                if prior is None:
                    del self.provider_shares[provider]
                else:
                    self.provider_shares[provider] = prior
        self.inventory.rollback()

    def _remember_position(self, provider: str) -> None:
        if self._journal is not None and provider not in self._journal.positions:
            self._journal.positions[provider] = self.provider_shares.get(provider)

    # --- Reserve and fee pool ---

    def credit_reserve(self, amount: int) -> None:
        self.currency_reserve = _bounded(S(self.currency_reserve) + amount, "Reserve")

    def debit_reserve(self, amount: int) -> None:
        try:
            self.currency_reserve = (S(self.currency_reserve) - amount).value
        except Underflow as err:
            raise InvariantViolation(f"Reserve overdraw: {err}") from err

    def credit_fees(self, amount: int) -> None:
        self.accumulated_fees = _bounded(S(self.accumulated_fees) + amount, "Fee pool")

    def debit_fees(self, amount: int) -> None:
        try:
            self.accumulated_fees = (S(self.accumulated_fees) - amount).value
        except Underflow as err:
            raise InvariantViolation(f"Fee pool overdraw: {err}") from err

    # --- Shares ---

    def mint_shares(self, provider: str, amount: int) -> None:
        total = _bounded(S(self.total_shares) + amount, "Share supply")
        self._remember_position(provider)
        self.provider_shares[provider] = self.shares_of(provider) + amount
        self.total_shares = total

    def burn_shares(self, provider: str, amount: int) -> None:
        held = self.shares_of(provider)
        if amount > held:
            raise InsufficientShares(
                f"Provider {provider} holds {held} shares, cannot burn {amount}"
            )
        try:
            total = (S(self.total_shares) - amount).value
        except Underflow as err:
            raise InvariantViolation(f"Share supply underflow: {err}") from err
        self._remember_position(provider)
        # Zeroed positions stay in the map; the provider keeps their slot
        self.provider_shares[provider] = held - amount
        self.total_shares = total

    # --- Invariants ---

    def check_invariants(self) -> None:
        """Full scan. Raise InvariantViolation if the ledger is inconsistent."""
        self._check_balances()
        if any(amount < 0 for amount in self.provider_shares.values()):
            raise InvariantViolation(f"Negative provider position in pool {self.key}")
        if sum(self.provider_shares.values()) != self.total_shares:
            raise InvariantViolation(
                f"Provider shares sum {sum(self.provider_shares.values())} "
                f"!= total shares {self.total_shares}"
            )
        if not self.inventory.is_consistent():
            raise InvariantViolation(
                f"Item index inconsistent in pool {self.key}", ErrorReason.INVARIANT_VIOLATION
            )

    def check_touched(self) -> None:
        """Check only what changed since begin().

        The share sum is verified by delta: the change in total supply must
        equal the change across the touched positions.
        """
        self._check_balances()
        journal = self._journal
        if journal is not None:
            delta = 0
            for provider, prior in journal.positions.items():
                current = self.shares_of(provider)
                if current < 0:
                    raise InvariantViolation(f"Negative provider position in pool {self.key}")
                delta += current - (prior or 0)
            if delta != self.total_shares - journal.total_shares:
                raise InvariantViolation(
                    f"Provider share change {delta} != total share change "
                    f"{self.total_shares - journal.total_shares}"
                )
        if not self.inventory.touched_consistent():
            raise InvariantViolation(
                f"Item index inconsistent in pool {self.key}", ErrorReason.INVARIANT_VIOLATION
            )

    def _check_balances(self) -> None:
        if self.currency_reserve < 0 or self.accumulated_fees < 0 or self.total_shares < 0:
            raise InvariantViolation(f"Negative balance in pool {self.key}")

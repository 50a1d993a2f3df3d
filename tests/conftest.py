"""Pytest configuration and fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from royalty_amm.custody import InMemoryCustody
from royalty_amm.pools import PoolRegistry
from tests.helpers import make_engine

# =============================================================================
# Mock collaborators
# =============================================================================


class MockPriceRecorder:
    """Price recorder that remembers every notification.

    Usage:
        recorder = MockPriceRecorder()
        recorder = MockPriceRecorder(fail=True)  # raises on every record
    """

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.records: list[tuple[str, str, int, int]] = []

    def record(self, collection: str, currency: str, price: int, volume: int) -> None:
        if self.fail:
            raise RuntimeError("Price history unavailable")
        self.records.append((collection, currency, price, volume))


class MockRoyaltyResolver:
    """External royalty resolver returning a fixed distribution.

    Usage:
        resolver = MockRoyaltyResolver([(ARTIST, 50)])
    """

    def __init__(self, payments: list[tuple[str, int]]) -> None:
        self.payments = payments
        self.calls: list[tuple[str, int, int]] = []

    def resolve(self, collection: str, item_id: int, sale_value: int) -> list[tuple[str, int]]:
        self.calls.append((collection, item_id, sale_value))
        return list(self.payments)


@dataclass
class HookedCustody(InMemoryCustody):
    """In-memory custody that runs a callback on every currency transfer.

    Used to simulate a recipient re-entering the engine mid-operation, or a
    transfer that fails for a specific recipient.
    """

    on_transfer: Callable[[str, str, str, int], None] | None = None
    refuse_recipients: set[str] = field(default_factory=set)

    def transfer(self, currency: str, sender: str, recipient: str, amount: int) -> bool:
        if recipient in self.refuse_recipients:
            return False
        ok = super().transfer(currency, sender, recipient, amount)
        if ok and self.on_transfer is not None:
            self.on_transfer(currency, sender, recipient, amount)
        return ok


@dataclass
class FlakyJournalCustody(InMemoryCustody):
    """In-memory custody whose begin() raises for the next `failures` calls."""

    failures: int = 0

    def begin(self) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("Custody journal unavailable")
        super().begin()


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def engine_and_custody() -> tuple[PoolRegistry, InMemoryCustody]:
    """Engine at 300 bps over fresh in-memory custody."""
    return make_engine(swap_fee_bps=300)


@pytest.fixture
def engine(engine_and_custody) -> PoolRegistry:
    return engine_and_custody[0]


@pytest.fixture
def custody(engine_and_custody) -> InMemoryCustody:
    return engine_and_custody[1]


@pytest.fixture
def price_recorder() -> MockPriceRecorder:
    return MockPriceRecorder()


@pytest.fixture
def hooked_custody() -> HookedCustody:
    return HookedCustody()

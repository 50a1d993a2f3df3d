"""Test helpers module for shared test utilities.

- constants: collection, currency and account addresses
- factories: engine and pool factory functions
"""

from tests.helpers.constants import (
    ADMIN,
    ALICE,
    APES,
    ARTIST,
    BOB,
    CAROL,
    ENGINE,
    NATIVE,
    NULL,
    PUNKS,
    STUDIO,
    USDC,
)
from tests.helpers.factories import fund, give_items, make_engine, seed_pool

__all__ = [
    # Constants
    "ADMIN",
    "ALICE",
    "APES",
    "ARTIST",
    "BOB",
    "CAROL",
    "ENGINE",
    "NATIVE",
    "NULL",
    "PUNKS",
    "STUDIO",
    "USDC",
    # Factories
    "make_engine",
    "seed_pool",
    "fund",
    "give_items",
]

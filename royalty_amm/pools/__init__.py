"""Pool management package.

Provides PoolRegistry, the engine that owns every (collection, currency) pool.
"""

from .inventory import ItemInventory
from .ledger import PoolKey, PoolLedger
from .registry import (
    BatchSellResult,
    BuyResult,
    CollectionStats,
    PoolInfo,
    PoolRegistry,
    PriceQuote,
    RoyaltyCredit,
    SellResult,
)
from .shares import Withdrawal

__all__ = [
    "PoolRegistry",
    "PoolLedger",
    "PoolKey",
    "ItemInventory",
    "Withdrawal",
    "PoolInfo",
    "PriceQuote",
    "SellResult",
    "BuyResult",
    "BatchSellResult",
    "RoyaltyCredit",
    "CollectionStats",
]

"""Royalty AMM - pooled liquidity for non-fungible items."""

from royalty_amm.config import EngineConfig
from royalty_amm.custody import InMemoryCustody
from royalty_amm.pools import PoolRegistry

__version__ = "0.1.0"
__all__ = ["PoolRegistry", "EngineConfig", "InMemoryCustody", "__version__"]

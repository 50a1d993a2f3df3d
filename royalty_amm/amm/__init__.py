"""Pricing for the discrete-inventory AMM."""

from royalty_amm.amm.pricing import (
    BatchSellQuote,
    BuyQuote,
    DiscreteInventoryPricing,
    SellQuote,
    validate_fee_bps,
)

__all__ = [
    "DiscreteInventoryPricing",
    "SellQuote",
    "BuyQuote",
    "BatchSellQuote",
    "validate_fee_bps",
]

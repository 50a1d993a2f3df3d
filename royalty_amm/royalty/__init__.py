"""Royalty tables and resolution."""

from .resolver import NO_ROYALTY, ExternalRoyaltyResolver, RoyaltyPayment, RoyaltyResolver
from .table import RoyaltyEntry, RoyaltyMode, RoyaltyTable

__all__ = [
    "RoyaltyResolver",
    "ExternalRoyaltyResolver",
    "RoyaltyPayment",
    "NO_ROYALTY",
    "RoyaltyTable",
    "RoyaltyEntry",
    "RoyaltyMode",
]

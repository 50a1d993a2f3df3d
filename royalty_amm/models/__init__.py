"""Pydantic models and shared types."""

from royalty_amm.models.types import (
    Address,
    ItemId,
    Uint256,
    is_valid_address,
    normalize_address,
    require_address,
)

__all__ = [
    "Address",
    "ItemId",
    "Uint256",
    "normalize_address",
    "is_valid_address",
    "require_address",
]

"""Shared type definitions for engine and API models."""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, PlainSerializer

from royalty_amm.constants import ZERO_ADDRESS
from royalty_amm.errors import ErrorReason, PreconditionError

# Maximum uint256 value
UINT256_MAX = 2**256 - 1


def validate_uint256(value: Any) -> int:
    """Validate that a value is a non-negative integer within uint256 range.

    Accepts ints and decimal strings (large amounts are often sent as strings).

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 cannot be a boolean")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return value


# Ethereum-style address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer, accepted as int or decimal string, emitted as decimal string
Uint256 = Annotated[
    int,
    BeforeValidator(validate_uint256),
    PlainSerializer(str, return_type=str, when_used="json"),
    Field(description="256-bit unsigned integer"),
]

# Item identifier within a collection
ItemId = Annotated[int, Field(ge=0, le=UINT256_MAX)]


def normalize_address(address: str) -> str:
    """Normalize an address to lowercase with 0x prefix."""
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def require_address(name: str, address: str, *, allow_zero: bool = False) -> str:
    """Validate and normalize an address argument.

    Args:
        name: Argument name (for error messages)
        address: The address to validate
        allow_zero: Accept the zero address (native currency)

    Returns:
        The normalized address

    Raises:
        PreconditionError: If the address is malformed, or zero when not allowed
    """
    addr = normalize_address(address) if isinstance(address, str) else address
    if not is_valid_address(addr):
        raise PreconditionError(f"Invalid {name} address: {address}", ErrorReason.ZERO_ADDRESS)
    if not allow_zero and addr == ZERO_ADDRESS:
        raise PreconditionError(f"{name} cannot be the zero address", ErrorReason.ZERO_ADDRESS)
    return addr

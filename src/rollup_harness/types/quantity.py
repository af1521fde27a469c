"""
Hex-encoded integers ("quantities") as used by the Ethereum JSON-RPC API.

Quantities are `0x`-prefixed, lowercase, with no leading zeros:
`0x0`, `0x41`, `0x400`. Rollup node endpoints send plain JSON numbers
instead, so the parser accepts both.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, PlainSerializer

UINT64_MAX = 2**64 - 1
"""Largest block number or nonce a node can report."""


def parse_quantity(value: Any) -> int:
    """
    Parse a JSON-RPC quantity.

    Args:
        value: A `0x` hex string, a decimal string, or an int.

    Returns:
        The non-negative integer value.

    Raises:
        ValueError: If the value is malformed or negative.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a quantity: {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("0x"):
            if len(text) == 2:
                raise ValueError(f"Empty hex quantity: {value!r}")
            result = int(text, 16)
        else:
            result = int(text, 10)
    else:
        raise ValueError(f"Not a quantity: {value!r}")

    if result < 0:
        raise ValueError(f"Quantity must be non-negative, got {result}")
    return result


def to_quantity(value: int) -> str:
    """Encode a non-negative integer as a JSON-RPC quantity."""
    if value < 0:
        raise ValueError(f"Quantity must be non-negative, got {value}")
    return hex(value)


Quantity = Annotated[
    int,
    BeforeValidator(parse_quantity),
    PlainSerializer(to_quantity, return_type=str),
]
"""Integer field read from and written to JSON as a hex quantity."""


def _check_uint64(value: int) -> int:
    if value > UINT64_MAX:
        raise ValueError(f"{value} exceeds uint64")
    return value


Uint64 = Annotated[int, BeforeValidator(parse_quantity), AfterValidator(_check_uint64)]
"""Integer field that must fit a node's unsigned 64-bit counter."""

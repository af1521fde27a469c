"""
Fixed-length byte types.

Hashes and addresses travel over JSON-RPC as `0x`-prefixed hex strings
but are compared as raw bytes. These types accept either form and keep
the length invariant.
"""

from __future__ import annotations

from typing import Any, ClassVar, Iterable, Self, SupportsIndex

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema


def _coerce_to_bytes(value: Any) -> bytes:
    """
    Coerce a variety of inputs to raw bytes.

    Accepts:
      - `bytes` / `bytearray` (returned as immutable `bytes`)
      - Iterables of integers in [0, 255]
      - Hex strings, with or without a '0x' prefix (e.g. "0xdeadbeef" or "deadbeef")
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return bytes.fromhex(value.removeprefix("0x"))
    if isinstance(value, Iterable):
        return bytes(bytearray(value))
    return bytes(value)


class BaseBytes(bytes):
    """
    A base class for fixed-length byte types that inherits from `bytes`.

    Subclasses set `LENGTH`, the exact number of bytes an instance holds.
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Create and validate a new instance.

        Raises:
            ValueError: If the resulting byte length differs from `LENGTH`.
        """
        if not hasattr(cls, "LENGTH"):
            raise TypeError(f"{cls.__name__} must define LENGTH")

        b = _coerce_to_bytes(value)
        if len(b) != cls.LENGTH:
            raise ValueError(f"{cls.__name__} expects exactly {cls.LENGTH} bytes, got {len(b)}")
        return super().__new__(cls, b)

    @classmethod
    def zero(cls) -> Self:
        """Create a new zero-filled instance."""
        return cls(b"\x00" * cls.LENGTH)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        Instances pass through untouched; hex strings and raw bytes are
        coerced through the constructor. Serialization emits `0x` hex, the
        form JSON-RPC expects.
        """
        return core_schema.union_schema(
            [
                core_schema.is_instance_schema(cls),
                core_schema.no_info_plain_validator_function(cls),
            ],
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda x: x.to_hex()
            ),
        )

    def __repr__(self) -> str:
        """Return a string representation of the bytes."""
        return f"{type(self).__name__}({self.to_hex()})"

    def __str__(self) -> str:
        """Render as `0x` hex, matching how clients print hashes."""
        return self.to_hex()

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return hash((type(self), bytes(self)))

    def hex(self, sep: str | bytes | None = None, bytes_per_sep: SupportsIndex = 1) -> str:
        """Return the hexadecimal string representation of the underlying bytes."""
        return bytes(self).hex() if sep is None else bytes(self).hex(sep, bytes_per_sep)

    def to_hex(self) -> str:
        """Return the `0x`-prefixed hex string used on the wire."""
        return "0x" + bytes(self).hex()

    def terminal_string(self) -> str:
        """
        Abbreviated form for log lines: first and last three bytes.

        Example: `0xab12cd..ef3456` renders as `ab12cd..ef3456`.
        """
        raw = bytes(self)
        return f"{raw[:3].hex()}..{raw[-3:].hex()}"


class Bytes20(BaseBytes):
    """Fixed-size byte array of exactly 20 bytes (an account address)."""

    LENGTH = 20


class Bytes32(BaseBytes):
    """Fixed-size byte array of exactly 32 bytes (a block or transaction hash)."""

    LENGTH = 32


Address = Bytes20
"""Execution-layer account address."""

Hash32 = Bytes32
"""Keccak-256 digest identifying a block or transaction."""

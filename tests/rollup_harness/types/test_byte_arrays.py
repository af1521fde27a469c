"""Tests for fixed-length byte types."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from rollup_harness.types import Address, Bytes20, Bytes32


class TestConstruction:
    """Tests for building byte arrays from raw and hex input."""

    def test_from_hex_with_prefix(self) -> None:
        """0x-prefixed hex is decoded."""
        value = Bytes32("0x" + "ab" * 32)
        assert bytes(value) == b"\xab" * 32

    def test_from_hex_without_prefix(self) -> None:
        """Bare hex is decoded."""
        assert Bytes20("11" * 20) == Bytes20(b"\x11" * 20)

    def test_wrong_length_rejected(self) -> None:
        """The length invariant is enforced."""
        with pytest.raises(ValueError, match="exactly 32 bytes"):
            Bytes32(b"\x00" * 31)

    def test_zero(self) -> None:
        """zero() is all zero bytes."""
        assert Bytes32.zero() == Bytes32(b"\x00" * 32)

    def test_address_is_bytes20(self) -> None:
        """Address is an alias of Bytes20."""
        assert Address is Bytes20


class TestRendering:
    """Tests for string forms."""

    def test_str_is_prefixed_hex(self) -> None:
        """str() matches how clients print hashes."""
        assert str(Bytes20(b"\x01" * 20)) == "0x" + "01" * 20

    def test_hex_is_unprefixed(self) -> None:
        """hex() keeps the bytes.hex() contract."""
        assert Bytes20(b"\x01" * 20).hex() == "01" * 20

    def test_terminal_string(self) -> None:
        """Abbreviated form keeps the first and last three bytes."""
        value = Bytes32(bytes(range(32)))
        assert value.terminal_string() == "000102..1d1e1f"


class TestPydantic:
    """Tests for use as pydantic fields."""

    class Holder(BaseModel):
        """Model with a hash field."""

        hash: Bytes32

    def test_validates_hex_string(self) -> None:
        """A hex string from JSON becomes a Bytes32."""
        holder = self.Holder.model_validate({"hash": "0x" + "00" * 31 + "01"})
        assert isinstance(holder.hash, Bytes32)
        assert holder.hash[-1] == 1

    def test_serializes_as_hex(self) -> None:
        """JSON output is 0x hex."""
        holder = self.Holder(hash=Bytes32.zero())
        assert holder.model_dump(mode="json") == {"hash": "0x" + "00" * 32}

    def test_rejects_wrong_length(self) -> None:
        """Length errors surface as validation errors."""
        with pytest.raises(ValueError):
            self.Holder.model_validate({"hash": "0x1234"})

"""
Recursive Length Prefix (RLP) encoding for transaction payloads.

Only encoding is needed: the harness builds and signs transactions, it
never parses them back.

+-------------+-----------------------------------------------------------+
| Prefix      | Meaning                                                   |
+=============+===========================================================+
| [0x00-0x7f] | Single byte, value is the byte itself                     |
| [0x80-0xb7] | Short string (0-55 bytes), length = prefix - 0x80         |
| [0xb8-0xbf] | Long string (>55 bytes), prefix - 0xb7 = length of length |
| [0xc0-0xf7] | Short list (0-55 bytes payload), length = prefix - 0xc0   |
| [0xf8-0xff] | Long list (>55 bytes payload), prefix - 0xf7 = len of len |
+-------------+-----------------------------------------------------------+
"""

from __future__ import annotations

from typing import TypeAlias

RLPItem: TypeAlias = bytes | int | list["RLPItem"]
"""Byte string, non-negative integer (encoded big-endian, minimal), or list."""

SINGLE_BYTE_MAX = 0x7F
SHORT_STRING_PREFIX = 0x80
LONG_STRING_BASE = 0xB7
SHORT_LIST_PREFIX = 0xC0
LONG_LIST_BASE = 0xF7
SHORT_MAX_LEN = 55


def encode_rlp(item: RLPItem) -> bytes:
    """
    Encode an item using RLP.

    Integers are scalars: zero encodes as the empty string, anything else
    as its minimal big-endian byte string.

    Raises:
        TypeError: If item is not bytes, int or list.
        ValueError: If an integer is negative.
    """
    # bool is an int subclass and would silently encode as 0/1.
    if isinstance(item, bool):
        raise TypeError("Cannot RLP encode type: bool")
    if isinstance(item, int):
        return _encode_bytes(int_to_big_endian(item))
    if isinstance(item, (bytes, bytearray)):
        return _encode_bytes(bytes(item))
    if isinstance(item, list):
        payload = b"".join(encode_rlp(elem) for elem in item)
        return _prefixed(payload, SHORT_LIST_PREFIX, LONG_LIST_BASE)
    raise TypeError(f"Cannot RLP encode type: {type(item).__name__}")


def int_to_big_endian(value: int) -> bytes:
    """Minimal big-endian encoding; zero is the empty string."""
    if value < 0:
        raise ValueError(f"Cannot RLP encode negative integer {value}")
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def _encode_bytes(data: bytes) -> bytes:
    if len(data) == 1 and data[0] <= SINGLE_BYTE_MAX:
        return data
    return _prefixed(data, SHORT_STRING_PREFIX, LONG_STRING_BASE)


def _prefixed(payload: bytes, short_prefix: int, long_base: int) -> bytes:
    length = len(payload)
    if length <= SHORT_MAX_LEN:
        return bytes([short_prefix + length]) + payload
    length_bytes = int_to_big_endian(length)
    return bytes([long_base + len(length_bytes)]) + length_bytes + payload

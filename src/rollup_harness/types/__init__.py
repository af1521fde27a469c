"""Value types shared by the RPC clients and the harness."""

from .base import CamelModel, StrictBaseModel, WireModel
from .block import BlockHeader, BlockID, L1BlockRef, L2BlockRef, SyncStatus
from .byte_arrays import Address, BaseBytes, Bytes20, Bytes32, Hash32
from .quantity import UINT64_MAX, Quantity, Uint64, parse_quantity, to_quantity
from .rlp import RLPItem, encode_rlp

__all__ = [
    # Base models
    "CamelModel",
    "StrictBaseModel",
    "WireModel",
    # Blocks and sync status
    "BlockHeader",
    "BlockID",
    "L1BlockRef",
    "L2BlockRef",
    "SyncStatus",
    # Byte arrays
    "Address",
    "BaseBytes",
    "Bytes20",
    "Bytes32",
    "Hash32",
    # Quantities
    "UINT64_MAX",
    "Quantity",
    "Uint64",
    "parse_quantity",
    "to_quantity",
    # RLP
    "RLPItem",
    "encode_rlp",
]

"""
Block identifiers and node sync status snapshots.

These are value types: produced by RPC clients, never mutated.
"""

from __future__ import annotations

from pydantic import Field

from .base import CamelModel, WireModel
from .byte_arrays import Bytes32
from .quantity import Quantity, Uint64


class BlockID(WireModel):
    """A block height paired with the hash a node holds at that height."""

    number: Uint64
    """Block height."""

    hash: Bytes32
    """Block hash at that height."""

    def terminal_string(self) -> str:
        """Short form for log lines, e.g. `ab12cd..ef3456:42`."""
        return f"{self.hash.terminal_string()}:{self.number}"


class L1BlockRef(CamelModel):
    """Reference to a block as reported by the rollup node."""

    hash: Bytes32
    number: Uint64
    parent_hash: Bytes32
    timestamp: Uint64

    def id(self) -> BlockID:
        """Drop everything but the (number, hash) identity."""
        return BlockID(number=self.number, hash=self.hash)

    def terminal_string(self) -> str:
        """Short form for log lines."""
        return self.id().terminal_string()


class L2BlockRef(L1BlockRef):
    """
    Reference to a rollup block.

    Carries the L1 origin it was derived from and its position within the
    sequencing epoch.
    """

    l1origin: BlockID | None = Field(default=None, alias="l1origin")
    sequence_number: Uint64 = 0


class SyncStatus(WireModel):
    """
    Snapshot of a rollup node's view of both chains.

    Re-fetched on every poll; has no identity beyond the poll that produced it.
    Keys are snake_case on the wire (`unsafe_l2`, `safe_l2`, ...).
    """

    current_l1: L1BlockRef
    """L1 block the derivation pipeline is currently processing."""

    head_l1: L1BlockRef
    """Latest L1 block the node has seen."""

    safe_l1: L1BlockRef | None = None
    finalized_l1: L1BlockRef | None = None

    unsafe_l2: L2BlockRef
    """Most recent L2 block seen, possibly only via gossip."""

    safe_l2: L2BlockRef
    """Latest L2 block derived from data posted to L1."""

    finalized_l2: L2BlockRef
    """Latest L2 block derived from finalized L1 data."""

    def log_fields(self) -> dict[str, str]:
        """The five heads in the order they are logged."""
        return {
            "currentL1": self.current_l1.terminal_string(),
            "headL1": self.head_l1.terminal_string(),
            "finalizedL2": self.finalized_l2.terminal_string(),
            "safeL2": self.safe_l2.terminal_string(),
            "unsafeL2": self.unsafe_l2.terminal_string(),
        }


class BlockHeader(CamelModel):
    """The subset of an execution block the harness compares."""

    number: Quantity
    hash: Bytes32
    parent_hash: Bytes32
    timestamp: Quantity

    def id(self) -> BlockID:
        """The (number, hash) identity of this block."""
        return BlockID(number=self.number, hash=self.hash)

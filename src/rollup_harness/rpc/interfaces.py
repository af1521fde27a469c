"""
Client protocols the harness is written against.

The harness only needs a handful of calls from each node. Expressing them
as protocols lets the concrete JSON-RPC clients and in-memory test doubles
be used interchangeably.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from rollup_harness.types import Address, BlockHeader, Hash32, SyncStatus

if TYPE_CHECKING:
    from rollup_harness.wallet.transaction import SignedTransaction

    from .execution import Receipt, TransactionInfo


class ExecutionApi(Protocol):
    """Execution-layer calls used for load generation and canonical checks."""

    async def chain_id(self) -> int:
        """Chain id the node serves."""
        ...

    async def block_by_number(self, number: int | None = None) -> BlockHeader | None:
        """
        Block at `number`, or the current head when `number` is None.

        Returns None when the node has no block at that height.
        """
        ...

    async def nonce_at(self, address: Address) -> int:
        """Next nonce for `address` at the latest block."""
        ...

    async def send_transaction(self, tx: SignedTransaction) -> Hash32:
        """Submit a signed transaction; returns its hash."""
        ...

    async def transaction_by_hash(self, tx_hash: Hash32) -> tuple[TransactionInfo, bool] | None:
        """The transaction and whether it is still pending, or None if unknown."""
        ...

    async def transaction_receipt(self, tx_hash: Hash32) -> Receipt | None:
        """Receipt of a mined transaction, or None while it is not mined."""
        ...


class RollupApi(Protocol):
    """Rollup node calls used for convergence and consistency checks."""

    async def sync_status(self) -> SyncStatus:
        """Current sync status snapshot."""
        ...


class PeerApi(Protocol):
    """Rollup node p2p admin calls used to build the mesh."""

    async def connect_peer(self, address: str) -> None:
        """Dial `address`; raises on failure."""
        ...

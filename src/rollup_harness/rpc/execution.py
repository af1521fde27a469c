"""Execution engine JSON-RPC client (`eth_` namespace)."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Final, TypeVar

from pydantic import ValidationError

from rollup_harness.errors import ReceiptError, TransportError
from rollup_harness.types import Address, BlockHeader, Bytes32, CamelModel, Hash32, Quantity
from rollup_harness.types.quantity import parse_quantity, to_quantity

from .transport import JsonRpcTransport

if TYPE_CHECKING:
    from rollup_harness.wallet.transaction import SignedTransaction

    from .interfaces import ExecutionApi

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=CamelModel)

RECEIPT_STATUS_SUCCESSFUL: Final = 1
"""Receipt status of a transaction that executed without reverting."""

RECEIPT_POLL_INTERVAL: Final[float] = 0.1
"""Seconds between receipt polls."""


class TransactionInfo(CamelModel):
    """The fields of `eth_getTransactionByHash` the harness reads."""

    hash: Bytes32
    nonce: Quantity
    block_hash: Bytes32 | None = None
    block_number: Quantity | None = None

    @property
    def is_pending(self) -> bool:
        """A transaction is pending until it is included in a block."""
        return self.block_hash is None


class Receipt(CamelModel):
    """The fields of `eth_getTransactionReceipt` the harness reads."""

    transaction_hash: Bytes32
    block_hash: Bytes32
    block_number: Quantity
    status: Quantity
    gas_used: Quantity = 0

    @property
    def succeeded(self) -> bool:
        """Whether the transaction executed without reverting."""
        return self.status == RECEIPT_STATUS_SUCCESSFUL


class ExecutionClient:
    """Typed wrapper over an execution engine's JSON-RPC endpoint."""

    def __init__(self, transport: JsonRpcTransport) -> None:
        self.transport = transport

    @property
    def node_index(self) -> int | None:
        """Index of the node this client talks to."""
        return self.transport.node_index

    def _decode(self, model: type[M], method: str, raw: object) -> M:
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            raise TransportError(
                f"{method}: malformed {model.__name__}: {exc}", node_index=self.node_index
            ) from exc

    def _quantity(self, method: str, raw: object) -> int:
        try:
            return parse_quantity(raw)
        except ValueError as exc:
            raise TransportError(
                f"{method}: malformed quantity: {exc}", node_index=self.node_index
            ) from exc

    async def chain_id(self) -> int:
        """Chain id the node serves."""
        return self._quantity("eth_chainId", await self.transport.call("eth_chainId"))

    async def block_by_number(self, number: int | None = None) -> BlockHeader | None:
        """
        Fetch a block header by height.

        Args:
            number: Height to fetch, or None for the latest block.

        Returns:
            The header, or None when the node has no block at that height.

        Raises:
            TransportError: If the latest block is requested and absent.
        """
        tag = "latest" if number is None else to_quantity(number)
        raw = await self.transport.call("eth_getBlockByNumber", tag, False)
        if raw is None:
            if number is None:
                raise TransportError(
                    "eth_getBlockByNumber: node returned no latest block",
                    node_index=self.node_index,
                )
            return None
        return self._decode(BlockHeader, "eth_getBlockByNumber", raw)

    async def nonce_at(self, address: Address) -> int:
        """Next nonce for `address` at the latest block."""
        raw = await self.transport.call("eth_getTransactionCount", address.to_hex(), "latest")
        return self._quantity("eth_getTransactionCount", raw)

    async def balance_at(self, address: Address) -> int:
        """Balance of `address` in wei at the latest block."""
        raw = await self.transport.call("eth_getBalance", address.to_hex(), "latest")
        return self._quantity("eth_getBalance", raw)

    async def send_transaction(self, tx: SignedTransaction) -> Hash32:
        """Submit a signed transaction; returns the hash the node assigned."""
        raw = await self.transport.call("eth_sendRawTransaction", "0x" + tx.raw.hex())
        try:
            tx_hash = Bytes32(raw)
        except (TypeError, ValueError) as exc:
            raise TransportError(
                f"eth_sendRawTransaction: malformed transaction hash {raw!r}",
                node_index=self.node_index,
            ) from exc
        if tx_hash != tx.hash:
            logger.warning("Node reported hash %s for transaction %s", tx_hash, tx.hash)
        return tx_hash

    async def transaction_by_hash(self, tx_hash: Hash32) -> tuple[TransactionInfo, bool] | None:
        """
        Look up a transaction.

        Returns:
            The transaction and whether it is still pending, or None if the
            node does not know it.
        """
        raw = await self.transport.call("eth_getTransactionByHash", tx_hash.to_hex())
        if raw is None:
            return None
        info = self._decode(TransactionInfo, "eth_getTransactionByHash", raw)
        return info, info.is_pending

    async def transaction_receipt(self, tx_hash: Hash32) -> Receipt | None:
        """Receipt of a mined transaction, or None while it is not mined."""
        raw = await self.transport.call("eth_getTransactionReceipt", tx_hash.to_hex())
        if raw is None:
            return None
        return self._decode(Receipt, "eth_getTransactionReceipt", raw)


async def wait_receipt_ok(
    client: ExecutionApi,
    tx_hash: Hash32,
    timeout: float,
    poll_interval: float = RECEIPT_POLL_INTERVAL,
) -> Receipt:
    """
    Wait until `tx_hash` is mined with a successful status.

    Args:
        client: Node to poll.
        tx_hash: Transaction to wait for.
        timeout: Maximum wait in seconds.
        poll_interval: Seconds between polls.

    Returns:
        The successful receipt.

    Raises:
        ReceiptError: If the receipt reports failure or does not appear in time.
        TransportError: If polling the node fails.
    """
    deadline = time.monotonic() + timeout

    while True:
        receipt = await client.transaction_receipt(tx_hash)
        if receipt is not None:
            if not receipt.succeeded:
                raise ReceiptError(
                    f"transaction {tx_hash} failed in block {receipt.block_number} "
                    f"(status {receipt.status})"
                )
            return receipt

        if time.monotonic() >= deadline:
            raise ReceiptError(f"no receipt for transaction {tx_hash} after {timeout:.1f}s")

        await asyncio.sleep(poll_interval)

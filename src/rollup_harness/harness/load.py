"""
Transaction load against the sequencer.

Keeps the sequencer producing non-empty blocks while replicas are being
checked. Each tick submits one transfer and waits for it to be mined.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Final

from rollup_harness import metrics
from rollup_harness.errors import HarnessError
from rollup_harness.rpc import ExecutionApi, Receipt, wait_receipt_ok
from rollup_harness.types import Address
from rollup_harness.wallet import ETHER, GWEI, TRANSFER_GAS, DynamicFeeTx, Vault, VaultError

from .aggregator import ErrorAggregator
from .ticker import Ticker

logger = logging.getLogger(__name__)

LOAD_VALUE: Final[int] = ETHER // 10_000
"""Wei moved by each load transaction (0.0001 ether)."""

LOAD_TIP_CAP: Final[int] = 1 * GWEI
LOAD_FEE_CAP: Final[int] = 2 * GWEI


@dataclass(slots=True)
class LoadGenerator:
    """Submits one funded transfer per tick and confirms it."""

    client: ExecutionApi
    """Sequencer execution client."""

    vault: Vault
    """Holds the sender's key."""

    sender: Address
    """Pre-funded account paying for the load."""

    recipient: Address
    """Account receiving each transfer."""

    tick_interval: float
    """Seconds between submissions."""

    receipt_timeout: float
    """Seconds to wait for each submission to be mined."""

    value: int = LOAD_VALUE
    max_priority_fee_per_gas: int = LOAD_TIP_CAP
    max_fee_per_gas: int = LOAD_FEE_CAP

    confirmed: int = field(default=0)
    """Transactions mined so far."""

    async def submit_once(self) -> Receipt:
        """
        Build, sign, submit and confirm one transfer.

        Raises:
            TransportError: If any RPC step fails or the receipt is bad.
            VaultError: If the vault does not hold the sender's key.
        """
        nonce = await self.client.nonce_at(self.sender)
        tx = DynamicFeeTx(
            chain_id=self.vault.chain_id,
            nonce=nonce,
            gas=TRANSFER_GAS,
            max_priority_fee_per_gas=self.max_priority_fee_per_gas,
            max_fee_per_gas=self.max_fee_per_gas,
            to=self.recipient,
            value=self.value,
        )
        signed = self.vault.sign_transaction(self.sender, tx)
        with metrics.receipt_wait_time.time():
            await self.client.send_transaction(signed)
            receipt = await wait_receipt_ok(self.client, signed.hash, self.receipt_timeout)
        self.confirmed += 1
        metrics.load_transactions.inc()
        logger.debug(
            "Load tx %s (nonce %d) mined in block %d", signed.hash, nonce, receipt.block_number
        )
        return receipt

    async def run(self, stop: asyncio.Event, aggregator: ErrorAggregator) -> None:
        """
        Submit until `stop` fires or a submission fails.

        A failure is reported once and ends the task. No retries.
        """
        ticker = Ticker(self.tick_interval, stop)
        while await ticker.wait():
            try:
                await self.submit_once()
            except HarnessError as exc:
                aggregator.report(exc)
                return
            except (VaultError, ValueError) as exc:
                aggregator.report(HarnessError(f"load generator: cannot sign transaction: {exc}"))
                return

        logger.info("Load generator stopped after %d transactions", self.confirmed)

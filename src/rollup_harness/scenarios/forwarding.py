"""
Transactions sent to a replica reach the sequencer.

A replica configured to forward transactions hands them to the sequencer
instead of including them itself. The scenario submits to replica 1 and
looks for the transaction on the sequencer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Final

from rollup_harness import metrics
from rollup_harness.config import RunConfig
from rollup_harness.devnet import Devnet
from rollup_harness.errors import HarnessError, TransportError
from rollup_harness.harness import RunResult
from rollup_harness.rpc import wait_receipt_ok
from rollup_harness.wallet import ETHER, GWEI, DynamicFeeTx

logger = logging.getLogger(__name__)

FORWARDING_GAS: Final[int] = 75_000
FORWARDING_TIP_CAP: Final[int] = 10 * GWEI
FORWARDING_FEE_CAP: Final[int] = 20 * GWEI
FORWARDING_VALUE: Final[int] = ETHER // 10_000

PROPAGATION_DELAY: Final[float] = 10.0
"""Seconds to give the replica to forward the transaction."""

FORWARDING_RECEIPT_TIMEOUT: Final[float] = 20.0
"""Seconds to wait for the forwarded transaction to be mined on the sequencer."""

REPLICA_INDEX: Final[int] = 1
"""Replica the transaction is submitted to."""


async def tx_forwarding_scenario(
    devnet: Devnet,
    config: RunConfig,
    *,
    propagation_delay: float = PROPAGATION_DELAY,
    receipt_timeout: float = FORWARDING_RECEIPT_TIMEOUT,
) -> RunResult:
    """
    Submit a transfer to a replica and require the sequencer to mine it.

    Args:
        devnet: Registry of node handles; replica 1 must forward to node 0.
        config: Run parameters (boot timeout).
        propagation_delay: Seconds to wait before looking on the sequencer.
        receipt_timeout: Seconds to wait for the sequencer's receipt.
    """
    sequencer = devnet.sequencer.execution
    replica = devnet.get_node(REPLICA_INDEX).execution
    vault = devnet.vault

    try:
        await devnet.wait_up(0, config.boot_timeout)
        await devnet.wait_up(REPLICA_INDEX, config.boot_timeout)

        sender = await vault.create_account(sequencer, ETHER, timeout=config.receipt_timeout)
        receiver = vault.generate_key()

        tx = DynamicFeeTx(
            chain_id=vault.chain_id,
            nonce=await sequencer.nonce_at(sender),
            gas=FORWARDING_GAS,
            max_priority_fee_per_gas=FORWARDING_TIP_CAP,
            max_fee_per_gas=FORWARDING_FEE_CAP,
            to=receiver,
            value=FORWARDING_VALUE,
        )
        signed = vault.sign_transaction(sender, tx)
        await replica.send_transaction(signed)
        logger.info("Sent tx %s to replica %d, waiting for propagation", signed.hash, REPLICA_INDEX)

        await asyncio.sleep(propagation_delay)

        found = await sequencer.transaction_by_hash(signed.hash)
        if found is None:
            raise TransportError(
                f"transaction {signed.hash} did not propagate to the sequencer",
                node_index=REPLICA_INDEX,
            )
        _, is_pending = found
        logger.info("Found transaction on sequencer, pending: %s", is_pending)

        await wait_receipt_ok(sequencer, signed.hash, receipt_timeout)
    except HarnessError as exc:
        logger.error("Tx forwarding failed: %s", exc)
        result = RunResult.failure(exc)
    else:
        result = RunResult.success()

    metrics.runs.labels(outcome=result.outcome).inc()
    return result

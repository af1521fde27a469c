"""
Replica consistency checks.

Each tick samples the sequencer head, then for every replica checks that

1. the replica is not more than `max_replica_lag` blocks behind that head;
2. the block the replica reports as its unsafe head is the block the
   sequencer holds at the same height.

The first violation ends the check. A single divergence is a correctness
bug, not a transient fault, so nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from rollup_harness import metrics
from rollup_harness.devnet import Devnet
from rollup_harness.errors import DivergenceError, HarnessError, TransportError
from rollup_harness.rpc import ExecutionApi
from rollup_harness.types import BlockID

from .aggregator import ErrorAggregator
from .ticker import Ticker

logger = logging.getLogger(__name__)


def check_lag(
    index: int, sequencer_height: int, replica: BlockID, max_lag: int
) -> DivergenceError | None:
    """
    Lag bound check.

    The difference is taken on signed integers: a replica ahead of the
    sampled sequencer head yields a negative lag and never fails.

    Returns:
        The violation, or None if the replica is within bounds.
    """
    lag = int(sequencer_height) - int(replica.number)
    if lag > max_lag:
        return DivergenceError.excessive_lag(index, sequencer_height, replica.number)
    return None


async def check_replica(
    sequencer: ExecutionApi,
    index: int,
    sequencer_height: int,
    replica: BlockID,
    max_lag: int,
) -> None:
    """
    Check one replica's reported head against the sequencer.

    A pure read: running it again against an unchanged network gives the
    same outcome.

    Args:
        sequencer: Sequencer execution client.
        index: Replica index, for error reports.
        sequencer_height: Sampled sequencer head height.
        replica: The replica's reported unsafe head.
        max_lag: Maximum allowed lag in blocks.

    Raises:
        DivergenceError: On excessive lag, a missing height, or a hash mismatch.
        TransportError: If the sequencer cannot be queried.
    """
    lag_error = check_lag(index, sequencer_height, replica, max_lag)
    if lag_error is not None:
        raise lag_error

    block = await sequencer.block_by_number(replica.number)
    if block is None:
        raise DivergenceError.missing_height(index, replica.number)

    if block.hash != replica.hash:
        raise DivergenceError.hash_mismatch(index, replica.number, block.hash, replica.hash)


@dataclass(slots=True)
class ConsistencyChecker:
    """Periodically validates every replica against the sequencer."""

    devnet: Devnet
    """Registry of node handles."""

    replica_count: int
    """Replicas 1..N to check."""

    max_replica_lag: int
    """Maximum blocks a replica may trail the sequencer head."""

    tick_interval: float
    """Seconds between checks."""

    checks: int = field(default=0)
    """Completed rounds over all replicas."""

    async def check_once(self) -> None:
        """
        Run one round over every replica.

        Raises:
            DivergenceError: On the first replica that violates a check.
            TransportError: If any node cannot be queried.
        """
        sequencer = self.devnet.sequencer.execution
        head = await sequencer.block_by_number(None)
        if head is None:
            raise TransportError("sequencer returned no head block", node_index=0)
        metrics.sequencer_head.set(head.number)

        for index in range(1, self.replica_count + 1):
            status = await self.devnet.get_node(index).rollup.sync_status()
            logger.debug(
                "replica-%d currentL1=%s headL1=%s finalizedL2=%s safeL2=%s unsafeL2=%s",
                index,
                *status.log_fields().values(),
            )
            replica = status.unsafe_l2.id()
            metrics.replica_lag.labels(replica=str(index)).set(head.number - replica.number)
            await check_replica(sequencer, index, head.number, replica, self.max_replica_lag)

        self.checks += 1
        metrics.check_rounds.inc()

    async def run(self, stop: asyncio.Event, aggregator: ErrorAggregator) -> None:
        """
        Check until `stop` fires or a check fails.

        A failure is reported once and ends the task.
        """
        ticker = Ticker(self.tick_interval, stop)
        while await ticker.wait():
            try:
                await self.check_once()
            except DivergenceError as exc:
                metrics.divergences.labels(kind=exc.kind.name.lower()).inc()
                aggregator.report(exc)
                return
            except HarnessError as exc:
                aggregator.report(exc)
                return

        logger.info("Consistency checker stopped after %d rounds", self.checks)

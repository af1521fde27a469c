"""
Run controller.

Drives a run through its phases and owns the decision on its outcome.

Phases
------
1. **Boot**: every node answers RPC.
2. **Mesh**: every replica is peered with every other node.
3. **Fund**: a sender account is funded for the load generator.
4. **Converge**: replicas catch up with the sequencer.
5. **Steady state**: load generation and consistency checking run
   concurrently until the steady-state timer fires (success) or the first
   error arrives (failure).

Phases 1-4 run sequentially and form a barrier: the concurrent phase only
starts once they all succeed. Whatever ends the steady state, both tasks
are stopped and awaited before the result is returned.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Final

from rollup_harness import metrics
from rollup_harness.config import RunConfig
from rollup_harness.devnet import Devnet
from rollup_harness.errors import HarnessError, SetupError
from rollup_harness.wallet import ETHER

from .aggregator import ErrorAggregator
from .checker import ConsistencyChecker
from .convergence import ConvergenceWaiter
from .load import LoadGenerator
from .mesh import build_peer_mesh
from .result import RunResult

logger = logging.getLogger(__name__)

SENDER_BALANCE: Final[int] = ETHER
"""Wei given to the load generator's sender account."""


@dataclass(slots=True)
class RunController:
    """Runs the consistency scenario against one devnet."""

    devnet: Devnet
    """Registry of node handles."""

    config: RunConfig
    """Run parameters."""

    async def run(self) -> RunResult:
        """
        Run every phase and return the single terminal outcome.

        Setup failures end the run before the concurrent phase starts.
        """
        try:
            load, checker = await self.setup()
        except HarnessError as exc:
            logger.error("Setup failed: %s", exc)
            result = RunResult.failure(exc)
        else:
            result = await self.run_steady_state(load, checker)

        metrics.runs.labels(outcome=result.outcome).inc()
        return result

    async def setup(self) -> tuple[LoadGenerator, ConsistencyChecker]:
        """
        Boot, mesh, fund and converge.

        Returns:
            The two concurrent tasks, ready to run.

        Raises:
            SetupError: If the network cannot be made testable.
            TransportError: If a node fails an RPC during setup.
        """
        config = self.config
        if self.devnet.replica_count < config.replica_count:
            raise SetupError(
                f"devnet has {self.devnet.replica_count} replicas, "
                f"run needs {config.replica_count}"
            )

        await self.devnet.wait_all_up(config.boot_timeout)
        await build_peer_mesh(self.devnet, config.replica_count)

        sequencer = self.devnet.sequencer.execution
        vault = self.devnet.vault
        sender = await vault.create_account(
            sequencer, SENDER_BALANCE, timeout=config.receipt_timeout
        )
        recipient = vault.generate_key()

        await ConvergenceWaiter(
            devnet=self.devnet,
            replica_count=config.replica_count,
            timeout=config.convergence_timeout,
            tick_interval=config.convergence_tick_interval,
            threshold=config.convergence_threshold,
        ).wait()

        load = LoadGenerator(
            client=sequencer,
            vault=vault,
            sender=sender,
            recipient=recipient,
            tick_interval=config.tick_interval,
            receipt_timeout=config.receipt_timeout,
        )
        checker = ConsistencyChecker(
            devnet=self.devnet,
            replica_count=config.replica_count,
            max_replica_lag=config.max_replica_lag,
            tick_interval=config.tick_interval,
        )
        return load, checker

    async def run_steady_state(
        self, load: LoadGenerator, checker: ConsistencyChecker
    ) -> RunResult:
        """
        Race the steady-state timer against the first reported error.

        Returns:
            Success if the timer fired first, otherwise the first error.
        """
        stop = asyncio.Event()
        aggregator = ErrorAggregator()

        tasks = [
            asyncio.create_task(load.run(stop, aggregator), name="load-generator"),
            asyncio.create_task(checker.run(stop, aggregator), name="consistency-checker"),
        ]
        for task in tasks:
            task.add_done_callback(lambda t: _report_crash(t, aggregator))

        logger.info(
            "Steady state: %d replicas, max lag %d, for %.1fs",
            self.config.replica_count,
            self.config.max_replica_lag,
            self.config.steady_state_timeout,
        )

        try:
            async with asyncio.timeout(self.config.steady_state_timeout):
                await aggregator.wait()
        except TimeoutError:
            pass
        finally:
            # Decide first, then tear down: nothing reported from here on
            # can change the outcome.
            aggregator.close()
            stop.set()
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        cause = aggregator.first_error
        if cause is None:
            logger.info(
                "Steady state passed: %d load transactions, %d check rounds",
                load.confirmed,
                checker.checks,
            )
            return RunResult.success()

        logger.error("Run failed: %s", cause)
        return RunResult.failure(cause)


def _report_crash(task: asyncio.Task[None], aggregator: ErrorAggregator) -> None:
    """Surface an unexpected exception from a task as the run's failure cause."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        aggregator.report(HarnessError(f"{task.get_name()} crashed: {exc!r}"))

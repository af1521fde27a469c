"""
Initial sync convergence.

Before load starts, every replica must have caught up with the sequencer.
The waiter polls sync status until each replica's unsafe head is within a
small distance of the sequencer's, or gives up after a timeout.

State Machine
-------------
::

    POLLING --> CONVERGED
       |
       +------> TIMED_OUT

A tick where the sequencer's unsafe head equals its safe head is
inconclusive: the sequencer has no pending unsafe work, so there is
nothing gossip-specific to compare yet. The waiter keeps polling.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum, auto

from rollup_harness.config import DEFAULT_CONVERGENCE_THRESHOLD
from rollup_harness.devnet import Devnet
from rollup_harness.errors import SetupError

from .ticker import Ticker

logger = logging.getLogger(__name__)


class ConvergenceState(Enum):
    """Phase of the convergence wait."""

    POLLING = auto()
    """Still waiting for replicas to catch up."""

    CONVERGED = auto()
    """Every replica is within the threshold of the sequencer."""

    TIMED_OUT = auto()
    """The timeout elapsed while still polling."""

    def can_transition_to(self, target: ConvergenceState) -> bool:
        """Check if transition to target state is valid."""
        return target in _VALID_TRANSITIONS.get(self, set())

    @property
    def is_terminal(self) -> bool:
        """Whether the wait is over."""
        return self is not ConvergenceState.POLLING


_VALID_TRANSITIONS: dict[ConvergenceState, set[ConvergenceState]] = {
    ConvergenceState.POLLING: {ConvergenceState.CONVERGED, ConvergenceState.TIMED_OUT},
    ConvergenceState.CONVERGED: set(),
    ConvergenceState.TIMED_OUT: set(),
}
"""Valid state transitions for the convergence state machine."""


@dataclass(slots=True)
class ConvergenceWaiter:
    """Waits until replicas have caught up with the sequencer."""

    devnet: Devnet
    """Registry of node handles."""

    replica_count: int
    """Replicas 1..N to wait for."""

    timeout: float
    """Seconds to wait before giving up."""

    tick_interval: float
    """Seconds between polls."""

    threshold: int = DEFAULT_CONVERGENCE_THRESHOLD
    """A replica is caught up when it is fewer than this many blocks behind."""

    state: ConvergenceState = field(default=ConvergenceState.POLLING)
    """Current phase."""

    polls: int = field(default=0)
    """Number of polls made so far."""

    def _transition(self, target: ConvergenceState) -> None:
        if not self.state.can_transition_to(target):
            raise RuntimeError(f"invalid convergence transition {self.state} -> {target}")
        self.state = target

    async def poll_once(self) -> bool:
        """
        Evaluate one tick.

        Returns:
            True if every replica is within the threshold.

        Raises:
            TransportError: If a sync status cannot be fetched.
        """
        self.polls += 1
        seq_status = await self.devnet.sequencer.rollup.sync_status()
        seq_unsafe = seq_status.unsafe_l2

        if seq_unsafe.number == seq_status.safe_l2.number:
            logger.info(
                "Sequencer unsafe head is at safe head %s", seq_status.safe_l2.terminal_string()
            )
            return False

        for index in range(1, self.replica_count + 1):
            replica = self.devnet.get_node(index)
            rep_unsafe = (await replica.rollup.sync_status()).unsafe_l2

            # A replica ahead of the sampled sequencer head counts as caught up.
            if seq_unsafe.number - rep_unsafe.number >= self.threshold:
                logger.info(
                    "Replica %d is not ready. Seq unsafe head: %s, replica unsafe head: %s",
                    index,
                    seq_unsafe.terminal_string(),
                    rep_unsafe.terminal_string(),
                )
                return False

        return True

    async def wait(self) -> None:
        """
        Poll until converged.

        Raises:
            SetupError: If the timeout elapses first.
            TransportError: If polling a node fails.
        """
        if self.state.is_terminal:
            raise RuntimeError(f"convergence wait already finished: {self.state.name}")

        logger.info("Awaiting initial sync")
        ticker = Ticker(self.tick_interval, asyncio.Event())
        try:
            async with asyncio.timeout(self.timeout):
                while await ticker.wait():
                    if await self.poll_once():
                        break
        except TimeoutError as exc:
            self._transition(ConvergenceState.TIMED_OUT)
            raise SetupError(
                f"replicas did not converge within {self.timeout:.1f}s ({self.polls} polls)"
            ) from exc

        self._transition(ConvergenceState.CONVERGED)
        logger.info("Initial sync done after %d polls", self.polls)

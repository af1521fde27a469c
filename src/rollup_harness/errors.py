"""
Error taxonomy for harness runs.

Every failure a run can end with is one of three kinds:

- **SetupError**: the network never became testable (peering, boot, convergence).
- **TransportError**: an RPC call failed while load or checks were running.
- **DivergenceError**: a replica fell too far behind or disagreed on history.

Errors carry the index of the node that triggered them when there is one,
so a failing run can be diagnosed from its report alone.
"""

from __future__ import annotations

from enum import Enum

from rollup_harness.types import Bytes32


class HarnessError(Exception):
    """Base class for every terminal failure cause of a run."""

    def __init__(self, message: str, *, node_index: int | None = None) -> None:
        super().__init__(message)
        self.node_index = node_index
        """Index of the node that triggered the error, if any."""


class SetupError(HarnessError):
    """
    The network could not be brought into a testable state.

    Raised when a peer connection fails, a node does not come up within its
    boot timeout, or replicas never converge on the sequencer. Never retried:
    these indicate a provisioning defect, not a transient condition.
    """


class TransportError(HarnessError):
    """
    An RPC call failed: connection error, timeout, HTTP status or JSON-RPC error.

    Treated as a run failure. A correctness test must not pass merely
    because monitoring stopped.
    """


class RpcError(TransportError):
    """The node answered with a JSON-RPC error object."""

    def __init__(
        self,
        method: str,
        code: int,
        message: str,
        *,
        data: object = None,
        node_index: int | None = None,
    ) -> None:
        super().__init__(f"{method}: rpc error {code}: {message}", node_index=node_index)
        self.method = method
        self.code = code
        self.data = data


class ReceiptError(TransportError):
    """A transaction receipt reported failure or never showed up."""


class DivergenceKind(Enum):
    """Which consistency check a replica failed."""

    EXCESSIVE_LAG = "excessive lag"
    """Replica head is more than the allowed number of blocks behind."""

    MISSING_HEIGHT = "sequencer missing height reported by replica"
    """Replica reports a height the sequencer has no block for."""

    HASH_MISMATCH = "hash mismatch"
    """Replica and sequencer hold different blocks at the same height."""


class DivergenceError(HarnessError):
    """
    A replica violated the lag bound or canonical history.

    This is the failure the harness exists to detect.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: DivergenceKind,
        node_index: int,
        height: int,
        sequencer_height: int | None = None,
        sequencer_hash: Bytes32 | None = None,
        replica_hash: Bytes32 | None = None,
    ) -> None:
        super().__init__(message, node_index=node_index)
        self.kind = kind
        self.height = height
        """Replica-reported height the check was made at."""
        self.sequencer_height = sequencer_height
        self.sequencer_hash = sequencer_hash
        self.replica_hash = replica_hash

    @classmethod
    def excessive_lag(
        cls, index: int, sequencer_height: int, replica_height: int
    ) -> DivergenceError:
        """Replica is more than the allowed lag behind the sampled sequencer head."""
        return cls(
            f"replica {index}: too far behind sequencer. "
            f"seq head: {sequencer_height}, replica head: {replica_height}",
            kind=DivergenceKind.EXCESSIVE_LAG,
            node_index=index,
            height=replica_height,
            sequencer_height=sequencer_height,
        )

    @classmethod
    def missing_height(cls, index: int, height: int) -> DivergenceError:
        """Sequencer has no block at a height the replica reports."""
        return cls(
            f"replica {index}: sequencer does not have block at height {height}",
            kind=DivergenceKind.MISSING_HEIGHT,
            node_index=index,
            height=height,
        )

    @classmethod
    def hash_mismatch(
        cls, index: int, height: int, sequencer_hash: Bytes32, replica_hash: Bytes32
    ) -> DivergenceError:
        """Sequencer and replica disagree on the block at `height`."""
        return cls(
            f"replica {index}: sequencer diverged, hash mismatch at height {height}: "
            f"sequencer={sequencer_hash} replica={replica_hash}",
            kind=DivergenceKind.HASH_MISMATCH,
            node_index=index,
            height=height,
            sequencer_hash=sequencer_hash,
            replica_hash=replica_hash,
        )

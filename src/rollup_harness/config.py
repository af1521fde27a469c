"""
Run configuration for the consistency harness.

Defaults follow the p2p consistency scenario: two replicas that may trail
the sequencer by at most five blocks, a one-minute convergence window
polled every 250ms, and a one-minute steady state ticked every 100ms.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

_SUPPORTED_HARNESS_ENVS: list[str] = ["prod", "test"]

HARNESS_ENV = os.environ.get("HARNESS_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). 'test' shortens the default timeouts."""

if HARNESS_ENV not in _SUPPORTED_HARNESS_ENVS:
    raise ValueError(
        f"Invalid HARNESS_ENV environment variable: '{HARNESS_ENV}'. "
        f"Supported values: {_SUPPORTED_HARNESS_ENVS}"
    )

DEFAULT_REPLICA_COUNT: Final[int] = 2
"""Number of follower replicas next to the sequencer."""

DEFAULT_MAX_REPLICA_LAG: Final[int] = 5
"""Blocks a replica may trail the sampled sequencer head."""

DEFAULT_CONVERGENCE_THRESHOLD: Final[int] = 2
"""Initial sync is reached once every replica is fewer than this many blocks behind."""

DEFAULT_CONVERGENCE_TIMEOUT: Final[float] = 60.0 if HARNESS_ENV == "prod" else 5.0
"""Seconds to wait for initial sync."""

DEFAULT_CONVERGENCE_TICK: Final[float] = 0.25
"""Seconds between convergence polls."""

DEFAULT_STEADY_STATE_TIMEOUT: Final[float] = 60.0 if HARNESS_ENV == "prod" else 2.0
"""Seconds of load and checking that must pass without a violation."""

DEFAULT_TICK_INTERVAL: Final[float] = 0.1
"""Seconds between load submissions and between consistency checks."""

DEFAULT_RPC_TIMEOUT: Final[float] = 5.0
"""Seconds a single RPC call may take."""

DEFAULT_RECEIPT_TIMEOUT: Final[float] = 30.0
"""Seconds to wait for a submitted load transaction to be mined."""

DEFAULT_BOOT_TIMEOUT: Final[float] = 10.0
"""Seconds each node gets to answer RPC after start."""


@dataclass(frozen=True, slots=True)
class RunConfig:
    """
    Parameters of one harness run.

    Immutable for the run; all durations are in seconds.
    """

    replica_count: int = DEFAULT_REPLICA_COUNT
    """Number of replicas (nodes 1..N). Node 0 is always the sequencer."""

    max_replica_lag: int = DEFAULT_MAX_REPLICA_LAG
    """Maximum blocks a replica may trail the sequencer head."""

    convergence_timeout: float = DEFAULT_CONVERGENCE_TIMEOUT
    steady_state_timeout: float = DEFAULT_STEADY_STATE_TIMEOUT
    tick_interval: float = DEFAULT_TICK_INTERVAL

    convergence_tick_interval: float = DEFAULT_CONVERGENCE_TICK
    convergence_threshold: int = DEFAULT_CONVERGENCE_THRESHOLD
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    boot_timeout: float = DEFAULT_BOOT_TIMEOUT

    def __post_init__(self) -> None:
        """Reject configurations no run could satisfy."""
        if self.replica_count < 1:
            raise ValueError(f"replica_count must be >= 1, got {self.replica_count}")
        if self.max_replica_lag < 0:
            raise ValueError(f"max_replica_lag must be >= 0, got {self.max_replica_lag}")
        if self.convergence_threshold < 1:
            raise ValueError(
                f"convergence_threshold must be >= 1, got {self.convergence_threshold}"
            )
        for name in (
            "convergence_timeout",
            "steady_state_timeout",
            "tick_interval",
            "convergence_tick_interval",
            "rpc_timeout",
            "receipt_timeout",
            "boot_timeout",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    @property
    def node_count(self) -> int:
        """Sequencer plus replicas."""
        return self.replica_count + 1

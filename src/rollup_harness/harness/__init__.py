"""
Consistency harness for a sequencer and its replicas.

Peers the replicas, waits for initial sync, then drives load at the
sequencer while checking every replica for lag and divergence.
"""

from .aggregator import ErrorAggregator
from .checker import ConsistencyChecker, check_lag, check_replica
from .controller import SENDER_BALANCE, RunController
from .convergence import ConvergenceState, ConvergenceWaiter
from .load import LOAD_VALUE, LoadGenerator
from .mesh import build_peer_mesh, mesh_pairs
from .result import RunResult
from .ticker import Ticker

__all__ = [
    # Controller
    "RunController",
    "RunResult",
    "ErrorAggregator",
    "SENDER_BALANCE",
    # Setup phases
    "build_peer_mesh",
    "mesh_pairs",
    "ConvergenceState",
    "ConvergenceWaiter",
    # Concurrent tasks
    "LoadGenerator",
    "LOAD_VALUE",
    "ConsistencyChecker",
    "check_lag",
    "check_replica",
    "Ticker",
]

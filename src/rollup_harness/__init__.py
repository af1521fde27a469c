"""Consistency test harness for multi-replica rollup devnets."""

from .config import RunConfig
from .devnet import Devnet, DevnetConfig, NodeHandle
from .errors import (
    DivergenceError,
    DivergenceKind,
    HarnessError,
    ReceiptError,
    RpcError,
    SetupError,
    TransportError,
)
from .harness import RunController, RunResult

__all__ = [
    "Devnet",
    "DevnetConfig",
    "DivergenceError",
    "DivergenceKind",
    "HarnessError",
    "NodeHandle",
    "ReceiptError",
    "RpcError",
    "RunConfig",
    "RunController",
    "RunResult",
    "SetupError",
    "TransportError",
]

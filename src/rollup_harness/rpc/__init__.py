"""JSON-RPC clients for execution engines and rollup nodes."""

from .execution import ExecutionClient, Receipt, TransactionInfo, wait_receipt_ok
from .interfaces import ExecutionApi, PeerApi, RollupApi
from .p2p import PeerClient
from .rollup import RollupClient
from .transport import DEFAULT_TIMEOUT, JsonRpcTransport

__all__ = [
    "DEFAULT_TIMEOUT",
    "ExecutionApi",
    "ExecutionClient",
    "JsonRpcTransport",
    "PeerApi",
    "PeerClient",
    "Receipt",
    "RollupApi",
    "RollupClient",
    "TransactionInfo",
    "wait_receipt_ok",
]

"""Handles onto a running devnet: the sequencer and its replicas."""

from .config import DevnetConfig, NodeEndpoints
from .handles import SEQUENCER_INDEX, Devnet, NodeHandle

__all__ = [
    "SEQUENCER_INDEX",
    "Devnet",
    "DevnetConfig",
    "NodeEndpoints",
    "NodeHandle",
]

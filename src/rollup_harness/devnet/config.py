"""
Devnet description loader.

The harness does not start nodes. It is pointed at a running devnet
described by a YAML file:

    chain_id: 901
    faucet_key: 0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80
    nodes:
      - execution_rpc: http://127.0.0.1:9545   # node 0 is the sequencer
        rollup_rpc: http://127.0.0.1:7545
      - execution_rpc: http://127.0.0.1:9546
        rollup_rpc: http://127.0.0.1:7546
        p2p_addr: /ip4/127.0.0.1/tcp/9003/p2p/16Uiu2HAm...

`p2p_addr` is optional; when omitted it is discovered from the node.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator

from rollup_harness.types import StrictBaseModel


class NodeEndpoints(StrictBaseModel):
    """Where to reach one node of the devnet."""

    execution_rpc: str
    """HTTP JSON-RPC URL of the execution engine."""

    rollup_rpc: str
    """HTTP JSON-RPC URL of the rollup node (also serves the p2p admin API)."""

    p2p_addr: str | None = None
    """Multiaddr peers dial to reach this node."""


class DevnetConfig(StrictBaseModel):
    """A running devnet: a sequencer followed by its replicas."""

    chain_id: int = Field(gt=0)
    """L2 chain id transactions are signed for."""

    faucet_key: str
    """Hex private key of an account funded at genesis."""

    nodes: list[NodeEndpoints] = Field(min_length=2)
    """Node 0 is the sequencer, the rest are replicas."""

    @field_validator("faucet_key", mode="before")
    @classmethod
    def parse_faucet_key(cls, v: Any) -> str:
        """
        Normalise the faucet key to `0x`-prefixed hex.

        YAML parsers may interpret unquoted 0x-prefixed values as integers.
        """
        if isinstance(v, int) and not isinstance(v, bool):
            return f"0x{v:064x}"
        if not isinstance(v, str):
            raise ValueError(f"faucet_key must be a hex string, got {type(v).__name__}")
        text = v.removeprefix("0x")
        if len(text) != 64:
            raise ValueError(f"faucet_key must be 32 bytes, got {len(text) // 2}")
        bytes.fromhex(text)
        return "0x" + text.lower()

    @property
    def replica_count(self) -> int:
        """Number of replicas described."""
        return len(self.nodes) - 1

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> DevnetConfig:
        """
        Load a devnet description from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, content: str) -> DevnetConfig:
        """Load a devnet description from a YAML string."""
        return cls.model_validate(yaml.safe_load(content))

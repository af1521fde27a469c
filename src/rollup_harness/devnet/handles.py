"""
Node handles and the devnet registry.

The registry is constructed once per run and shared read-only with every
component that needs a node. There is no global devnet object.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field

from rollup_harness.errors import SetupError, TransportError
from rollup_harness.rpc import (
    ExecutionApi,
    ExecutionClient,
    JsonRpcTransport,
    PeerApi,
    PeerClient,
    RollupApi,
    RollupClient,
)
from rollup_harness.rpc.transport import DEFAULT_TIMEOUT
from rollup_harness.wallet import PrivateKey, Vault

from .config import DevnetConfig

logger = logging.getLogger(__name__)

SEQUENCER_INDEX = 0
"""Index of the sequencer. Replicas are 1..N."""

BOOT_POLL_INTERVAL = 0.5
"""Seconds between liveness probes while a node boots."""


@dataclass(frozen=True, slots=True)
class NodeHandle:
    """One node of the devnet and the clients to reach it."""

    index: int
    """Position in the devnet; 0 is the sequencer."""

    execution: ExecutionApi
    """Execution engine client."""

    rollup: RollupApi
    """Rollup node client (sync status)."""

    peer: PeerApi
    """Rollup node p2p admin client."""

    peer_address: str
    """Multiaddr other nodes dial to peer with this one."""

    @property
    def is_sequencer(self) -> bool:
        """Whether this node produces blocks."""
        return self.index == SEQUENCER_INDEX


@dataclass(slots=True)
class Devnet:
    """
    Fixed-size registry of node handles.

    Node 0 is the sequencer, nodes 1..N are replicas. The set of handles
    never changes after construction.
    """

    nodes: tuple[NodeHandle, ...]
    """All handles in index order."""

    vault: Vault
    """Keys for signing load and funding accounts."""

    _transports: list[JsonRpcTransport] = field(default_factory=list, repr=False)
    """Sessions owned by this registry, closed by `aclose`."""

    def __post_init__(self) -> None:
        """Check the handles are a contiguous, ordered set with a replica."""
        if len(self.nodes) < 2:
            raise ValueError(f"a devnet needs a sequencer and a replica, got {len(self.nodes)}")
        for position, node in enumerate(self.nodes):
            if node.index != position:
                raise ValueError(f"node at position {position} has index {node.index}")

    @property
    def replica_count(self) -> int:
        """Number of replicas."""
        return len(self.nodes) - 1

    @property
    def sequencer(self) -> NodeHandle:
        """The block-producing node."""
        return self.nodes[SEQUENCER_INDEX]

    @property
    def replicas(self) -> tuple[NodeHandle, ...]:
        """Nodes 1..N."""
        return self.nodes[1:]

    def get_node(self, index: int) -> NodeHandle:
        """
        Handle for node `index`.

        Raises:
            IndexError: If no such node exists.
        """
        if not 0 <= index < len(self.nodes):
            raise IndexError(f"node {index} out of range 0..{len(self.nodes) - 1}")
        return self.nodes[index]

    @classmethod
    async def connect(
        cls,
        config: DevnetConfig,
        *,
        rpc_timeout: float = DEFAULT_TIMEOUT,
    ) -> Devnet:
        """
        Build handles for every node in `config`.

        Peer addresses missing from the description are discovered from
        the nodes themselves.

        Raises:
            SetupError: If a peer address cannot be discovered.
        """
        transports: list[JsonRpcTransport] = []
        nodes: list[NodeHandle] = []

        try:
            for index, endpoints in enumerate(config.nodes):
                execution_transport = JsonRpcTransport(
                    endpoints.execution_rpc, timeout=rpc_timeout, node_index=index
                )
                rollup_transport = JsonRpcTransport(
                    endpoints.rollup_rpc, timeout=rpc_timeout, node_index=index
                )
                transports.extend([execution_transport, rollup_transport])

                peer = PeerClient(rollup_transport)
                peer_address = endpoints.p2p_addr
                if peer_address is None:
                    try:
                        peer_address = await peer.self_address()
                    except TransportError as exc:
                        raise SetupError(
                            f"node {index}: cannot discover p2p address: {exc}", node_index=index
                        ) from exc

                nodes.append(
                    NodeHandle(
                        index=index,
                        execution=ExecutionClient(execution_transport),
                        rollup=RollupClient(rollup_transport),
                        peer=peer,
                        peer_address=peer_address,
                    )
                )
                logger.info("Node %d: p2p address %s", index, peer_address)
        except BaseException:
            for transport in transports:
                await transport.aclose()
            raise

        vault = Vault(config.chain_id, faucet=PrivateKey.from_hex(config.faucet_key))
        return cls(nodes=tuple(nodes), vault=vault, _transports=transports)

    async def wait_up(self, index: int, timeout: float) -> None:
        """
        Wait until node `index` answers execution RPC.

        Raises:
            SetupError: If the node does not answer within `timeout` seconds.
        """
        node = self.get_node(index)
        deadline = time.monotonic() + timeout
        last_error: Exception | None = None

        while time.monotonic() < deadline:
            try:
                chain_id = await node.execution.chain_id()
            except TransportError as exc:
                last_error = exc
                await asyncio.sleep(BOOT_POLL_INTERVAL)
                continue
            if chain_id != self.vault.chain_id:
                raise SetupError(
                    f"node {index}: serves chain {chain_id}, expected {self.vault.chain_id}",
                    node_index=index,
                )
            logger.debug("Node %d is up", index)
            return

        raise SetupError(
            f"node {index} failed to come up within {timeout:.1f}s: {last_error}",
            node_index=index,
        )

    async def wait_all_up(self, timeout: float) -> None:
        """
        Wait for every node in turn, each bounded by `timeout`.

        Raises:
            SetupError: On the first node that does not come up.
        """
        logger.info("Waiting for %d nodes to come up", len(self.nodes))
        for node in self.nodes:
            await self.wait_up(node.index, timeout)

    async def aclose(self) -> None:
        """Close every HTTP session this registry opened."""
        for transport in self._transports:
            await transport.aclose()
        self._transports.clear()

"""Full-mesh peering between replicas and the sequencer."""

from __future__ import annotations

import logging

from rollup_harness.devnet import Devnet
from rollup_harness.errors import SetupError, TransportError

logger = logging.getLogger(__name__)


def mesh_pairs(replica_count: int) -> list[tuple[int, int]]:
    """
    Every (dialer, target) pair of the mesh.

    Each replica 1..N dials every other node, the sequencer included.
    The sequencer dials nobody: replicas reach it directly.

    Args:
        replica_count: Number of replicas.

    Returns:
        List of (dialer_index, target_index) pairs.
    """
    return [
        (i, j)
        for i in range(1, replica_count + 1)
        for j in range(replica_count + 1)
        if i != j
    ]


async def build_peer_mesh(devnet: Devnet, replica_count: int | None = None) -> list[tuple[int, int]]:
    """
    Connect every replica to every other node.

    Connections are made one at a time. No retries: a failed dial is a
    provisioning defect, not a transient condition.

    Args:
        devnet: Registry of node handles.
        replica_count: Replicas to mesh; defaults to all of them.

    Returns:
        The pairs that were connected.

    Raises:
        SetupError: On the first connection that fails.
    """
    count = devnet.replica_count if replica_count is None else replica_count
    pairs = mesh_pairs(count)

    for dialer_index, target_index in pairs:
        dialer = devnet.get_node(dialer_index)
        target = devnet.get_node(target_index)
        logger.info(
            "Peering node %d (%s) with %d", target_index, target.peer_address, dialer_index
        )
        try:
            await dialer.peer.connect_peer(target.peer_address)
        except TransportError as exc:
            raise SetupError(
                f"replica {dialer_index}: failed to connect to node {target_index} "
                f"({target.peer_address}): {exc}",
                node_index=dialer_index,
            ) from exc

    logger.info("Peer mesh built: %d connections", len(pairs))
    return pairs

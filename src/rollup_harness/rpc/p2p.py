"""Rollup node p2p admin client (`opp2p_` namespace)."""

from __future__ import annotations

import logging

from rollup_harness.errors import TransportError

from .transport import JsonRpcTransport

logger = logging.getLogger(__name__)


class PeerClient:
    """Drives peering on a rollup node."""

    def __init__(self, transport: JsonRpcTransport) -> None:
        self.transport = transport

    async def connect_peer(self, address: str) -> None:
        """Dial the peer at multiaddr `address`. Raises on failure."""
        await self.transport.call("opp2p_connectPeer", address)
        logger.debug("node %s dialled %s", self.transport.node_index, address)

    async def self_address(self) -> str:
        """
        Discover this node's own dialable multiaddr.

        `opp2p_self` reports the peer id and listen addresses; the first
        address is combined with the peer id.

        Raises:
            TransportError: If the node reports no listen address.
        """
        info = await self.transport.call("opp2p_self")
        if not isinstance(info, dict):
            info = {}
        addresses = info.get("addresses") or []
        if not addresses:
            raise TransportError(
                "opp2p_self: node reports no listen address",
                node_index=self.transport.node_index,
            )
        address = str(addresses[0])
        peer_id = str(info.get("peerID", ""))
        if peer_id and "/p2p/" not in address:
            address = f"{address}/p2p/{peer_id}"
        return address

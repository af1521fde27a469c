"""Rollup node JSON-RPC client (`optimism_` namespace)."""

from __future__ import annotations

from pydantic import ValidationError

from rollup_harness.errors import TransportError
from rollup_harness.types import SyncStatus

from .transport import JsonRpcTransport


class RollupClient:
    """Reads sync status from a rollup node."""

    def __init__(self, transport: JsonRpcTransport) -> None:
        self.transport = transport

    async def sync_status(self) -> SyncStatus:
        """
        Fetch the node's current view of L1 and L2 heads.

        Raises:
            TransportError: If the call fails or the payload is malformed.
        """
        raw = await self.transport.call("optimism_syncStatus")
        try:
            return SyncStatus.model_validate(raw)
        except ValidationError as exc:
            raise TransportError(
                f"optimism_syncStatus: malformed sync status: {exc}",
                node_index=self.transport.node_index,
            ) from exc

"""
JSON-RPC 2.0 over HTTP.

Every node the harness talks to (execution engine, rollup node, its p2p
admin namespace) speaks JSON-RPC. This module owns the HTTP session and
the conversion of transport failures into harness errors. Callers above
this layer never see an `httpx` exception.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any

import httpx

from rollup_harness.errors import RpcError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
"""Per-call timeout in seconds. Bounds how long one hung RPC can stall a task."""


class JsonRpcTransport:
    """
    A JSON-RPC endpoint reached over a pooled HTTP session.

    The session is created lazily on first use, or injected for tests
    (e.g. an `httpx.AsyncClient` backed by `httpx.MockTransport`).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        node_index: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.node_index = node_index
        self._client = client
        self._owns_client = client is None
        self._ids = itertools.count(1)

    def _session(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def call(self, method: str, *params: Any) -> Any:
        """
        Invoke `method` and return its `result`.

        Raises:
            RpcError: If the node answered with an error object.
            TransportError: On connection failure, timeout, HTTP error status,
                or a malformed response or error object.
        """
        request_id = next(self._ids)
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": list(params)}

        try:
            # httpx bounds each network phase separately; the outer timeout
            # bounds the call as a whole.
            async with asyncio.timeout(self.timeout):
                response = await self._session().post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except TimeoutError as exc:
            raise TransportError(
                f"{method}: timed out after {self.timeout:.1f}s ({self.url})",
                node_index=self.node_index,
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"{method}: HTTP error {exc.response.status_code}: {exc.response.text[:200]}",
                node_index=self.node_index,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"{method}: network error while connecting to {self.url}: {exc}",
                node_index=self.node_index,
            ) from exc
        except ValueError as exc:
            raise TransportError(
                f"{method}: response is not valid JSON: {exc}", node_index=self.node_index
            ) from exc

        if not isinstance(body, dict):
            raise TransportError(
                f"{method}: unexpected response shape: {body!r}", node_index=self.node_index
            )

        error = body.get("error")
        if error is not None:
            if not isinstance(error, dict) or not isinstance(error.get("code", 0), int):
                raise TransportError(
                    f"{method}: malformed error object: {error!r}", node_index=self.node_index
                )
            raise RpcError(
                method,
                error.get("code", 0),
                str(error.get("message", "")),
                data=error.get("data"),
                node_index=self.node_index,
            )

        if "result" not in body:
            raise TransportError(
                f"{method}: response carries neither result nor error",
                node_index=self.node_index,
            )

        logger.debug("%s -> %s", method, self.url)
        return body["result"]

    async def aclose(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> JsonRpcTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

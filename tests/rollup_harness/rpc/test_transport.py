"""Tests for the JSON-RPC transport."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from rollup_harness.errors import RpcError, TransportError
from rollup_harness.rpc import JsonRpcTransport

URL = "http://node0:8545"


def make_transport(
    handler: Callable[[httpx.Request], Any], *, timeout: float = 1.0
) -> JsonRpcTransport:
    """Transport whose HTTP session is served by `handler`."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return JsonRpcTransport(URL, timeout=timeout, node_index=3, client=client)


def result(value: Any) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering every request with `value`."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": value})

    return handler


class TestCall:
    """Tests for successful calls."""

    async def test_returns_result(self) -> None:
        """The result member is returned as-is."""
        transport = make_transport(result("0x385"))
        assert await transport.call("eth_chainId") == "0x385"

    async def test_null_result_is_returned(self) -> None:
        """A null result is a valid answer."""
        transport = make_transport(result(None))
        assert await transport.call("eth_getBlockByNumber", "0x10", False) is None

    async def test_request_shape(self) -> None:
        """Requests are JSON-RPC 2.0 posts with positional params and fresh ids."""
        seen: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert str(request.url) == URL
            body = json.loads(request.content)
            seen.append(body)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": 1})

        transport = make_transport(handler)
        await transport.call("opp2p_connectPeer", "/ip4/1.2.3.4/tcp/9003")
        await transport.call("eth_blockNumber")

        assert seen[0]["jsonrpc"] == "2.0"
        assert seen[0]["method"] == "opp2p_connectPeer"
        assert seen[0]["params"] == ["/ip4/1.2.3.4/tcp/9003"]
        assert seen[1]["params"] == []
        assert seen[0]["id"] != seen[1]["id"]


class TestErrors:
    """Tests for failure conversion."""

    async def test_error_object_becomes_rpc_error(self) -> None:
        """JSON-RPC error objects carry code, message and node index."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {"code": -32601, "message": "method not found"},
                },
            )

        transport = make_transport(handler)
        with pytest.raises(RpcError) as exc_info:
            await transport.call("opp2p_self")

        err = exc_info.value
        assert err.code == -32601
        assert err.method == "opp2p_self"
        assert err.node_index == 3
        assert "method not found" in str(err)
        assert isinstance(err, TransportError)

    async def test_http_error_status(self) -> None:
        """Non-2xx responses are transport errors."""
        transport = make_transport(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(TransportError, match="HTTP error 500"):
            await transport.call("eth_chainId")

    async def test_invalid_json(self) -> None:
        """A body that is not JSON is a transport error."""
        transport = make_transport(lambda request: httpx.Response(200, content=b"not json"))
        with pytest.raises(TransportError, match="not valid JSON"):
            await transport.call("eth_chainId")

    async def test_non_object_body(self) -> None:
        """A JSON array (batch reply) is not accepted for a single call."""
        transport = make_transport(lambda request: httpx.Response(200, json=[1, 2]))
        with pytest.raises(TransportError, match="unexpected response shape"):
            await transport.call("eth_chainId")

    async def test_missing_result(self) -> None:
        """A reply with neither result nor error is malformed."""
        transport = make_transport(
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1})
        )
        with pytest.raises(TransportError, match="neither result nor error"):
            await transport.call("eth_chainId")

    @pytest.mark.parametrize("error", ["execution reverted", 7, {"code": "bad", "message": "x"}])
    async def test_malformed_error_object(self, error: object) -> None:
        """An error that is not a {code, message} object is still a transport error."""
        transport = make_transport(
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": error})
        )
        with pytest.raises(TransportError, match="malformed error object") as exc_info:
            await transport.call("eth_chainId")
        assert exc_info.value.node_index == 3

    async def test_connection_error(self) -> None:
        """Network failures are transport errors tagged with the node."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(handler)
        with pytest.raises(TransportError, match="network error") as exc_info:
            await transport.call("eth_chainId")
        assert exc_info.value.node_index == 3

    async def test_timeout(self) -> None:
        """A hung node fails the call after the timeout."""

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": 1})

        transport = make_transport(handler, timeout=0.05)
        with pytest.raises(TransportError, match="timed out"):
            await transport.call("eth_chainId")


class TestLifecycle:
    """Tests for session ownership."""

    async def test_injected_client_is_not_closed(self) -> None:
        """The caller owns an injected session."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(result(1)))
        async with JsonRpcTransport(URL, client=client) as transport:
            await transport.call("eth_blockNumber")
        assert not client.is_closed
        await client.aclose()

    async def test_aclose_without_session(self) -> None:
        """Closing a transport that never connected is a no-op."""
        transport = JsonRpcTransport(URL)
        await transport.aclose()

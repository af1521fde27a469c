"""Tests for the execution engine client."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from rollup_harness.errors import ReceiptError, TransportError
from rollup_harness.rpc import ExecutionClient, JsonRpcTransport, Receipt, wait_receipt_ok
from rollup_harness.types import Address, Bytes32
from rollup_harness.wallet import TRANSFER_GAS, DynamicFeeTx, PrivateKey
from tests.rollup_harness.helpers import FAUCET_KEY, TEST_CHAIN_ID, FakeChain, FakeExecution

H1 = "0x" + "11" * 32
H2 = "0x" + "22" * 32


class ScriptedNode:
    """Answers each method from a table and logs every request."""

    def __init__(self, answers: dict[str, Any]) -> None:
        """Initialize with a method -> result table."""
        self.answers = answers
        self.requests: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        answer = self.answers[body["method"]]
        if callable(answer):
            answer = answer(*body["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": answer})


def make_client(node: ScriptedNode) -> ExecutionClient:
    """Execution client served by `node`."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(node))
    return ExecutionClient(JsonRpcTransport("http://node0:8545", node_index=0, client=client))


def block_json(number: int, hash: str = H1) -> dict[str, Any]:
    """An `eth_getBlockByNumber` result."""
    return {"number": hex(number), "hash": hash, "parentHash": H2, "timestamp": "0x10"}


class TestBlockByNumber:
    """Tests for block lookups."""

    async def test_latest(self) -> None:
        """None asks for the latest block."""
        node = ScriptedNode({"eth_getBlockByNumber": block_json(50)})
        header = await make_client(node).block_by_number(None)

        assert header is not None
        assert header.number == 50
        assert node.requests[0]["params"] == ["latest", False]

    async def test_height_is_hex_encoded(self) -> None:
        """Heights travel as quantities."""
        node = ScriptedNode({"eth_getBlockByNumber": block_json(94)})
        header = await make_client(node).block_by_number(94)

        assert header is not None and header.hash == Bytes32(H1)
        assert node.requests[0]["params"] == ["0x5e", False]

    async def test_missing_height_is_none(self) -> None:
        """A null result means the node has no block there."""
        node = ScriptedNode({"eth_getBlockByNumber": None})
        assert await make_client(node).block_by_number(1000) is None

    async def test_missing_latest_is_error(self) -> None:
        """A node without a head is broken, not empty."""
        node = ScriptedNode({"eth_getBlockByNumber": None})
        with pytest.raises(TransportError, match="no latest block"):
            await make_client(node).block_by_number(None)

    async def test_malformed_block(self) -> None:
        """A block without a hash cannot be compared."""
        node = ScriptedNode({"eth_getBlockByNumber": {"number": "0x1"}})
        with pytest.raises(TransportError, match="malformed BlockHeader"):
            await make_client(node).block_by_number(1)


class TestAccountQueries:
    """Tests for chain id, nonce and balance."""

    async def test_chain_id(self) -> None:
        """Chain id is parsed from hex."""
        node = ScriptedNode({"eth_chainId": "0x385"})
        assert await make_client(node).chain_id() == 901

    async def test_nonce_at(self) -> None:
        """Nonce is read at the latest block."""
        address = Address(b"\x01" * 20)
        node = ScriptedNode({"eth_getTransactionCount": "0x7"})
        assert await make_client(node).nonce_at(address) == 7
        assert node.requests[0]["params"] == [address.to_hex(), "latest"]

    async def test_balance_at(self) -> None:
        """Balance is parsed from hex."""
        node = ScriptedNode({"eth_getBalance": hex(10**18)})
        assert await make_client(node).balance_at(Address(b"\x01" * 20)) == 10**18


class TestTransactions:
    """Tests for submission and lookup."""

    def _signed(self) -> Any:
        tx = DynamicFeeTx(
            chain_id=TEST_CHAIN_ID,
            nonce=0,
            gas=TRANSFER_GAS,
            max_priority_fee_per_gas=1,
            max_fee_per_gas=2,
            to=Address(b"\x02" * 20),
            value=1,
        )
        return tx.sign(PrivateKey.from_hex(FAUCET_KEY))

    async def test_send_raw_transaction(self) -> None:
        """The encoded envelope is submitted as hex."""
        signed = self._signed()
        node = ScriptedNode({"eth_sendRawTransaction": signed.hash.to_hex()})

        tx_hash = await make_client(node).send_transaction(signed)

        assert tx_hash == signed.hash
        assert node.requests[0]["params"] == ["0x" + signed.raw.hex()]

    async def test_transaction_pending(self) -> None:
        """A transaction without a block hash is pending."""
        node = ScriptedNode(
            {
                "eth_getTransactionByHash": {
                    "hash": H1,
                    "nonce": "0x0",
                    "blockHash": None,
                    "blockNumber": None,
                }
            }
        )
        found = await make_client(node).transaction_by_hash(Bytes32(H1))
        assert found is not None
        info, is_pending = found
        assert is_pending
        assert info.nonce == 0

    async def test_transaction_mined(self) -> None:
        """A transaction with a block hash is not pending."""
        node = ScriptedNode(
            {
                "eth_getTransactionByHash": {
                    "hash": H1,
                    "nonce": "0x3",
                    "blockHash": H2,
                    "blockNumber": "0x20",
                }
            }
        )
        found = await make_client(node).transaction_by_hash(Bytes32(H1))
        assert found is not None
        info, is_pending = found
        assert not is_pending
        assert info.block_number == 32

    async def test_unknown_transaction(self) -> None:
        """Unknown hashes give None."""
        node = ScriptedNode({"eth_getTransactionByHash": None})
        assert await make_client(node).transaction_by_hash(Bytes32(H1)) is None

    async def test_receipt(self) -> None:
        """Receipts are parsed from camel-case hex fields."""
        node = ScriptedNode(
            {
                "eth_getTransactionReceipt": {
                    "transactionHash": H1,
                    "blockHash": H2,
                    "blockNumber": "0x20",
                    "status": "0x1",
                    "gasUsed": "0x5208",
                    "logs": [],
                }
            }
        )
        receipt = await make_client(node).transaction_receipt(Bytes32(H1))
        assert receipt is not None
        assert receipt.succeeded
        assert receipt.gas_used == 21_000


class TestWaitReceiptOk:
    """Tests for receipt polling."""

    async def test_returns_successful_receipt(self) -> None:
        """A mined successful transaction returns its receipt."""
        node = FakeExecution(FakeChain())
        tx_hash = Bytes32(H1)
        node.receipts[tx_hash] = Receipt(
            transaction_hash=tx_hash, block_hash=Bytes32(H2), block_number=11, status=1
        )
        receipt = await wait_receipt_ok(node, tx_hash, timeout=1.0)
        assert receipt.block_number == 11

    async def test_failed_status(self) -> None:
        """A reverted transaction is an error."""
        node = FakeExecution(FakeChain())
        tx_hash = Bytes32(H1)
        node.receipts[tx_hash] = Receipt(
            transaction_hash=tx_hash, block_hash=Bytes32(H2), block_number=11, status=0
        )
        with pytest.raises(ReceiptError, match="failed in block 11"):
            await wait_receipt_ok(node, tx_hash, timeout=1.0)

    async def test_times_out(self) -> None:
        """A receipt that never appears is an error after the timeout."""
        node = FakeExecution(FakeChain())
        with pytest.raises(ReceiptError, match="no receipt"):
            await wait_receipt_ok(node, Bytes32(H1), timeout=0.1, poll_interval=0.02)
        assert node.calls["transaction_receipt"] >= 2

    async def test_polls_until_mined(self) -> None:
        """Polling continues while the receipt is absent."""
        node = FakeExecution(FakeChain())
        tx_hash = Bytes32(H1)
        original = node.transaction_receipt

        async def appear_on_third_poll(h: Bytes32) -> Receipt | None:
            if node.calls["transaction_receipt"] == 2:
                node.receipts[h] = Receipt(
                    transaction_hash=h, block_hash=Bytes32(H2), block_number=12, status=1
                )
            return await original(h)

        node.transaction_receipt = appear_on_third_poll  # type: ignore[method-assign]
        receipt = await wait_receipt_ok(node, tx_hash, timeout=1.0, poll_interval=0.01)
        assert receipt.block_number == 12
        assert node.calls["transaction_receipt"] == 3


class TestMalformedAnswers:
    """A node answering garbage is a transport failure, never a raw exception."""

    @pytest.mark.parametrize("answer", [None, "0xzz", "0x", True, {"chainId": 1}])
    async def test_chain_id(self, answer: object) -> None:
        """Null or non-hex chain ids are rejected with the node index."""
        node = ScriptedNode({"eth_chainId": answer})
        with pytest.raises(TransportError, match="eth_chainId: malformed quantity") as exc_info:
            await make_client(node).chain_id()
        assert exc_info.value.node_index == 0

    async def test_nonce_at(self) -> None:
        """A null nonce cannot be signed with."""
        node = ScriptedNode({"eth_getTransactionCount": None})
        with pytest.raises(TransportError, match="eth_getTransactionCount"):
            await make_client(node).nonce_at(Address(b"\x01" * 20))

    async def test_balance_at(self) -> None:
        """A negative balance is malformed."""
        node = ScriptedNode({"eth_getBalance": "-0x1"})
        with pytest.raises(TransportError, match="eth_getBalance"):
            await make_client(node).balance_at(Address(b"\x01" * 20))

    @pytest.mark.parametrize("answer", [None, "0x1234", "0x" + "zz" * 32])
    async def test_send_transaction_hash(self, answer: object) -> None:
        """The hash a node assigns must be 32 bytes of hex."""
        signed = TestTransactions()._signed()
        node = ScriptedNode({"eth_sendRawTransaction": answer})
        with pytest.raises(TransportError, match="malformed transaction hash"):
            await make_client(node).send_transaction(signed)

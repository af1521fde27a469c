"""Test helpers for rollup_harness unit tests."""

from __future__ import annotations

from .mocks import (
    FAUCET_ADDRESS,
    FAUCET_KEY,
    TEST_CHAIN_ID,
    FakeChain,
    FakeExecution,
    FakePeer,
    FakeRollup,
    block_hash,
    fake_execution,
    fake_rollup,
    make_devnet,
    make_l1_ref,
    make_l2_ref,
    make_sync_status,
    peer_address,
)

__all__ = [
    "FAUCET_ADDRESS",
    "FAUCET_KEY",
    "TEST_CHAIN_ID",
    "FakeChain",
    "FakeExecution",
    "FakePeer",
    "FakeRollup",
    "block_hash",
    "fake_execution",
    "fake_rollup",
    "make_devnet",
    "make_l1_ref",
    "make_l2_ref",
    "make_sync_status",
    "peer_address",
]

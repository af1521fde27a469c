"""Tests for the error taxonomy and run results."""

from __future__ import annotations

from rollup_harness.errors import (
    DivergenceError,
    DivergenceKind,
    HarnessError,
    ReceiptError,
    RpcError,
    SetupError,
    TransportError,
)
from rollup_harness.harness import RunResult
from tests.rollup_harness.helpers import block_hash


class TestDivergenceError:
    """Tests for divergence diagnostics."""

    def test_excessive_lag(self) -> None:
        """Lag errors name both heads."""
        err = DivergenceError.excessive_lag(1, 50, 44)
        assert str(err) == "replica 1: too far behind sequencer. seq head: 50, replica head: 44"
        assert err.kind is DivergenceKind.EXCESSIVE_LAG
        assert err.node_index == 1
        assert err.height == 44
        assert err.sequencer_height == 50

    def test_missing_height(self) -> None:
        """Missing heights name the height."""
        err = DivergenceError.missing_height(2, 120)
        assert str(err) == "replica 2: sequencer does not have block at height 120"
        assert err.kind is DivergenceKind.MISSING_HEIGHT

    def test_hash_mismatch(self) -> None:
        """Mismatches carry both hashes."""
        seq_hash, rep_hash = block_hash(94), block_hash(94, fork=1)
        err = DivergenceError.hash_mismatch(2, 94, seq_hash, rep_hash)

        assert str(err).startswith("replica 2: sequencer diverged, hash mismatch at height 94")
        assert str(seq_hash) in str(err)
        assert str(rep_hash) in str(err)
        assert err.sequencer_hash == seq_hash
        assert err.replica_hash == rep_hash


class TestHierarchy:
    """Tests for the class hierarchy."""

    def test_kinds_share_a_base(self) -> None:
        """Every failure cause is a HarnessError."""
        for cls in (SetupError, TransportError, DivergenceError, RpcError, ReceiptError):
            assert issubclass(cls, HarnessError)

    def test_rpc_and_receipt_errors_are_transport_errors(self) -> None:
        """Node-side failures are transport failures."""
        assert issubclass(RpcError, TransportError)
        assert issubclass(ReceiptError, TransportError)


class TestRunResult:
    """Tests for RunResult."""

    def test_success(self) -> None:
        """Success has no cause."""
        result = RunResult.success()
        assert result.ok
        assert result.node_index is None
        assert result.diagnostic == "success"

    def test_divergence_failure(self) -> None:
        """Divergence diagnostics include the check that failed."""
        result = RunResult.failure(DivergenceError.missing_height(2, 7))
        assert not result.ok
        assert result.node_index == 2
        assert result.diagnostic == (
            "DivergenceError (sequencer missing height reported by replica): "
            "replica 2: sequencer does not have block at height 7"
        )

    def test_setup_failure(self) -> None:
        """Other failures are named by class."""
        result = RunResult.failure(SetupError("node 1 failed to come up", node_index=1))
        assert result.diagnostic == "SetupError: node 1 failed to come up"
        assert result.node_index == 1

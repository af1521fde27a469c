"""Peered replicas stay consistent with the sequencer under load."""

from __future__ import annotations

from rollup_harness.config import RunConfig
from rollup_harness.devnet import Devnet
from rollup_harness.harness import RunController, RunResult


async def p2p_consistency_scenario(devnet: Devnet, config: RunConfig) -> RunResult:
    """
    Mesh the replicas, wait for initial sync, then check them under load.

    Passes if no replica lags beyond the bound or diverges from the
    sequencer's canonical history during the steady-state window.
    """
    return await RunController(devnet=devnet, config=config).run()

"""
Runnable scenarios.

Each scenario takes a connected devnet and a run configuration and
returns exactly one `RunResult`.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from rollup_harness.config import RunConfig
from rollup_harness.devnet import Devnet
from rollup_harness.harness import RunResult

from .forwarding import tx_forwarding_scenario
from .p2p import p2p_consistency_scenario


@dataclass(frozen=True, slots=True)
class Scenario:
    """A named scenario."""

    name: str
    description: str
    run: Callable[[Devnet, RunConfig], Awaitable[RunResult]]


SCENARIOS: dict[str, Scenario] = {
    scenario.name: scenario
    for scenario in [
        Scenario(
            name="p2p",
            description="Runs a peered testnet under load and checks replica consistency",
            run=p2p_consistency_scenario,
        ),
        Scenario(
            name="tx-forwarding",
            description="Verifies a transaction submitted to a replica reaches the sequencer",
            run=tx_forwarding_scenario,
        ),
    ]
}
"""All scenarios by name, in run order."""

__all__ = [
    "SCENARIOS",
    "Scenario",
    "p2p_consistency_scenario",
    "tx_forwarding_scenario",
]

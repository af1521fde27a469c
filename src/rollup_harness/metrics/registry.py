"""
Metric registry using prometheus_client.

Provides pre-defined metrics for a harness run.
Rendered in Prometheus text format for the CLI's `--metrics-file`.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Dedicated registry: only harness metrics, no Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Chain Observation
# -----------------------------------------------------------------------------

sequencer_head = Gauge(
    "harness_sequencer_head",
    "Sequencer head height sampled by the last check round",
    registry=REGISTRY,
)

replica_lag = Gauge(
    "harness_replica_lag_blocks",
    "Blocks the replica's unsafe head trails the sampled sequencer head",
    ["replica"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Concurrent Tasks
# -----------------------------------------------------------------------------

check_rounds = Counter(
    "harness_check_rounds_total",
    "Completed consistency check rounds over all replicas",
    registry=REGISTRY,
)

load_transactions = Counter(
    "harness_load_transactions_total",
    "Load transactions mined on the sequencer",
    registry=REGISTRY,
)

receipt_wait_time = Histogram(
    "harness_receipt_wait_seconds",
    "Time from submitting a load transaction to its successful receipt",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Outcomes
# -----------------------------------------------------------------------------

divergences = Counter(
    "harness_divergences_total",
    "Consistency violations detected, by kind",
    ["kind"],
    registry=REGISTRY,
)

runs = Counter(
    "harness_runs_total",
    "Finished scenario runs, by outcome",
    ["outcome"],
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)

"""
Metrics module for observability.

Counters, gauges and histograms tracking load, checks and outcomes of a
harness run, rendered in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    check_rounds,
    divergences,
    generate_metrics,
    load_transactions,
    receipt_wait_time,
    replica_lag,
    runs,
    sequencer_head,
)

__all__ = [
    "REGISTRY",
    "check_rounds",
    "divergences",
    "generate_metrics",
    "load_transactions",
    "receipt_wait_time",
    "replica_lag",
    "runs",
    "sequencer_head",
]

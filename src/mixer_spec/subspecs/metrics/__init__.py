"""
Metrics module for observability.

Provides counters, gauges, and histograms for tracking mixer client behavior.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    deposits_total,
    generate_metrics,
    proof_generation_time,
    tree_leaves,
    withdrawals_total,
)

__all__ = [
    "REGISTRY",
    "deposits_total",
    "generate_metrics",
    "proof_generation_time",
    "tree_leaves",
    "withdrawals_total",
]

"""
Metric registry using prometheus_client.

Provides pre-defined metrics for a mixer client.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a dedicated registry for mixer metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Tree Mirror
# -----------------------------------------------------------------------------

tree_leaves = Gauge(
    "mixer_tree_leaves",
    "Leaves in the client-side tree mirror",
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Deposits and Withdrawals
# -----------------------------------------------------------------------------

deposits_total = Counter(
    "mixer_deposits_total",
    "Deposits submitted, by outcome",
    ["outcome"],
    registry=REGISTRY,
)

withdrawals_total = Counter(
    "mixer_withdrawals_total",
    "Withdrawals attempted, by final state",
    ["outcome"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Proving
# -----------------------------------------------------------------------------

proof_generation_time = Histogram(
    "mixer_proof_generation_seconds",
    "Proof generation duration",
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)

"""Tests for the metric registry."""

from __future__ import annotations

from mixer_spec.subspecs.client import MixerClient
from mixer_spec.subspecs.metrics import REGISTRY, generate_metrics
from tests.mixer_spec.helpers import DEPOSITOR, RECIPIENT, RELAYER


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels or {})
    return 0.0 if value is None else value


def test_exposition_names() -> None:
    output = generate_metrics().decode()
    for name in (
        "mixer_tree_leaves",
        "mixer_deposits_total",
        "mixer_withdrawals_total",
        "mixer_proof_generation_seconds",
    ):
        assert name in output


async def test_client_updates_metrics(client: MixerClient) -> None:
    deposits = _sample("mixer_deposits_total", {"outcome": "confirmed"})
    confirmed = _sample("mixer_withdrawals_total", {"outcome": "confirmed"})
    rejected = _sample("mixer_withdrawals_total", {"outcome": "rejected"})
    proofs = _sample("mixer_proof_generation_seconds_count")

    note, _ = client.deposit(DEPOSITOR)
    assert _sample("mixer_deposits_total", {"outcome": "confirmed"}) == deposits + 1
    assert _sample("mixer_tree_leaves") == 1

    await client.withdraw(note, RECIPIENT, RELAYER)
    await client.withdraw(note, RECIPIENT, RELAYER)

    assert _sample("mixer_withdrawals_total", {"outcome": "confirmed"}) == confirmed + 1
    assert _sample("mixer_withdrawals_total", {"outcome": "rejected"}) == rejected + 1
    assert _sample("mixer_proof_generation_seconds_count") == proofs + 2

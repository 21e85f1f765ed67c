"""
Shared pytest fixtures for all mixer_spec tests.

Provides a ledger with the mixer program and a fake verifier deployed, funded
accounts, and an initialized client.
"""

from __future__ import annotations

import pytest

from mixer_spec.subspecs.client import MixerClient
from mixer_spec.subspecs.instructions import MixerAddresses
from mixer_spec.subspecs.ledger import Ledger
from mixer_spec.subspecs.mixer import TEST_CONFIG
from mixer_spec.subspecs.program import deploy
from tests.mixer_spec.helpers import (
    DENOMINATION,
    DEPOSITOR,
    PAYER,
    PROGRAM_ID,
    RELAYER,
    VERIFIER_ID,
    FakeProver,
    FakeVerifier,
)


@pytest.fixture
def verifier() -> FakeVerifier:
    """Verifier accepting only proofs from the fake prover."""
    return FakeVerifier()


@pytest.fixture
def ledger(verifier: FakeVerifier) -> Ledger:
    """Ledger with the mixer and verifier deployed and the actors funded."""
    ledger = Ledger()
    deploy(ledger, PROGRAM_ID, VERIFIER_ID)
    ledger.register_verifier(VERIFIER_ID, verifier)
    ledger.fund(PAYER, 100 * DENOMINATION)
    ledger.fund(DEPOSITOR, 100 * DENOMINATION)
    ledger.fund(RELAYER, DENOMINATION)
    return ledger


@pytest.fixture
def addresses() -> MixerAddresses:
    """Addresses of the test deployment."""
    return MixerAddresses.derive(PROGRAM_ID, VERIFIER_ID)


@pytest.fixture
def prover() -> FakeProver:
    """Prover checking the circuit relations in Python."""
    return FakeProver()


@pytest.fixture
def client(ledger: Ledger, addresses: MixerAddresses, prover: FakeProver) -> MixerClient:
    """Client over an initialized mixer with the end-to-end denomination."""
    client = MixerClient(ledger, addresses, prover, config=TEST_CONFIG)
    client.initialize(PAYER, DENOMINATION)
    return client

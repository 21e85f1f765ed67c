"""Test helpers for the mixer specification."""

from .builders import (
    DENOMINATION,
    DEPOSITOR,
    PAYER,
    PROGRAM_ID,
    RECIPIENT,
    RELAYER,
    VERIFIER_ID,
    make_address,
    make_commitments,
    naive_root,
)
from .mocks import (
    FailingProver,
    FakeProver,
    FakeVerifier,
    encode_public_witness,
    fake_proof_with_witness,
)

__all__ = [
    "DENOMINATION",
    "DEPOSITOR",
    "PAYER",
    "PROGRAM_ID",
    "RECIPIENT",
    "RELAYER",
    "VERIFIER_ID",
    "FailingProver",
    "FakeProver",
    "FakeVerifier",
    "encode_public_witness",
    "fake_proof_with_witness",
    "make_address",
    "make_commitments",
    "naive_root",
]

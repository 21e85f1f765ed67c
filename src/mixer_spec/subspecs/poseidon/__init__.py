"""Circomlib-compatible Poseidon hash over BN254."""

from .constants import FULL_ROUNDS, PARTIAL_ROUNDS, S_BOX_DEGREE
from .grain import GrainLFSR
from .hash import hash1, hash2, poseidon_hash
from .permutation import PoseidonParams, params_for_width, permute

__all__ = [
    "FULL_ROUNDS",
    "PARTIAL_ROUNDS",
    "S_BOX_DEGREE",
    "GrainLFSR",
    "PoseidonParams",
    "params_for_width",
    "permute",
    "poseidon_hash",
    "hash1",
    "hash2",
]

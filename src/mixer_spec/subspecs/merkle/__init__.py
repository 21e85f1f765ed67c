"""Incremental Poseidon Merkle tree accumulating deposit commitments."""

from .proof import MerkleProof, compute_root, verify_proof
from .tree import IncrementalMerkleTree
from .zeros import TREE_DEPTH, ZERO_LEAF, zero_values

__all__ = [
    "TREE_DEPTH",
    "ZERO_LEAF",
    "zero_values",
    "MerkleProof",
    "compute_root",
    "verify_proof",
    "IncrementalMerkleTree",
]

"""Inclusion proofs (sibling paths) for the incremental Merkle tree."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from pydantic import model_validator

from mixer_spec.types import StrictBaseModel

from ..bn254.field import Fr
from ..poseidon import hash2


class MerkleProof(StrictBaseModel):
    """
    The path from one leaf to the root, as read from the tree at proof time.

    Siblings are live values: a proof taken after later insertions reflects
    the tree as it is now, and verifies against the root stored alongside it.
    """

    root: Fr
    """The tree root when the proof was taken."""

    leaf: Fr
    """The leaf value (the commitment)."""

    leaf_index: int
    """Position of the leaf in insertion order."""

    siblings: list[Fr]
    """Sibling at each level, from the leaf level upwards."""

    is_even: list[bool]
    """Whether the tracked node was the left child at each level."""

    @model_validator(mode="after")
    def check_path_lengths(self) -> MerkleProof:
        """Siblings and parity flags describe the same levels."""
        if len(self.siblings) != len(self.is_even):
            raise ValueError("siblings and is_even must have the same length")
        return self

    @property
    def depth(self) -> int:
        """Number of levels in the path."""
        return len(self.siblings)

    @property
    def path_indices(self) -> list[int]:
        """Parity bits in 0 (left) / 1 (right) form."""
        return [0 if even else 1 for even in self.is_even]


def compute_root(
    leaf: Fr,
    siblings: Sequence[Fr],
    is_even: Sequence[bool],
    hasher: Callable[[Fr, Fr], Fr] = hash2,
) -> Fr:
    """
    Folds a leaf up its sibling path.

    At each level the running node is the left argument when `is_even` is set
    and the right argument otherwise.
    """
    current = leaf
    for sibling, even in zip(siblings, is_even, strict=True):
        current = hasher(current, sibling) if even else hasher(sibling, current)
    return current


def verify_proof(proof: MerkleProof, hasher: Callable[[Fr, Fr], Fr] = hash2) -> bool:
    """
    Checks that a proof's path recomputes its root.

    The parity flags must also agree with the binary form of `leaf_index`,
    otherwise the proof would open a different position.
    """
    expected_parity = [((proof.leaf_index >> level) & 1) == 0 for level in range(proof.depth)]
    if proof.is_even != expected_parity:
        return False
    return compute_root(proof.leaf, proof.siblings, proof.is_even, hasher) == proof.root

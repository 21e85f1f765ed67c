"""
The incremental Merkle tree of deposit commitments.

Leaves are appended in order and never removed. Only populated nodes are
stored; every other coordinate resolves to the zero value of its level, so
storage grows with `leaves * depth` rather than `2^depth`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from mixer_spec.types import CapacityExceeded, LeafNotFound

from ..bn254.field import Fr
from ..poseidon import hash2
from ..storage import MemoryNodeStore, NodeStore
from .proof import MerkleProof, compute_root
from .zeros import TREE_DEPTH, ZERO_LEAF, zero_values

logger = logging.getLogger(__name__)


class IncrementalMerkleTree:
    """
    Append-only Merkle tree over a node store.

    The root lives at `(depth, 0)`. Each insert rewrites the path from the new
    leaf to the root, hashing `(left, right)` by index parity at every level.
    """

    def __init__(
        self,
        depth: int = TREE_DEPTH,
        store: NodeStore | None = None,
        hasher: Callable[[Fr, Fr], Fr] = hash2,
        zero_leaf: Fr = ZERO_LEAF,
    ) -> None:
        """
        Open a tree, resuming from whatever the store already holds.

        Args:
            depth: Number of levels above the leaves.
            store: Node storage; a fresh in-memory store if omitted.
            hasher: Two-input node hash.
            zero_leaf: Default value of an empty leaf.
        """
        if depth < 1:
            raise ValueError(f"Tree depth must be positive, got {depth}")

        self._depth = depth
        self._store: NodeStore = store if store is not None else MemoryNodeStore()
        self._hasher = hasher
        self._zeros = zero_values(depth, zero_leaf, hasher)

    @property
    def depth(self) -> int:
        """Number of levels above the leaves."""
        return self._depth

    @property
    def capacity(self) -> int:
        """Maximum number of leaves, `2^depth`."""
        return 1 << self._depth

    @property
    def leaf_count(self) -> int:
        """Number of leaves inserted so far."""
        return self._store.get_leaf_count()

    @property
    def zeros(self) -> tuple[Fr, ...]:
        """Per-level default values, `Z[0..depth]`."""
        return self._zeros

    def __len__(self) -> int:
        return self.leaf_count

    def _node(self, level: int, index: int) -> Fr:
        """Stored node value, or the level's zero value if unpopulated."""
        value = self._store.get_node(level, index)
        return self._zeros[level] if value is None else value

    def insert(self, leaf: Fr) -> int:
        """
        Append a leaf and recompute the path to the root.

        The path and the leaf count are written in one store batch; a failure
        part-way leaves the tree as it was.

        Returns:
            The index assigned to the leaf.

        Raises:
            CapacityExceeded: If the tree already holds `2^depth` leaves.
        """
        index = self._store.get_leaf_count()
        if index >= self.capacity:
            raise CapacityExceeded(self.capacity)

        current = leaf
        current_index = index
        with self._store.batch():
            for level in range(self._depth):
                self._store.put_node(level, current_index, current)
                sibling = self._node(level, current_index ^ 1)
                if current_index % 2 == 0:
                    current = self._hasher(current, sibling)
                else:
                    current = self._hasher(sibling, current)
                current_index //= 2

            self._store.put_node(self._depth, 0, current)
            self._store.put_leaf_count(index + 1)

        logger.debug("Inserted leaf %d, new root %s", index, current.hex())
        return index

    def root(self) -> Fr:
        """Current root, or `Z[depth]` for an empty tree."""
        return self._node(self._depth, 0)

    @property
    def root_hex(self) -> str:
        """Current root in 0x-prefixed hex."""
        return self.root().hex()

    def proof(self, index: int) -> MerkleProof:
        """
        Read the sibling path for an inserted leaf.

        The siblings are the values stored now, so the proof always matches
        the root returned with it.

        Raises:
            LeafNotFound: If no leaf was ever inserted at `index`.
        """
        if not 0 <= index < self.leaf_count:
            raise LeafNotFound(index)

        leaf = self._node(0, index)
        siblings: list[Fr] = []
        is_even: list[bool] = []

        current_index = index
        for level in range(self._depth):
            siblings.append(self._node(level, current_index ^ 1))
            is_even.append(current_index % 2 == 0)
            current_index //= 2

        return MerkleProof(
            root=self.root(),
            leaf=leaf,
            leaf_index=index,
            siblings=siblings,
            is_even=is_even,
        )

    def index_of(self, leaf: Fr) -> int | None:
        """First index holding `leaf`, or None if it was never inserted."""
        for index, value in self._store.iter_leaves():
            if value == leaf:
                return index
        return None

    def verify(self, proof: MerkleProof) -> bool:
        """Whether `proof` recomputes this tree's current root."""
        if proof.depth != self._depth:
            return False
        return compute_root(proof.leaf, proof.siblings, proof.is_even, self._hasher) == self.root()

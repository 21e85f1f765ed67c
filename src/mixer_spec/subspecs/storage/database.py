"""
Abstract node-store interface for the incremental Merkle tree.

Defines the Protocol that all node-store implementations must follow.
Uses structural subtyping for flexibility.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from mixer_spec.subspecs.bn254 import Fr


class NodeStore(Protocol):
    """
    Protocol for sparse Merkle node storage.

    Storage Organization
    --------------------
    - Nodes: Indexed by `(level, index)`. Level 0 holds leaves; level `depth`
      holds the root at index 0. Only populated nodes are stored; absent
      coordinates resolve to the per-level zero value in the tree itself.
    - Leaf count: The number of leaves inserted so far.
    """

    def get_node(self, level: int, index: int) -> Fr | None:
        """
        Retrieve a node value.

        Args:
            level: Tree level, 0 for leaves.
            index: Position within the level.

        Returns:
            The stored value, or None if the node was never populated.
        """
        ...

    def put_node(self, level: int, index: int, value: Fr) -> None:
        """
        Store a node value, replacing any previous value.

        Args:
            level: Tree level, 0 for leaves.
            index: Position within the level.
            value: The node value.
        """
        ...

    def get_leaf_count(self) -> int:
        """Number of leaves inserted so far (0 for a fresh store)."""
        ...

    def put_leaf_count(self, count: int) -> None:
        """Record the number of leaves inserted so far."""
        ...

    def iter_leaves(self) -> list[tuple[int, Fr]]:
        """All populated leaves as `(index, value)`, in index order."""
        ...

    def batch(self) -> AbstractContextManager[None]:
        """
        Group writes so they apply together.

        Every write made inside the block is discarded if the block raises.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the store."""
        ...

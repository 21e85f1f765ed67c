"""In-memory node store backed by a dict keyed on `(level, index)`."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from mixer_spec.subspecs.bn254 import Fr


class MemoryNodeStore:
    """Dict-backed implementation of the NodeStore protocol."""

    def __init__(self) -> None:
        """Start with no populated nodes."""
        self._nodes: dict[tuple[int, int], Fr] = {}
        self._leaf_count = 0

    def get_node(self, level: int, index: int) -> Fr | None:
        """Retrieve a node value, or None if never populated."""
        return self._nodes.get((level, index))

    def put_node(self, level: int, index: int, value: Fr) -> None:
        """Store a node value."""
        self._nodes[(level, index)] = value

    def get_leaf_count(self) -> int:
        """Number of leaves inserted so far."""
        return self._leaf_count

    def put_leaf_count(self, count: int) -> None:
        """Record the number of leaves inserted so far."""
        self._leaf_count = count

    def iter_leaves(self) -> list[tuple[int, Fr]]:
        """All populated leaves in index order."""
        return sorted(
            ((index, value) for (level, index), value in self._nodes.items() if level == 0),
            key=lambda item: item[0],
        )

    def __len__(self) -> int:
        """Number of populated nodes across all levels."""
        return len(self._nodes)

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Restore the nodes and leaf count if the block raises."""
        nodes = dict(self._nodes)
        leaf_count = self._leaf_count
        try:
            yield
        except BaseException:
            self._nodes = nodes
            self._leaf_count = leaf_count
            raise

    def close(self) -> None:
        """Nothing to release."""

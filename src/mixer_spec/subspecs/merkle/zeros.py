"""
Default ("zero") node values for every level of the tree.

An unpopulated node at level `l` behaves as if it held `Z[l]`, where `Z[0]`
is a fixed constant and `Z[l + 1] = hash2(Z[l], Z[l])`. The root of an empty
tree of depth `D` is therefore `Z[D]`.
"""

from collections.abc import Callable
from functools import cache

from typing_extensions import Final

from ..bn254.field import Fr
from ..poseidon import hash2

TREE_DEPTH: Final = 20
"""Depth of the deposit tree; capacity is 2^20 leaves."""

ZERO_LEAF: Final = Fr(value=0x0D823319708AB99EC915EFD4F7E03D11CA1790918E8F04CD14100ACECA2AA9FF)
"""The value of an empty leaf, `Z[0]`, shared with the circuit."""


@cache
def zero_values(
    depth: int,
    zero_leaf: Fr = ZERO_LEAF,
    hasher: Callable[[Fr, Fr], Fr] = hash2,
) -> tuple[Fr, ...]:
    """
    Computes `Z[0..depth]` (inclusive) by repeatedly hashing the zero leaf.

    Results are cached per `(depth, zero_leaf, hasher)`.

    Args:
        depth: The tree depth.
        zero_leaf: The level-0 default value.
        hasher: The two-input node hash.

    Returns:
        A tuple of `depth + 1` values; the last one is the empty-tree root.
    """
    zeros = [zero_leaf]
    for _ in range(depth):
        zeros.append(hasher(zeros[-1], zeros[-1]))
    return tuple(zeros)

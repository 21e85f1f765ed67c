"""
Poseidon hashing of field elements, matching circomlib's `poseidon(inputs)`.

The sponge is a single permutation call: the state is `[0, inputs...]`, so the
width is always `len(inputs) + 1`, and the digest is the first state element.
"""

from typing import Sequence

from ..bn254.field import Fr
from .permutation import params_for_width, permute


def poseidon_hash(inputs: Sequence[Fr]) -> Fr:
    """
    Hashes a short, fixed-length sequence of field elements.

    Args:
        inputs: Between one and eight field elements.

    Returns:
        The digest, as a field element.
    """
    if not inputs:
        raise ValueError("Poseidon needs at least one input")

    params = params_for_width(len(inputs) + 1)
    state = [Fr(value=0), *inputs]
    return permute(state, params)[0]


def hash1(a: Fr) -> Fr:
    """One-input hash; used to derive nullifier hashes."""
    return poseidon_hash([a])


def hash2(a: Fr, b: Fr) -> Fr:
    """
    Two-input, order-sensitive hash.

    Used for commitments `hash2(nullifier, secret)` and for every interior
    node of the Merkle tree `hash2(left, right)`.
    """
    return poseidon_hash([a, b])

"""
Round counts and instance identifiers for Poseidon over BN254.

These are the values used by circomlib (and by Noir's `poseidon::bn254`),
so that hashes computed here match the ones computed inside the circuit.
"""

from typing_extensions import Final

S_BOX_DEGREE: Final = 5
"""
The S-box exponent `alpha`.

`gcd(5, p - 1) = 1` for the BN254 scalar field, so `x -> x^5` is a permutation.
"""

FULL_ROUNDS: Final = 8
"""Total number of full rounds, split evenly before and after the partial rounds."""

PARTIAL_ROUNDS: Final[dict[int, int]] = {
    2: 56,
    3: 57,
    4: 56,
    5: 60,
    6: 60,
    7: 63,
    8: 64,
    9: 63,
}
"""Number of partial rounds, indexed by state width `t` (inputs + 1)."""

GRAIN_FIELD_PRIME: Final = 1
"""Grain seed tag for a prime field (0 would mean a binary field)."""

GRAIN_SBOX_POWER: Final = 0
"""Grain seed tag for an `x^alpha` S-box (1 would mean `x^-1`)."""

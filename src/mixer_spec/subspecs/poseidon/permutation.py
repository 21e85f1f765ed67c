"""
A minimal Python model of the Poseidon permutation over BN254.

The design is based on the paper "Poseidon: A New Hash Function for
Zero-Knowledge Proof Systems" (https://eprint.iacr.org/2019/458).

This is the plain (non-optimized) round structure, as run by circomlib's
reference implementation: every round adds constants to the whole state, and
every round ends with a dense MDS multiplication.
"""

from functools import cache
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..bn254.field import P, P_BITS, Fr
from .constants import (
    FULL_ROUNDS,
    GRAIN_FIELD_PRIME,
    GRAIN_SBOX_POWER,
    PARTIAL_ROUNDS,
    S_BOX_DEGREE,
)
from .grain import GrainLFSR

# =================================================================
# Poseidon Parameter Definitions
# =================================================================


class PoseidonParams(BaseModel):
    """Parameters for a specific Poseidon instance."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    width: int = Field(gt=1, description="The size of the state (t).")
    rounds_f: int = Field(gt=0, description="Total number of 'full' rounds.")
    rounds_p: int = Field(ge=0, description="Total number of 'partial' rounds.")
    round_constants: List[Fr] = Field(
        min_length=1,
        description="Pre-computed constants, `width` per round, for all rounds.",
    )
    mds_matrix: List[List[Fr]] = Field(
        min_length=1,
        description="The `width x width` MDS matrix applied at the end of each round.",
    )

    @model_validator(mode="after")
    def check_lengths(self) -> "PoseidonParams":
        """Ensures vector lengths match the configuration."""
        expected_constants = (self.rounds_f + self.rounds_p) * self.width
        if len(self.round_constants) != expected_constants:
            raise ValueError("Incorrect number of round constants provided.")

        if len(self.mds_matrix) != self.width or any(
            len(row) != self.width for row in self.mds_matrix
        ):
            raise ValueError("MDS matrix must be width x width.")

        return self


def _generate_mds(grain: GrainLFSR, width: int) -> List[List[Fr]]:
    """
    Draws a Cauchy MDS matrix `M[i][j] = 1 / (x_i + y_j)` from the LFSR.

    The `2 * width` points are reduced modulo P (no rejection), and the whole
    draw is repeated if the points are not pairwise distinct or if any
    denominator vanishes.
    """
    while True:
        points = [grain.random_bits(P_BITS) % P for _ in range(2 * width)]
        while len(set(points)) != len(points):
            points = [grain.random_bits(P_BITS) % P for _ in range(2 * width)]

        xs, ys = points[:width], points[width:]
        if any((x + y) % P == 0 for x in xs for y in ys):
            continue

        return [[Fr(value=x + y).inverse() for y in ys] for x in xs]


@cache
def params_for_width(width: int) -> PoseidonParams:
    """
    Derives (once) the circomlib parameters for a state of `width` elements.

    The LFSR is consumed in a fixed order: all round constants first, then the
    MDS matrix.

    Args:
        width: The state width `t`, i.e. the number of inputs plus one.

    Returns:
        The parameter set for that width.
    """
    if width not in PARTIAL_ROUNDS:
        raise ValueError(f"Unsupported Poseidon width {width}")

    rounds_p = PARTIAL_ROUNDS[width]
    grain = GrainLFSR(
        field=GRAIN_FIELD_PRIME,
        sbox=GRAIN_SBOX_POWER,
        field_size=P_BITS,
        width=width,
        rounds_f=FULL_ROUNDS,
        rounds_p=rounds_p,
    )

    num_constants = (FULL_ROUNDS + rounds_p) * width
    round_constants = [Fr(value=grain.field_element(P_BITS, P)) for _ in range(num_constants)]
    mds_matrix = _generate_mds(grain, width)

    return PoseidonParams(
        width=width,
        rounds_f=FULL_ROUNDS,
        rounds_p=rounds_p,
        round_constants=round_constants,
        mds_matrix=mds_matrix,
    )


def mds_layer(state: List[Fr], params: PoseidonParams) -> List[Fr]:
    """
    Applies the dense MDS matrix to the state.

    Args:
        state: The current state vector.
        params: The parameter set holding the matrix.

    Returns:
        The state vector after the matrix-vector product.
    """
    return [
        sum((m_ij * s_j for m_ij, s_j in zip(row, state, strict=True)), Fr(value=0))
        for row in params.mds_matrix
    ]


def permute(state: List[Fr], params: PoseidonParams) -> List[Fr]:
    """
    Performs the full Poseidon permutation on the given state.

    The permutation follows the structure:
    Full Rounds (R_F / 2) -> Partial Rounds (R_P) -> Full Rounds (R_F / 2)

    Args:
        state: A list of Fr elements representing the current state.
        params: The object defining the permutation's configuration.

    Returns:
        The new state after applying the permutation.
    """
    if len(state) != params.width:
        raise ValueError(f"Input state must have length {params.width}")

    width = params.width
    half_rounds_f = params.rounds_f // 2
    total_rounds = params.rounds_f + params.rounds_p
    round_constants = params.round_constants

    state = list(state)
    for r in range(total_rounds):
        # Add this round's constants to the entire state.
        offset = r * width
        state = [s + round_constants[offset + i] for i, s in enumerate(state)]

        # Full rounds apply the S-box everywhere, partial rounds to the first element only.
        if r < half_rounds_f or r >= half_rounds_f + params.rounds_p:
            state = [s**S_BOX_DEGREE for s in state]
        else:
            state[0] = state[0] ** S_BOX_DEGREE

        state = mds_layer(state, params)

    return state

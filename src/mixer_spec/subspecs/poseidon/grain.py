"""
The Grain LFSR used to derive Poseidon round constants and MDS matrices.

The Poseidon reference derives every instance parameter from a self-shrinking
Grain LFSR seeded with the instance description. Reproducing that procedure
exactly is what makes the resulting constants identical to circomlib's.

Seed layout (80 bits, most significant bit first):

    field (2) | sbox (4) | field size n (12) | width t (12) | R_F (10) | R_P (10) | 1...1 (30)
"""

from collections import deque

STATE_BITS = 80
"""Width of the LFSR state in bits."""

WARMUP_CLOCKS = 160
"""Number of initial outputs discarded after seeding."""

_TAPS = (62, 51, 38, 23, 13, 0)
"""Feedback taps: b[i+80] = b[i+62] ^ b[i+51] ^ b[i+38] ^ b[i+23] ^ b[i+13] ^ b[i]."""


def _to_bits(value: int, width: int) -> list[int]:
    """Big-endian bit decomposition of `value` into exactly `width` bits."""
    if value >= (1 << width):
        raise ValueError(f"{value} does not fit in {width} bits")
    return [(value >> (width - 1 - i)) & 1 for i in range(width)]


class GrainLFSR:
    """A self-shrinking Grain LFSR seeded with a Poseidon instance description."""

    def __init__(
        self,
        field: int,
        sbox: int,
        field_size: int,
        width: int,
        rounds_f: int,
        rounds_p: int,
    ) -> None:
        """
        Seed the register and run the warm-up clocks.

        Args:
            field: 1 for a prime field.
            sbox: 0 for `x^alpha`.
            field_size: Bit length of the field modulus.
            width: State width `t`.
            rounds_f: Number of full rounds.
            rounds_p: Number of partial rounds.
        """
        seed = (
            _to_bits(field, 2)
            + _to_bits(sbox, 4)
            + _to_bits(field_size, 12)
            + _to_bits(width, 12)
            + _to_bits(rounds_f, 10)
            + _to_bits(rounds_p, 10)
            + [1] * 30
        )
        assert len(seed) == STATE_BITS

        self._state: deque[int] = deque(seed, maxlen=STATE_BITS)
        for _ in range(WARMUP_CLOCKS):
            self._clock()

    def _clock(self) -> int:
        """Advance the register by one step and return the new bit."""
        state = self._state
        new_bit = 0
        for tap in _TAPS:
            new_bit ^= state[tap]
        # maxlen drops the oldest bit on append.
        state.append(new_bit)
        return new_bit

    def next_bit(self) -> int:
        """
        Produce one output bit using the self-shrinking rule.

        Bits are drawn in pairs; when the first bit is 1 the second is output,
        otherwise the pair is discarded.
        """
        while True:
            selector = self._clock()
            candidate = self._clock()
            if selector == 1:
                return candidate

    def random_bits(self, num_bits: int) -> int:
        """Draw `num_bits` output bits and read them as a big-endian integer."""
        value = 0
        for _ in range(num_bits):
            value = (value << 1) | self.next_bit()
        return value

    def field_element(self, num_bits: int, modulus: int) -> int:
        """Draw integers until one falls below `modulus` (rejection sampling)."""
        value = self.random_bits(num_bits)
        while value >= modulus:
            value = self.random_bits(num_bits)
        return value

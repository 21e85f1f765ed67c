"""
Account addresses and program-derived address (PDA) derivation.

An address is 32 bytes, shown as Base58 text. A PDA is a hash of seeds and a
program id that deliberately falls off the ed25519 curve, so no private key
exists for it and only the deriving program can sign on its behalf.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence

from typing_extensions import Final, Self

from mixer_spec.types import BaseBytes, InvalidAccount


class Base58:
    """
    Base58 encoding/decoding (Bitcoin-style alphabet).

    The alphabet is: 123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz
    """

    ALPHABET: Final[str] = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
    """Base58 alphabet (Bitcoin style, excludes 0, O, I, l)."""

    @classmethod
    def encode(cls, data: bytes) -> str:
        """
        Encode bytes as Base58 string.

        Leading zero bytes become leading '1' characters.
        """
        leading_zeros = len(data) - len(data.lstrip(b"\x00"))

        num = int.from_bytes(data, "big")
        result: list[str] = []
        while num > 0:
            num, remainder = divmod(num, 58)
            result.append(cls.ALPHABET[remainder])

        result.extend([cls.ALPHABET[0]] * leading_zeros)
        return "".join(reversed(result))

    @classmethod
    def decode(cls, s: str) -> bytes:
        """
        Decode Base58 string to bytes.

        Leading '1' characters become leading zero bytes.

        Raises:
            ValueError: If string contains invalid characters.
        """
        leading_ones = len(s) - len(s.lstrip(cls.ALPHABET[0]))

        num = 0
        for char in s:
            index = cls.ALPHABET.find(char)
            if index < 0:
                raise ValueError(f"Invalid Base58 character: {char!r}")
            num = num * 58 + index

        result = b"" if num == 0 else num.to_bytes((num.bit_length() + 7) // 8, "big")
        return b"\x00" * leading_ones + result


class Address(BaseBytes):
    """A 32-byte account address."""

    LENGTH = 32

    @classmethod
    def from_base58(cls, text: str) -> Self:
        """Parse the Base58 text form."""
        return cls(Base58.decode(text))

    def to_base58(self) -> str:
        """Base58 text form."""
        return Base58.encode(bytes(self))

    def __str__(self) -> str:
        return self.to_base58()

    def __repr__(self) -> str:
        return f"Address({self.to_base58()})"


SYSTEM_PROGRAM_ID: Final = Address.zero()
"""The system program, `11111111111111111111111111111111`."""

MAX_SEEDS: Final = 16
"""Maximum number of seeds in one derivation, bump included."""

MAX_SEED_LENGTH: Final = 32
"""Maximum length of a single seed in bytes."""

PDA_MARKER: Final = b"ProgramDerivedAddress"
"""Domain separator appended to every PDA preimage."""

# =================================================================
# Ed25519 point decompression, only as far as deciding curve membership.
# =================================================================

_ED25519_Q: Final = 2**255 - 19
"""The ed25519 base field prime."""

_ED25519_D: Final = (-121665 * pow(121666, _ED25519_Q - 2, _ED25519_Q)) % _ED25519_Q
"""The twisted Edwards curve constant `d = -121665 / 121666`."""


def is_on_curve(data: bytes) -> bool:
    """
    Whether 32 bytes decompress to an ed25519 point.

    The encoding is the little-endian `y` coordinate with the sign of `x` in
    the top bit. A point exists iff `x^2 = (y^2 - 1) / (d*y^2 + 1)` has a
    solution, i.e. the right-hand side is zero or a quadratic residue.
    """
    q = _ED25519_Q
    y = (int.from_bytes(data, "little") & ((1 << 255) - 1)) % q
    y_squared = y * y % q
    u = (y_squared - 1) % q
    v = (_ED25519_D * y_squared + 1) % q

    if u == 0:
        return True
    if v == 0:
        return False

    x_squared = u * pow(v, q - 2, q) % q
    return pow(x_squared, (q - 1) // 2, q) == 1


def _check_seeds(seeds: Sequence[bytes]) -> None:
    """Enforce the seed count and length limits."""
    if len(seeds) > MAX_SEEDS:
        raise InvalidAccount(f"At most {MAX_SEEDS} seeds allowed, got {len(seeds)}")
    if any(len(seed) > MAX_SEED_LENGTH for seed in seeds):
        raise InvalidAccount(f"Seeds must be at most {MAX_SEED_LENGTH} bytes")


def create_program_address(seeds: Sequence[bytes], program_id: Address) -> Address:
    """
    Hash seeds into an address owned by `program_id`.

    Raises:
        InvalidAccount: If the seeds are too many or too long, or the hash
            lands on the curve.
    """
    _check_seeds(seeds)

    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(bytes(program_id))
    hasher.update(PDA_MARKER)
    digest = hasher.digest()

    if is_on_curve(digest):
        raise InvalidAccount("Derived address is on the ed25519 curve")
    return Address(digest)


def find_program_address(seeds: Sequence[bytes], program_id: Address) -> tuple[Address, int]:
    """
    Find the canonical PDA for `seeds`.

    Tries bump seeds from 255 downwards and returns the first that yields an
    off-curve address, together with that bump.

    Raises:
        InvalidAccount: If no bump works (astronomically unlikely).
    """
    _check_seeds([*seeds, b"\x00"])

    for bump in range(255, -1, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except InvalidAccount:
            continue
    raise InvalidAccount("Unable to find a viable program address bump seed")

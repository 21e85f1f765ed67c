"""
Deposit notes: the secret pair behind a commitment.

A note is everything a depositor must keep to withdraw later. Losing it
forfeits the deposit; leaking it lets anyone withdraw.
"""

from __future__ import annotations

import secrets

from mixer_spec.types import Bytes32, StrictBaseModel

from ..bn254.field import P, P_BYTES, Fr
from ..poseidon import hash1, hash2


class Note(StrictBaseModel):
    """A `(nullifier, secret)` pair of field elements."""

    nullifier: Fr
    """Revealed only as its hash, at withdrawal."""

    secret: Fr
    """Never revealed."""

    @classmethod
    def generate(cls) -> Note:
        """Draw both halves uniformly below the field modulus."""
        return cls(
            nullifier=Fr(value=secrets.randbelow(P)),
            secret=Fr(value=secrets.randbelow(P)),
        )

    @property
    def commitment(self) -> Fr:
        """The public leaf, `Hash2(nullifier, secret)`."""
        return hash2(self.nullifier, self.secret)

    @property
    def nullifier_hash(self) -> Fr:
        """The double-spend tag, `Hash1(nullifier)`."""
        return hash1(self.nullifier)

    def to_hex(self) -> str:
        """Backup form: `0x` followed by the nullifier then the secret, 64 hex chars each."""
        return "0x" + self.nullifier.hex()[2:] + self.secret.hex()[2:]

    @classmethod
    def from_hex(cls, text: str) -> Note:
        """
        Parse the backup form produced by `to_hex`.

        Raises:
            ValueError: If the text has the wrong length or a half is not below P.
        """
        digits = text.removeprefix("0x")
        if len(digits) != 4 * P_BYTES:
            raise ValueError(f"Note backup must be {4 * P_BYTES} hex digits, got {len(digits)}")
        return cls(
            nullifier=Fr.from_hex(digits[: 2 * P_BYTES]),
            secret=Fr.from_hex(digits[2 * P_BYTES :]),
        )


def nullifier_hash_bytes(nullifier_hash: Fr) -> Bytes32:
    """Wire (and record seed) form of a nullifier hash: 32 bytes little-endian."""
    return nullifier_hash.to_bytes32("little")


def root_bytes(root: Fr) -> Bytes32:
    """Wire form of a tree root: 32 bytes big-endian, the same bytes as its hex."""
    return root.to_bytes32("big")

"""Core definition of the BN254 scalar field Fr."""

from typing import Literal, Self

from pydantic import Field, field_validator

from mixer_spec.types import Bytes32, InvalidLength, StrictBaseModel

# =================================================================
# Field Constants
#
# The scalar field of the BN254 (alt_bn128) curve. The withdrawal circuit,
# its Poseidon hash and the Groth16 verifier all work over this field.
# =================================================================

P: int = 21888242871839275222246405745257275088548364400416034343698204186575808495617
"""The BN254 scalar field modulus (the group order of alt_bn128)."""

P_BITS: int = 254
"""The number of bits in the prime P."""

P_BYTES: int = 32
"""The size of a serialized field element in bytes."""


# =================================================================
# Scalar Field Fr
#
# All arithmetic is performed modulo P.
# =================================================================


class Fr(StrictBaseModel):
    """An element in the BN254 scalar field."""

    value: int = Field(ge=0, lt=P, description="Field element value in the range [0, P)")

    @field_validator("value", mode="before")
    @classmethod
    def reduce_modulo_p(cls, v: int) -> int:
        """Reduces an integer input modulo P before validation."""
        return v % P

    def __add__(self, other: Self) -> Self:
        """Field addition."""
        return self.__class__(value=self.value + other.value)

    def __sub__(self, other: Self) -> Self:
        """Field subtraction."""
        return self.__class__(value=self.value - other.value)

    def __neg__(self) -> Self:
        """Field negation."""
        return self.__class__(value=-self.value)

    def __mul__(self, other: Self) -> Self:
        """Field multiplication."""
        return self.__class__(value=self.value * other.value)

    def __pow__(self, exponent: int) -> Self:
        """Field exponentiation."""
        return self.__class__(value=pow(self.value, exponent, P))

    def inverse(self) -> Self:
        """Computes the multiplicative inverse."""
        if self.value == 0:
            raise ZeroDivisionError("Cannot invert the zero element.")
        # a^(P-2) is the multiplicative inverse of a in F_p
        return self ** (P - 2)

    def __truediv__(self, other: Self) -> Self:
        """Field division."""
        return self * other.inverse()

    def __int__(self) -> int:
        """Canonical integer value."""
        return self.value

    def to_bytes32(self, byteorder: Literal["little", "big"] = "big") -> Bytes32:
        """
        Serialize to a fixed 32-byte encoding.

        Big-endian is the human-facing form (it matches `hex()`); the wire
        codec picks the byte order per field.
        """
        return Bytes32(self.value.to_bytes(P_BYTES, byteorder=byteorder))

    @classmethod
    def from_bytes32(cls, data: bytes, byteorder: Literal["little", "big"] = "big") -> Self:
        """
        Deserialize a 32-byte encoding.

        Raises:
            InvalidLength: If `data` is not exactly 32 bytes.
            ValueError: If the encoded integer is not below P.
        """
        if len(data) != P_BYTES:
            raise InvalidLength("field element", P_BYTES, len(data))

        value = int.from_bytes(data, byteorder=byteorder)
        if value >= P:
            raise ValueError(f"Value 0x{value:064x} exceeds field modulus")

        return cls(value=value)

    def hex(self) -> str:
        """0x-prefixed, zero-padded 64-character hex form."""
        return f"0x{self.value:064x}"

    @classmethod
    def from_hex(cls, text: str) -> Self:
        """
        Parse a hex string, with or without the 0x prefix.

        Values at or above P are rejected rather than reduced, so a typo in
        a backed-up note cannot silently alias another element.
        """
        value = int(text.removeprefix("0x"), 16)
        if value >= P:
            raise ValueError(f"Value {text} exceeds field modulus")
        return cls(value=value)

    def __repr__(self) -> str:
        return f"Fr({self.hex()})"

"""
Wire format of the mixer program's instructions.

Every instruction is a tag byte followed by its payload:

| Tag | Name       | Payload                                                        |
|-----|------------|----------------------------------------------------------------|
| 0   | Initialize | denomination u64 LE (8)                                        |
| 1   | PushRoot   | root (32)                                                      |
| 2   | Withdraw   | root (32) || nullifier_hash (32) || recipient_field (32) || proof_with_witness |

`proof_with_witness` has no length prefix; it runs to the end of the data.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Union

from typing_extensions import Final

from mixer_spec.types import Bytes32, InvalidInstruction, StrictBaseModel, Uint64

_FIELD_LEN: Final = Bytes32.LENGTH
_WITHDRAW_FIXED_LEN: Final = 3 * _FIELD_LEN


class InstructionTag(IntEnum):
    """First byte of every instruction."""

    INITIALIZE = 0
    PUSH_ROOT = 1
    WITHDRAW = 2


class Initialize(StrictBaseModel):
    """Create the mixer state with a fixed denomination."""

    denomination: Uint64

    def encode(self) -> bytes:
        """Tag byte then the denomination."""
        return bytes([InstructionTag.INITIALIZE]) + self.denomination.to_bytes()


class PushRoot(StrictBaseModel):
    """Append a root to the history window."""

    root: Bytes32

    def encode(self) -> bytes:
        """Tag byte then the root."""
        return bytes([InstructionTag.PUSH_ROOT]) + bytes(self.root)


class Withdraw(StrictBaseModel):
    """Spend one note: cite a root, reveal its nullifier hash, carry the proof."""

    root: Bytes32
    nullifier_hash: Bytes32
    recipient_field: Bytes32
    proof_with_witness: bytes

    def encode(self) -> bytes:
        """Tag byte, the three fixed fields, then the proof blob."""
        return (
            bytes([InstructionTag.WITHDRAW])
            + bytes(self.root)
            + bytes(self.nullifier_hash)
            + bytes(self.recipient_field)
            + self.proof_with_witness
        )

    def public_inputs(self) -> bytes:
        """
        The circuit's public inputs this withdrawal claims.

        Three 32-byte big-endian words: root, nullifier hash, recipient. The
        root travels big-endian already; the other two travel little-endian
        and are reversed here.
        """
        return (
            bytes(self.root)
            + bytes(self.nullifier_hash)[::-1]
            + bytes(self.recipient_field)[::-1]
        )


MixerInstruction = Union[Initialize, PushRoot, Withdraw]
"""Any decoded mixer instruction."""


def encode_initialize(denomination: int) -> bytes:
    """
    Encode an Initialize instruction.

    Raises:
        OverflowError: If the denomination does not fit in a u64.
    """
    return Initialize(denomination=Uint64(denomination)).encode()


def encode_push_root(root: bytes) -> bytes:
    """
    Encode a PushRoot instruction.

    Raises:
        InvalidLength: If `root` is not 32 bytes.
    """
    return PushRoot(root=Bytes32(root)).encode()


def encode_withdraw(
    root: bytes,
    nullifier_hash: bytes,
    recipient_field: bytes,
    proof_with_witness: bytes,
) -> bytes:
    """
    Encode a Withdraw instruction.

    Raises:
        InvalidLength: If any of the three fixed fields is not 32 bytes.
    """
    return Withdraw(
        root=Bytes32(root),
        nullifier_hash=Bytes32(nullifier_hash),
        recipient_field=Bytes32(recipient_field),
        proof_with_witness=bytes(proof_with_witness),
    ).encode()


def decode_instruction(data: bytes) -> MixerInstruction:
    """
    Decode instruction data.

    Raises:
        InvalidInstruction: On empty data, an unknown tag, or a payload of the
            wrong size for its tag.
    """
    if not data:
        raise InvalidInstruction("Empty instruction data")

    tag, payload = data[0], data[1:]

    if tag == InstructionTag.INITIALIZE:
        if len(payload) != Uint64.byte_length():
            raise InvalidInstruction(f"Initialize payload must be 8 bytes, got {len(payload)}")
        return Initialize(denomination=Uint64.decode_bytes(payload))

    if tag == InstructionTag.PUSH_ROOT:
        if len(payload) != _FIELD_LEN:
            raise InvalidInstruction(f"PushRoot payload must be 32 bytes, got {len(payload)}")
        return PushRoot(root=Bytes32(payload))

    if tag == InstructionTag.WITHDRAW:
        if len(payload) < _WITHDRAW_FIXED_LEN:
            raise InvalidInstruction(
                f"Withdraw payload must be at least {_WITHDRAW_FIXED_LEN} bytes, got {len(payload)}"
            )
        return Withdraw(
            root=Bytes32(payload[0:32]),
            nullifier_hash=Bytes32(payload[32:64]),
            recipient_field=Bytes32(payload[64:96]),
            proof_with_witness=bytes(payload[96:]),
        )

    raise InvalidInstruction(f"Unknown instruction tag {tag}")

"""Mixer instruction codec and account-aware instruction builders."""

from .builders import (
    MixerAddresses,
    address_to_field,
    build_deposit,
    build_initialize,
    build_push_root,
    build_withdraw,
    recipient_field_bytes,
)
from .codec import (
    Initialize,
    InstructionTag,
    MixerInstruction,
    PushRoot,
    Withdraw,
    decode_instruction,
    encode_initialize,
    encode_push_root,
    encode_withdraw,
)

__all__ = [
    "Initialize",
    "InstructionTag",
    "MixerAddresses",
    "MixerInstruction",
    "PushRoot",
    "Withdraw",
    "address_to_field",
    "build_deposit",
    "build_initialize",
    "build_push_root",
    "build_withdraw",
    "decode_instruction",
    "encode_initialize",
    "encode_push_root",
    "encode_withdraw",
    "recipient_field_bytes",
]

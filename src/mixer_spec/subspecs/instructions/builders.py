"""
Account-aware builders for mixer instructions.

The codec only knows bytes; these helpers also attach the account list, in
the order the mixer program reads it, and derive the PDAs involved.
"""

from __future__ import annotations

from typing_extensions import Final

from mixer_spec.types import Bytes32, StrictBaseModel

from ..ledger import (
    SYSTEM_PROGRAM_ID,
    AccountMeta,
    Address,
    Instruction,
    Transaction,
    find_program_address,
    transfer,
)
from ..mixer.constants import MIXER_STATE_SEED, NULLIFIER_SEED, VAULT_SEED
from .codec import encode_initialize, encode_push_root, encode_withdraw

FIELD_BYTES: Final = 32
"""Width an address is padded or truncated to before reading it as a field."""


class MixerAddresses(StrictBaseModel):
    """The fixed addresses of one mixer deployment."""

    program_id: Address
    verifier_program_id: Address
    state: Address
    vault: Address

    @classmethod
    def derive(cls, program_id: Address, verifier_program_id: Address) -> MixerAddresses:
        """Derive the state and vault PDAs of `program_id`."""
        state, _ = find_program_address([MIXER_STATE_SEED], program_id)
        vault, _ = find_program_address([VAULT_SEED], program_id)
        return cls(
            program_id=program_id,
            verifier_program_id=verifier_program_id,
            state=state,
            vault=vault,
        )

    def nullifier_record(self, nullifier_hash: Bytes32) -> Address:
        """Address of the record marking `nullifier_hash` as spent."""
        address, _ = find_program_address([NULLIFIER_SEED, bytes(nullifier_hash)], self.program_id)
        return address


def address_to_field(address: bytes) -> int:
    """
    Reinterpret an address as the circuit's `recipient` input.

    The bytes are zero-padded or truncated to 32 and read little-endian. The
    result is not reduced modulo the field.
    """
    return int.from_bytes(recipient_field_bytes(address), "little")


def recipient_field_bytes(address: bytes) -> Bytes32:
    """Wire form of the recipient field: the padded or truncated address bytes."""
    return Bytes32(bytes(address[:FIELD_BYTES]).ljust(FIELD_BYTES, b"\x00"))


def build_initialize(addresses: MixerAddresses, payer: Address, denomination: int) -> Instruction:
    """Initialize: payer (signer), state (writable), system program."""
    return Instruction(
        program_id=addresses.program_id,
        accounts=(
            AccountMeta(address=payer, is_signer=True, is_writable=True),
            AccountMeta(address=addresses.state, is_writable=True),
            AccountMeta(address=SYSTEM_PROGRAM_ID),
        ),
        data=encode_initialize(denomination),
    )


def build_push_root(addresses: MixerAddresses, authority: Address, root: bytes) -> Instruction:
    """PushRoot: authority (signer), state (writable)."""
    return Instruction(
        program_id=addresses.program_id,
        accounts=(
            AccountMeta(address=authority, is_signer=True),
            AccountMeta(address=addresses.state, is_writable=True),
        ),
        data=encode_push_root(root),
    )


def build_withdraw(
    addresses: MixerAddresses,
    relayer: Address,
    recipient: Address,
    root: bytes,
    nullifier_hash: bytes,
    proof_with_witness: bytes,
) -> Instruction:
    """
    Withdraw: relayer (signer), state, nullifier record, vault, recipient,
    verifier program, system program.

    Raises:
        InvalidLength: If `root` or `nullifier_hash` is not 32 bytes.
    """
    data = encode_withdraw(
        root,
        nullifier_hash,
        recipient_field_bytes(recipient),
        proof_with_witness,
    )
    return Instruction(
        program_id=addresses.program_id,
        accounts=(
            AccountMeta(address=relayer, is_signer=True, is_writable=True),
            AccountMeta(address=addresses.state, is_writable=True),
            AccountMeta(
                address=addresses.nullifier_record(Bytes32(nullifier_hash)), is_writable=True
            ),
            AccountMeta(address=addresses.vault, is_writable=True),
            AccountMeta(address=recipient, is_writable=True),
            AccountMeta(address=addresses.verifier_program_id),
            AccountMeta(address=SYSTEM_PROGRAM_ID),
        ),
        data=data,
    )


def build_deposit(
    addresses: MixerAddresses,
    depositor: Address,
    denomination: int,
    root: bytes,
) -> Transaction:
    """
    A deposit as one transaction: fund the vault, then publish the new root.

    The depositor signs both instructions, so neither applies without the other.
    """
    return Transaction(
        instructions=(
            transfer(depositor, addresses.vault, denomination),
            build_push_root(addresses, depositor, root),
        ),
        signers=(depositor,),
    )

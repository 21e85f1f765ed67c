"""Instructions and transactions submitted to the ledger."""

from __future__ import annotations

from mixer_spec.types import StrictBaseModel

from .address import Address


class AccountMeta(StrictBaseModel):
    """An account referenced by an instruction, with its access flags."""

    address: Address
    is_signer: bool = False
    is_writable: bool = False


class Instruction(StrictBaseModel):
    """A call into one program."""

    program_id: Address
    """Program that processes the instruction."""

    accounts: tuple[AccountMeta, ...] = ()
    """Accounts in the order the program expects them."""

    data: bytes = b""
    """Program-specific payload."""


class Transaction(StrictBaseModel):
    """
    An ordered batch of instructions applied all-or-nothing.

    `signers` lists the addresses whose signatures the transaction carries.
    """

    instructions: tuple[Instruction, ...]
    signers: tuple[Address, ...] = ()

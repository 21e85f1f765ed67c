"""
The system program: account creation and lamport transfers.

Instruction data starts with a u32 little-endian discriminant:

    0 CreateAccount  lamports u64 || space u64 || owner [32]
    2 Transfer       lamports u64
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING

from typing_extensions import Final

from mixer_spec.types import InsufficientFunds, InvalidAccount, InvalidInstruction

from .accounts import Account
from .address import SYSTEM_PROGRAM_ID, Address
from .transaction import AccountMeta, Instruction

if TYPE_CHECKING:
    from .environment import InvokeContext

logger = logging.getLogger(__name__)

_DISCRIMINANT_LEN: Final = 4


class SystemInstructionTag(IntEnum):
    """Discriminants of the supported system instructions."""

    CREATE_ACCOUNT = 0
    TRANSFER = 2


def create_account(
    payer: Address,
    new_account: Address,
    lamports: int,
    space: int,
    owner: Address,
) -> Instruction:
    """Build a CreateAccount instruction; both accounts must sign."""
    data = (
        SystemInstructionTag.CREATE_ACCOUNT.to_bytes(_DISCRIMINANT_LEN, "little")
        + lamports.to_bytes(8, "little")
        + space.to_bytes(8, "little")
        + bytes(owner)
    )
    return Instruction(
        program_id=SYSTEM_PROGRAM_ID,
        accounts=(
            AccountMeta(address=payer, is_signer=True, is_writable=True),
            AccountMeta(address=new_account, is_signer=True, is_writable=True),
        ),
        data=data,
    )


def transfer(source: Address, destination: Address, lamports: int) -> Instruction:
    """Build a Transfer instruction; the source must sign."""
    data = SystemInstructionTag.TRANSFER.to_bytes(_DISCRIMINANT_LEN, "little") + lamports.to_bytes(
        8, "little"
    )
    return Instruction(
        program_id=SYSTEM_PROGRAM_ID,
        accounts=(
            AccountMeta(address=source, is_signer=True, is_writable=True),
            AccountMeta(address=destination, is_writable=True),
        ),
        data=data,
    )


def process_system_instruction(ctx: InvokeContext) -> None:
    """Entry point of the system program."""
    data = ctx.instruction.data
    if len(data) < _DISCRIMINANT_LEN:
        raise InvalidInstruction("System instruction data too short")

    tag = int.from_bytes(data[:_DISCRIMINANT_LEN], "little")
    payload = data[_DISCRIMINANT_LEN:]

    if tag == SystemInstructionTag.CREATE_ACCOUNT:
        if len(payload) != 8 + 8 + 32:
            raise InvalidInstruction("Malformed CreateAccount payload")
        _create_account(
            ctx,
            lamports=int.from_bytes(payload[0:8], "little"),
            space=int.from_bytes(payload[8:16], "little"),
            owner=Address(payload[16:48]),
        )
    elif tag == SystemInstructionTag.TRANSFER:
        if len(payload) != 8:
            raise InvalidInstruction("Malformed Transfer payload")
        _transfer(ctx, lamports=int.from_bytes(payload, "little"))
    else:
        raise InvalidInstruction(f"Unknown system instruction {tag}")


def _debit(ctx: InvokeContext, address: Address, lamports: int) -> None:
    """Remove lamports from a system-owned, data-free account."""
    account = ctx.ledger.get_account(address)
    balance = 0 if account is None else account.lamports
    if account is None or balance < lamports:
        raise InsufficientFunds(str(address), balance, lamports)
    if account.owner != SYSTEM_PROGRAM_ID or account.data:
        raise InvalidAccount(f"Account {address} cannot be debited by the system program")
    ctx.ledger.set_account(address, account.with_lamports(balance - lamports))


def _create_account(ctx: InvokeContext, lamports: int, space: int, owner: Address) -> None:
    payer = ctx.account(0)
    new_account = ctx.account(1)

    existing = ctx.ledger.get_account(new_account.address)
    if existing is not None and (existing.lamports > 0 or existing.data):
        raise InvalidAccount(f"Account {new_account.address} already in use")

    _debit(ctx, payer.address, lamports)
    ctx.ledger.set_account(
        new_account.address,
        Account(lamports=lamports, data=bytes(space), owner=owner),
    )
    logger.debug(
        "Created account %s (%d bytes, owner %s)", new_account.address, space, owner
    )


def _transfer(ctx: InvokeContext, lamports: int) -> None:
    source = ctx.account(0)
    destination = ctx.account(1)

    _debit(ctx, source.address, lamports)
    ctx.ledger.credit(destination.address, lamports)
    logger.debug("Transferred %d from %s to %s", lamports, source.address, destination.address)

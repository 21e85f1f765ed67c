"""In-memory stand-in for the execution environment the mixer program runs on."""

from .accounts import Account, minimum_balance
from .address import (
    SYSTEM_PROGRAM_ID,
    Address,
    Base58,
    create_program_address,
    find_program_address,
    is_on_curve,
)
from .environment import InvokeContext, Ledger, Processor, Verifier, verify_instruction
from .system import create_account, transfer
from .transaction import AccountMeta, Instruction, Transaction

__all__ = [
    "SYSTEM_PROGRAM_ID",
    "Account",
    "AccountMeta",
    "Address",
    "Base58",
    "Instruction",
    "InvokeContext",
    "Ledger",
    "Processor",
    "Transaction",
    "Verifier",
    "create_account",
    "create_program_address",
    "find_program_address",
    "is_on_curve",
    "minimum_balance",
    "transfer",
    "verify_instruction",
]

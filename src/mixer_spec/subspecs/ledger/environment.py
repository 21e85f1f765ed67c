"""
In-memory execution environment.

Holds accounts and programs, and applies transactions atomically: every
instruction of a transaction runs against the live account map, and the map
is restored from a snapshot if any instruction fails.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from mixer_spec.types import (
    AccountNotFound,
    InvalidAccount,
    InvalidInstruction,
    MissingRequiredSignature,
    MixerError,
    ProofRejected,
)

from .accounts import Account, minimum_balance
from .address import SYSTEM_PROGRAM_ID, Address, create_program_address
from .system import process_system_instruction
from .transaction import AccountMeta, Instruction, Transaction

logger = logging.getLogger(__name__)

Processor = Callable[["InvokeContext"], None]
"""A program entry point."""

Verifier = Callable[[bytes, bytes], bool]
"""An external proof verifier: `(public_inputs, proof || public_witness) -> valid`."""

_LENGTH_PREFIX = 4


def verify_instruction(
    program_id: Address, public_inputs: bytes, proof_with_witness: bytes
) -> Instruction:
    """
    Build a call to a verifier program.

    The data is the u32 little-endian length of the public inputs, the public
    inputs, then the proof blob.
    """
    data = (
        len(public_inputs).to_bytes(_LENGTH_PREFIX, "little")
        + public_inputs
        + proof_with_witness
    )
    return Instruction(program_id=program_id, data=data)


def _split_verify_data(data: bytes) -> tuple[bytes, bytes]:
    """Inverse of the layout written by `verify_instruction`."""
    if len(data) < _LENGTH_PREFIX:
        raise InvalidInstruction("Verifier instruction data too short")
    end = _LENGTH_PREFIX + int.from_bytes(data[:_LENGTH_PREFIX], "little")
    if len(data) < end:
        raise InvalidInstruction("Verifier public inputs truncated")
    return data[_LENGTH_PREFIX:end], data[end:]


class InvokeContext:
    """What a program sees while processing one instruction."""

    def __init__(
        self,
        ledger: Ledger,
        instruction: Instruction,
        signers: frozenset[Address],
    ) -> None:
        self.ledger = ledger
        self.instruction = instruction
        self.signers = signers

    @property
    def program_id(self) -> Address:
        """The running program."""
        return self.instruction.program_id

    def account(self, position: int) -> AccountMeta:
        """
        The account meta at `position`.

        Raises:
            InvalidAccount: If the instruction lists fewer accounts.
        """
        if position >= len(self.instruction.accounts):
            raise InvalidAccount(
                f"Instruction needs at least {position + 1} accounts, "
                f"got {len(self.instruction.accounts)}"
            )
        return self.instruction.accounts[position]

    def write_data(self, meta: AccountMeta, data: bytes) -> None:
        """
        Replace the contents of an account owned by the running program.

        Raises:
            AccountNotFound: If the account does not exist.
            InvalidAccount: If it is not writable here or not owned by this program.
        """
        account = self.ledger.get_account(meta.address)
        if account is None:
            raise AccountNotFound(str(meta.address))
        if not meta.is_writable:
            raise InvalidAccount(f"Account {meta.address} is not writable")
        if account.owner != self.program_id:
            raise InvalidAccount(f"Account {meta.address} is not owned by {self.program_id}")
        self.ledger.set_account(meta.address, account.with_data(data))

    def invoke(
        self, instruction: Instruction, signer_seeds: Sequence[Sequence[bytes]] = ()
    ) -> None:
        """
        Call another program.

        The callee inherits this instruction's signers, plus every PDA of the
        running program named by `signer_seeds`.
        """
        pda_signers = {create_program_address(seeds, self.program_id) for seeds in signer_seeds}
        self.ledger.invoke(instruction, self.signers | pda_signers)


class Ledger:
    """Accounts, programs and atomic transaction execution."""

    def __init__(self) -> None:
        self._accounts: dict[Address, Account] = {}
        self._programs: dict[Address, Processor] = {SYSTEM_PROGRAM_ID: process_system_instruction}

    # -------------------------------------------------------------------------
    # Programs
    # -------------------------------------------------------------------------

    def register_program(self, program_id: Address, processor: Processor) -> None:
        """Deploy a program under `program_id`."""
        self._programs[program_id] = processor
        logger.debug("Registered program %s", program_id)

    def register_verifier(self, program_id: Address, verifier: Verifier) -> None:
        """
        Deploy an external verifier as a program.

        The program takes data laid out by `verify_instruction` and fails with
        `ProofRejected` whenever `verifier` returns False or raises anything
        other than a `MixerError`.
        """

        def process(ctx: InvokeContext) -> None:
            public_inputs, proof_with_witness = _split_verify_data(ctx.instruction.data)
            try:
                valid = verifier(public_inputs, proof_with_witness)
            except MixerError:
                raise
            except Exception as exc:
                raise ProofRejected(f"Verifier failed: {exc!r}") from exc
            if not valid:
                raise ProofRejected()

        self.register_program(program_id, process)

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def get_account(self, address: Address) -> Account | None:
        """The account at `address`, if it exists."""
        return self._accounts.get(address)

    def set_account(self, address: Address, account: Account) -> None:
        """Store an account. Programs call this through their context."""
        self._accounts[address] = account

    def balance(self, address: Address) -> int:
        """Lamports held at `address`, zero if the account does not exist."""
        account = self._accounts.get(address)
        return 0 if account is None else account.lamports

    def credit(self, address: Address, lamports: int) -> None:
        """Add lamports, creating a system-owned account if needed."""
        account = self._accounts.get(address)
        if account is None:
            self._accounts[address] = Account(lamports=lamports)
        else:
            self._accounts[address] = account.with_lamports(account.lamports + lamports)

    def fund(self, address: Address, lamports: int) -> None:
        """Mint lamports into an account outside any transaction."""
        self.credit(address, lamports)
        logger.debug("Funded %s with %d lamports", address, lamports)

    @staticmethod
    def minimum_balance(data_len: int) -> int:
        """Rent-exempt minimum for an account of `data_len` bytes."""
        return minimum_balance(data_len)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def invoke(self, instruction: Instruction, signers: frozenset[Address]) -> None:
        """
        Run one instruction with the given signers.

        Raises:
            AccountNotFound: If the program is not deployed.
            MissingRequiredSignature: If a signer account did not sign.
        """
        processor = self._programs.get(instruction.program_id)
        if processor is None:
            raise AccountNotFound(str(instruction.program_id))

        for meta in instruction.accounts:
            if meta.is_signer and meta.address not in signers:
                raise MissingRequiredSignature(str(meta.address))

        processor(InvokeContext(self, instruction, signers))

    def execute(self, transaction: Transaction) -> None:
        """
        Apply a transaction atomically.

        Either every instruction succeeds and all effects persist, or the
        first failure is re-raised and no account changes.
        """
        snapshot = dict(self._accounts)
        signers = frozenset(transaction.signers)
        try:
            for instruction in transaction.instructions:
                self.invoke(instruction, signers)
        except Exception as exc:
            self._accounts = snapshot
            logger.warning("Transaction rolled back: %r", exc)
            raise

        logger.debug("Transaction applied (%d instructions)", len(transaction.instructions))
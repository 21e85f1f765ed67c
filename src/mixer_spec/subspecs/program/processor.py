"""
The mixer program, as run by the execution environment.

Stores the root history window in its state PDA, custodies deposits in its
vault PDA, and marks spent nullifier hashes by creating one record PDA per
hash. Every check runs before any funds move; a failure anywhere aborts the
whole transaction.
"""

from __future__ import annotations

import logging

from mixer_spec.types import (
    AccountNotFound,
    AlreadyInitialized,
    InvalidAccount,
    MissingRequiredSignature,
    MixerError,
    NullifierAlreadyUsed,
    ProofRejected,
    UnknownRoot,
)

from ..instructions.builders import recipient_field_bytes
from ..instructions.codec import Initialize, PushRoot, Withdraw, decode_instruction
from ..ledger import (
    AccountMeta,
    Address,
    InvokeContext,
    Ledger,
    create_account,
    find_program_address,
    minimum_balance,
    transfer,
    verify_instruction,
)
from ..mixer.constants import MIXER_STATE_SEED, NULLIFIER_RECORD_SIZE, NULLIFIER_SEED, VAULT_SEED
from ..mixer.state import MIXER_STATE_SIZE, MixerState

logger = logging.getLogger(__name__)


class MixerProgram:
    """
    Entry point of the mixer program.

    Bound to the one verifier program it trusts; withdrawals naming any other
    verifier are refused.
    """

    def __init__(self, verifier_program_id: Address) -> None:
        self.verifier_program_id = verifier_program_id

    def __call__(self, ctx: InvokeContext) -> None:
        """Decode the instruction and dispatch on its tag."""
        instruction = decode_instruction(ctx.instruction.data)
        if isinstance(instruction, Initialize):
            self.initialize(ctx, instruction)
        elif isinstance(instruction, PushRoot):
            self.push_root(ctx, instruction)
        elif isinstance(instruction, Withdraw):
            self.withdraw(ctx, instruction)

    # -------------------------------------------------------------------------
    # Instructions
    # -------------------------------------------------------------------------

    def initialize(self, ctx: InvokeContext, instruction: Initialize) -> None:
        """Create the state PDA with an empty history window."""
        payer = _signer(ctx, 0)
        state_meta = ctx.account(1)

        state_address, bump = find_program_address([MIXER_STATE_SEED], ctx.program_id)
        if state_meta.address != state_address:
            raise InvalidAccount(f"Expected mixer state {state_address}, got {state_meta.address}")

        existing = ctx.ledger.get_account(state_address)
        if existing is not None and existing.owner == ctx.program_id:
            raise AlreadyInitialized()

        ctx.invoke(
            create_account(
                payer.address,
                state_address,
                minimum_balance(MIXER_STATE_SIZE),
                MIXER_STATE_SIZE,
                ctx.program_id,
            ),
            signer_seeds=[[MIXER_STATE_SEED, bytes([bump])]],
        )
        ctx.write_data(state_meta, MixerState.initial(instruction.denomination).encode())

        logger.info("Mixer initialized, denomination %d", int(instruction.denomination))

    def push_root(self, ctx: InvokeContext, instruction: PushRoot) -> None:
        """Append a root to the window, evicting the oldest once full."""
        _signer(ctx, 0)
        state_meta = ctx.account(1)

        state = _load_state(ctx, state_meta).push_root(instruction.root)
        ctx.write_data(state_meta, state.encode())

        logger.debug(
            "Root 0x%s pushed at slot %d", instruction.root.hex(), int(state.current_root_index)
        )

    def withdraw(self, ctx: InvokeContext, instruction: Withdraw) -> None:
        """
        Spend a note.

        Order: root window, nullifier record, record creation, proof
        verification, payout. The verifier receives the root, nullifier hash
        and recipient carried by this instruction as the public inputs, so a
        proof only verifies for the withdrawal it was generated for.
        """
        relayer = _signer(ctx, 0)
        state_meta = ctx.account(1)
        nullifier_meta = ctx.account(2)
        vault_meta = ctx.account(3)
        recipient_meta = ctx.account(4)
        verifier_meta = ctx.account(5)

        state = _load_state(ctx, state_meta)
        if not state.is_known_root(instruction.root):
            logger.warning("Withdrawal cites unknown root 0x%s", instruction.root.hex())
            raise UnknownRoot("0x" + instruction.root.hex())

        nullifier_hash = bytes(instruction.nullifier_hash)
        record_address, record_bump = find_program_address(
            [NULLIFIER_SEED, nullifier_hash], ctx.program_id
        )
        if nullifier_meta.address != record_address:
            raise InvalidAccount(f"Expected nullifier record {record_address}")

        vault_address, vault_bump = find_program_address([VAULT_SEED], ctx.program_id)
        if vault_meta.address != vault_address:
            raise InvalidAccount(f"Expected vault {vault_address}, got {vault_meta.address}")

        if recipient_field_bytes(recipient_meta.address) != instruction.recipient_field:
            raise InvalidAccount("Recipient account does not match the recipient field")

        if verifier_meta.address != self.verifier_program_id:
            raise InvalidAccount(f"Untrusted verifier program {verifier_meta.address}")

        if ctx.ledger.balance(record_address) > 0:
            logger.warning("Nullifier 0x%s already used", nullifier_hash.hex())
            raise NullifierAlreadyUsed("0x" + nullifier_hash.hex())

        ctx.invoke(
            create_account(
                relayer.address,
                record_address,
                minimum_balance(NULLIFIER_RECORD_SIZE),
                NULLIFIER_RECORD_SIZE,
                ctx.program_id,
            ),
            signer_seeds=[[NULLIFIER_SEED, nullifier_hash, bytes([record_bump])]],
        )

        try:
            ctx.invoke(
                verify_instruction(
                    verifier_meta.address,
                    instruction.public_inputs(),
                    instruction.proof_with_witness,
                )
            )
        except ProofRejected:
            raise
        except MixerError as exc:
            raise ProofRejected(exc.message) from exc

        ctx.invoke(
            transfer(vault_address, recipient_meta.address, int(state.denomination)),
            signer_seeds=[[VAULT_SEED, bytes([vault_bump])]],
        )

        logger.info(
            "Withdrawal of %d to %s, nullifier 0x%s",
            int(state.denomination),
            recipient_meta.address,
            nullifier_hash.hex(),
        )


def deploy(ledger: Ledger, program_id: Address, verifier_program_id: Address) -> MixerProgram:
    """Register the mixer program on `ledger` and return it."""
    program = MixerProgram(verifier_program_id)
    ledger.register_program(program_id, program)
    return program


def read_state(ledger: Ledger, state_address: Address) -> MixerState:
    """
    Decode the mixer state account.

    Raises:
        AccountNotFound: If the mixer was never initialized.
    """
    account = ledger.get_account(state_address)
    if account is None:
        raise AccountNotFound(str(state_address))
    return MixerState.decode(account.data)


def _signer(ctx: InvokeContext, position: int) -> AccountMeta:
    """The account at `position`, which must be marked as a signer."""
    meta = ctx.account(position)
    if not meta.is_signer:
        raise MissingRequiredSignature(str(meta.address))
    return meta


def _load_state(ctx: InvokeContext, meta: AccountMeta) -> MixerState:
    """Decode the state account after checking it is this program's state PDA."""
    state_address, _ = find_program_address([MIXER_STATE_SEED], ctx.program_id)
    if meta.address != state_address:
        raise InvalidAccount(f"Expected mixer state {state_address}, got {meta.address}")

    account = ctx.ledger.get_account(state_address)
    if account is None or account.owner != ctx.program_id:
        raise AccountNotFound(str(state_address))
    return MixerState.decode(account.data)

"""Tests for the in-memory execution environment."""

from __future__ import annotations

import pytest

from mixer_spec.subspecs.ledger import (
    SYSTEM_PROGRAM_ID,
    AccountMeta,
    Instruction,
    InvokeContext,
    Ledger,
    Transaction,
    create_account,
    find_program_address,
    minimum_balance,
    transfer,
    verify_instruction,
)
from mixer_spec.types import (
    AccountNotFound,
    InsufficientFunds,
    InvalidAccount,
    InvalidInstruction,
    MissingRequiredSignature,
    ProofRejected,
)
from tests.mixer_spec.helpers import make_address

ALICE = make_address("alice")
BOB = make_address("bob")
CAROL = make_address("carol")
ECHO_PROGRAM = make_address("echo program")


@pytest.fixture
def ledger() -> Ledger:
    ledger = Ledger()
    ledger.fund(ALICE, 10_000_000)
    return ledger


class TestRent:
    """Rent-exempt minimum."""

    def test_formula(self) -> None:
        assert minimum_balance(0) == 128 * 3480 * 2 == 890_880
        assert minimum_balance(969) == (128 + 969) * 3480 * 2
        assert Ledger.minimum_balance(10) == minimum_balance(10)


class TestTransfers:
    """System transfers through execute."""

    def test_transfer(self, ledger: Ledger) -> None:
        ledger.execute(Transaction(instructions=(transfer(ALICE, BOB, 1_000),), signers=(ALICE,)))
        assert ledger.balance(ALICE) == 10_000_000 - 1_000
        assert ledger.balance(BOB) == 1_000

    def test_unsigned_transfer(self, ledger: Ledger) -> None:
        with pytest.raises(MissingRequiredSignature):
            ledger.execute(Transaction(instructions=(transfer(ALICE, BOB, 1),), signers=(BOB,)))
        assert ledger.balance(ALICE) == 10_000_000

    def test_insufficient_funds(self, ledger: Ledger) -> None:
        with pytest.raises(InsufficientFunds) as exc_info:
            ledger.execute(
                Transaction(instructions=(transfer(ALICE, BOB, 10_000_001),), signers=(ALICE,))
            )
        assert exc_info.value.balance == 10_000_000
        assert exc_info.value.requested == 10_000_001

    def test_missing_source(self, ledger: Ledger) -> None:
        with pytest.raises(InsufficientFunds):
            ledger.execute(Transaction(instructions=(transfer(CAROL, BOB, 1),), signers=(CAROL,)))

    def test_malformed_system_instruction(self, ledger: Ledger) -> None:
        instruction = Instruction(program_id=SYSTEM_PROGRAM_ID, data=b"\x09\x00\x00\x00")
        with pytest.raises(InvalidInstruction):
            ledger.execute(Transaction(instructions=(instruction,)))


class TestAtomicity:
    """All or nothing."""

    def test_failed_transaction_rolls_back_earlier_instructions(self, ledger: Ledger) -> None:
        transaction = Transaction(
            instructions=(
                transfer(ALICE, BOB, 1_000),
                transfer(BOB, CAROL, 5_000),
            ),
            signers=(ALICE, BOB),
        )
        with pytest.raises(InsufficientFunds):
            ledger.execute(transaction)

        assert ledger.balance(ALICE) == 10_000_000
        assert ledger.get_account(BOB) is None
        assert ledger.get_account(CAROL) is None

    def test_successful_transactions_persist(self, ledger: Ledger) -> None:
        ledger.execute(
            Transaction(
                instructions=(transfer(ALICE, BOB, 1_000), transfer(BOB, CAROL, 400)),
                signers=(ALICE, BOB),
            )
        )
        assert ledger.balance(BOB) == 600
        assert ledger.balance(CAROL) == 400


class TestAccounts:
    """Account creation."""

    def test_create_account(self, ledger: Ledger) -> None:
        lamports = minimum_balance(16)
        ledger.execute(
            Transaction(
                instructions=(create_account(ALICE, BOB, lamports, 16, ECHO_PROGRAM),),
                signers=(ALICE, BOB),
            )
        )
        account = ledger.get_account(BOB)
        assert account is not None
        assert account.lamports == lamports
        assert account.data == bytes(16)
        assert account.owner == ECHO_PROGRAM
        assert ledger.balance(ALICE) == 10_000_000 - lamports

    def test_create_existing_account(self, ledger: Ledger) -> None:
        ledger.fund(BOB, 1)
        with pytest.raises(InvalidAccount):
            ledger.execute(
                Transaction(
                    instructions=(create_account(ALICE, BOB, 10, 0, ECHO_PROGRAM),),
                    signers=(ALICE, BOB),
                )
            )

    def test_new_account_must_sign(self, ledger: Ledger) -> None:
        with pytest.raises(MissingRequiredSignature):
            ledger.execute(
                Transaction(
                    instructions=(create_account(ALICE, BOB, 10, 0, ECHO_PROGRAM),),
                    signers=(ALICE,),
                )
            )


class TestPrograms:
    """Program dispatch, cross-program calls and PDA signing."""

    def test_unknown_program(self, ledger: Ledger) -> None:
        with pytest.raises(AccountNotFound):
            ledger.execute(Transaction(instructions=(Instruction(program_id=ECHO_PROGRAM),)))

    def test_pda_signs_for_its_program(self, ledger: Ledger) -> None:
        """A program can move lamports out of its own PDA by signing with its seeds."""
        pda, bump = find_program_address([b"pot"], ECHO_PROGRAM)
        ledger.fund(pda, 5_000)

        def process(ctx: InvokeContext) -> None:
            ctx.invoke(transfer(pda, BOB, 5_000), signer_seeds=[[b"pot", bytes([bump])]])

        ledger.register_program(ECHO_PROGRAM, process)
        ledger.execute(
            Transaction(
                instructions=(
                    Instruction(
                        program_id=ECHO_PROGRAM,
                        accounts=(AccountMeta(address=pda, is_writable=True),),
                    ),
                ),
            )
        )
        assert ledger.balance(pda) == 0
        assert ledger.balance(BOB) == 5_000

    def test_pda_cannot_be_spent_without_seeds(self, ledger: Ledger) -> None:
        pda, _ = find_program_address([b"pot"], ECHO_PROGRAM)
        ledger.fund(pda, 5_000)

        def process(ctx: InvokeContext) -> None:
            ctx.invoke(transfer(pda, BOB, 5_000))

        ledger.register_program(ECHO_PROGRAM, process)
        with pytest.raises(MissingRequiredSignature):
            ledger.execute(Transaction(instructions=(Instruction(program_id=ECHO_PROGRAM),)))

    def test_write_data_requires_ownership(self, ledger: Ledger) -> None:
        ledger.fund(BOB, 1)

        def process(ctx: InvokeContext) -> None:
            ctx.write_data(ctx.account(0), b"data")

        ledger.register_program(ECHO_PROGRAM, process)
        instruction = Instruction(
            program_id=ECHO_PROGRAM,
            accounts=(AccountMeta(address=BOB, is_writable=True),),
        )
        with pytest.raises(InvalidAccount):
            ledger.execute(Transaction(instructions=(instruction,)))

    def test_missing_account_meta(self, ledger: Ledger) -> None:
        def process(ctx: InvokeContext) -> None:
            ctx.account(0)

        ledger.register_program(ECHO_PROGRAM, process)
        with pytest.raises(InvalidAccount):
            ledger.execute(Transaction(instructions=(Instruction(program_id=ECHO_PROGRAM),)))


class TestVerifierProgram:
    """External verifiers deployed with `register_verifier`."""

    def test_receives_public_inputs_and_proof(self, ledger: Ledger) -> None:
        seen: list[tuple[bytes, bytes]] = []

        def verifier(public_inputs: bytes, proof_with_witness: bytes) -> bool:
            seen.append((public_inputs, proof_with_witness))
            return proof_with_witness == b"ok"

        ledger.register_verifier(ECHO_PROGRAM, verifier)
        accepted = verify_instruction(ECHO_PROGRAM, b"inputs", b"ok")
        ledger.execute(Transaction(instructions=(accepted,)))
        assert seen == [(b"inputs", b"ok")]

        with pytest.raises(ProofRejected):
            ledger.execute(
                Transaction(instructions=(verify_instruction(ECHO_PROGRAM, b"inputs", b"bad"),))
            )

    def test_empty_public_inputs(self, ledger: Ledger) -> None:
        ledger.register_verifier(ECHO_PROGRAM, lambda inputs, proof: (inputs, proof) == (b"", b"p"))
        ledger.execute(Transaction(instructions=(verify_instruction(ECHO_PROGRAM, b"", b"p"),)))

    @pytest.mark.parametrize("data", [b"", b"\x01\x00", b"\x05\x00\x00\x00abc"])
    def test_malformed_data(self, ledger: Ledger, data: bytes) -> None:
        ledger.register_verifier(ECHO_PROGRAM, lambda inputs, proof: True)
        with pytest.raises(InvalidInstruction):
            ledger.execute(
                Transaction(instructions=(Instruction(program_id=ECHO_PROGRAM, data=data),))
            )

    def test_crashing_verifier_rejects_and_rolls_back(self, ledger: Ledger) -> None:
        """A verifier that raises is a rejection, and earlier effects are undone."""

        def verifier(public_inputs: bytes, proof_with_witness: bytes) -> bool:
            raise RuntimeError("pairing check crashed")

        ledger.register_verifier(ECHO_PROGRAM, verifier)

        with pytest.raises(ProofRejected) as exc_info:
            ledger.execute(
                Transaction(
                    instructions=(
                        transfer(ALICE, BOB, 400),
                        verify_instruction(ECHO_PROGRAM, b"inputs", b"proof"),
                    ),
                    signers=(ALICE,),
                )
            )

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert ledger.balance(ALICE) == 10_000_000
        assert ledger.balance(BOB) == 0

    def test_mixer_error_passes_through(self, ledger: Ledger) -> None:
        def verifier(public_inputs: bytes, proof_with_witness: bytes) -> bool:
            raise InvalidInstruction("bad encoding")

        ledger.register_verifier(ECHO_PROGRAM, verifier)
        with pytest.raises(InvalidInstruction):
            ledger.execute(
                Transaction(instructions=(verify_instruction(ECHO_PROGRAM, b"", b""),))
            )

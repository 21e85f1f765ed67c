"""
Withdrawal orchestration.

Drives one note from its inclusion proof to a confirmed (or rejected)
Withdraw transaction. Each step is exposed on its own so callers can
interleave them with other work, and `run` chains them.
"""

from __future__ import annotations

import logging

from mixer_spec.types import (
    LeafNotFound,
    MixerError,
    NullifierAlreadyUsed,
    ProverFailure,
    StrictBaseModel,
    UnknownRoot,
)

from ..bn254.field import Fr
from ..instructions import MixerAddresses, address_to_field, build_withdraw
from ..ledger import Address, Ledger, Transaction
from ..merkle import IncrementalMerkleTree, verify_proof
from ..metrics import registry as metrics
from ..mixer.note import Note, nullifier_hash_bytes, root_bytes
from ..prover import CircuitInputs, ProofArtifacts, Prover
from .states import WithdrawalState

logger = logging.getLogger(__name__)


class WithdrawalOutcome(StrictBaseModel):
    """Where a withdrawal attempt ended up, and why."""

    state: WithdrawalState
    """`CONFIRMED` or `REJECTED`."""

    root: Fr
    """The root the proof was generated against."""

    nullifier_hash: Fr
    """The nullifier hash revealed by the attempt."""

    error: MixerError | None = None
    """The rejection reason, if any."""

    @property
    def confirmed(self) -> bool:
        return self.state is WithdrawalState.CONFIRMED

    @property
    def retryable(self) -> bool:
        """
        Whether a fresh proof could succeed.

        Only an expired root qualifies: the note is unspent, the proof just
        cites a root that fell out of the window.
        """
        return isinstance(self.error, UnknownRoot)

    @property
    def already_spent(self) -> bool:
        """
        Whether the note's nullifier is already recorded.

        Terminal for the note. After an ambiguous failure this usually means
        an earlier attempt of the same withdrawal went through.
        """
        return isinstance(self.error, NullifierAlreadyUsed)


class WithdrawalOrchestrator:
    """State machine for withdrawing one note to one recipient."""

    def __init__(
        self,
        ledger: Ledger,
        addresses: MixerAddresses,
        tree: IncrementalMerkleTree,
        prover: Prover,
        note: Note,
        recipient: Address,
        relayer: Address,
    ) -> None:
        """
        Args:
            ledger: Where the Withdraw transaction is executed.
            addresses: The mixer deployment.
            tree: Client-side mirror of the deposit tree.
            prover: Proof generation capability.
            note: The note being spent.
            recipient: Account credited with the denomination.
            relayer: Signer paying for the transaction and the nullifier record.
        """
        self._ledger = ledger
        self._addresses = addresses
        self._tree = tree
        self._prover = prover
        self._note = note
        self._recipient = recipient
        self._relayer = relayer

        self._state = WithdrawalState.IDLE
        self._inputs: CircuitInputs | None = None
        self._artifacts: ProofArtifacts | None = None
        self._error: MixerError | None = None

    @property
    def state(self) -> WithdrawalState:
        return self._state

    @property
    def inputs(self) -> CircuitInputs | None:
        """Circuit inputs of the current attempt."""
        return self._inputs

    @property
    def artifacts(self) -> ProofArtifacts | None:
        """Proof artifacts of the current attempt, once ready."""
        return self._artifacts

    @property
    def error(self) -> MixerError | None:
        """Why the last attempt was rejected."""
        return self._error

    def _transition_to(self, new_state: WithdrawalState) -> None:
        """
        Move to `new_state`.

        Raises:
            ValueError: If the state machine does not allow the transition.
        """
        if not self._state.can_transition_to(new_state):
            raise ValueError(f"Invalid state transition: {self._state.name} -> {new_state.name}")
        logger.debug("Withdrawal %s -> %s", self._state.name, new_state.name)
        self._state = new_state

    def _reject(self, error: MixerError) -> None:
        self._error = error
        self._transition_to(WithdrawalState.REJECTED)
        metrics.withdrawals_total.labels(outcome="rejected").inc()
        logger.warning("Withdrawal rejected: %s", error.message)

    def _outcome(self) -> WithdrawalOutcome:
        assert self._inputs is not None
        return WithdrawalOutcome(
            state=self._state,
            root=self._inputs.root,
            nullifier_hash=self._inputs.nullifier_hash,
            error=self._error,
        )

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def request_proof(self) -> CircuitInputs:
        """
        Assemble circuit inputs against the mirror's current root.

        Every local check happens here, before any proving time is spent.

        Raises:
            LeafNotFound: If the note's commitment is not in the mirror.
            MixerError: If the mirror's path does not recompute its root.
        """
        if self._state is not WithdrawalState.IDLE:
            raise ValueError(f"Cannot request a proof from {self._state.name}")

        index = self._tree.index_of(self._note.commitment)
        if index is None:
            raise LeafNotFound(None)

        proof = self._tree.proof(index)
        if not verify_proof(proof):
            raise MixerError(f"Inclusion proof for leaf {index} does not match the tree root")

        self._inputs = CircuitInputs.for_withdrawal(
            self._note, proof, address_to_field(self._recipient)
        )
        self._transition_to(WithdrawalState.PROOF_REQUESTED)

        logger.debug("Proof requested for leaf %d against root %s", index, proof.root.hex())
        return self._inputs

    async def generate_proof(self) -> ProofArtifacts:
        """
        Run the prover on the assembled inputs.

        Cancellation propagates and leaves the flow in `PROOF_REQUESTED`
        without artifacts.

        Raises:
            ProverFailure: If the prover fails; the flow becomes `REJECTED`.
        """
        if self._state is not WithdrawalState.PROOF_REQUESTED or self._inputs is None:
            raise ValueError(f"Cannot generate a proof from {self._state.name}")

        try:
            with metrics.proof_generation_time.time():
                artifacts = await self._prover.prove(self._inputs)
        except ProverFailure as exc:
            self._reject(exc)
            raise

        self._artifacts = artifacts
        self._transition_to(WithdrawalState.PROOF_READY)
        return artifacts

    def submit(self) -> WithdrawalOutcome:
        """
        Execute the Withdraw transaction.

        Ledger refusals are recorded in the outcome rather than raised.
        """
        if self._state is not WithdrawalState.PROOF_READY:
            raise ValueError(f"Cannot submit from {self._state.name}")
        assert self._inputs is not None and self._artifacts is not None

        instruction = build_withdraw(
            self._addresses,
            relayer=self._relayer,
            recipient=self._recipient,
            root=root_bytes(self._inputs.root),
            nullifier_hash=nullifier_hash_bytes(self._inputs.nullifier_hash),
            proof_with_witness=self._artifacts.proof_with_witness,
        )
        transaction = Transaction(instructions=(instruction,), signers=(self._relayer,))

        self._transition_to(WithdrawalState.SUBMITTED)
        try:
            self._ledger.execute(transaction)
        except MixerError as exc:
            self._reject(exc)
            return self._outcome()

        self._transition_to(WithdrawalState.CONFIRMED)
        metrics.withdrawals_total.labels(outcome="confirmed").inc()
        logger.info("Withdrawal confirmed to %s", self._recipient)
        return self._outcome()

    def reset(self) -> None:
        """Return a rejected flow to `IDLE` so it can retry with a fresh proof."""
        self._transition_to(WithdrawalState.IDLE)
        self._inputs = None
        self._artifacts = None
        self._error = None

    async def run(self) -> WithdrawalOutcome:
        """
        Drive the flow to a terminal state.

        Resumes a flow whose proving was cancelled, and restarts a rejected one
        from the mirror's current root.
        """
        if self._state is WithdrawalState.REJECTED:
            self.reset()
        if self._state is WithdrawalState.IDLE:
            self.request_proof()
        await self.generate_proof()
        return self.submit()

"""Withdrawal flow state machine."""

from __future__ import annotations

from enum import Enum, auto


class WithdrawalState(Enum):
    """
    Phases of one withdrawal attempt.

    State Machine Diagram
    ---------------------
    ::

        IDLE --> PROOF_REQUESTED --> PROOF_READY --> SUBMITTED --> CONFIRMED
          ^             |                                |
          |             +------------+    +--------------+
          |                          v    v
          +----------------------- REJECTED

    Transitions
    -----------
    IDLE -> PROOF_REQUESTED
        - Triggered when: the inclusion proof and circuit inputs are assembled
        - Action: invoke the prover

    PROOF_REQUESTED -> PROOF_READY
        - Triggered when: the prover returns artifacts

    PROOF_REQUESTED -> REJECTED
        - Triggered when: the prover fails

    PROOF_READY -> SUBMITTED
        - Triggered when: the Withdraw transaction is handed to the ledger

    SUBMITTED -> CONFIRMED | REJECTED
        - Triggered when: the ledger applies or refuses the transaction

    REJECTED -> IDLE
        - Triggered when: the caller retries with a fresh proof
    """

    IDLE = auto()
    """Nothing requested yet, or reset for a retry."""

    PROOF_REQUESTED = auto()
    """
    Inputs assembled, prover running.

    A cancelled prover leaves the flow here, with no artifacts.
    """

    PROOF_READY = auto()
    """Proof and public witness in hand."""

    SUBMITTED = auto()
    """Withdraw transaction handed to the ledger."""

    CONFIRMED = auto()
    """Funds released and the nullifier recorded. Terminal."""

    REJECTED = auto()
    """The attempt failed with no state change on the ledger."""

    def can_transition_to(self, target: WithdrawalState) -> bool:
        """
        Check if transition to target state is valid.

        Args:
            target: The proposed target state.

        Returns:
            True if the transition is allowed by the state machine rules.
        """
        return target in _VALID_TRANSITIONS.get(self, set())

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible without a reset."""
        return self in {WithdrawalState.CONFIRMED, WithdrawalState.REJECTED}


_VALID_TRANSITIONS: dict[WithdrawalState, set[WithdrawalState]] = {
    WithdrawalState.IDLE: {WithdrawalState.PROOF_REQUESTED},
    WithdrawalState.PROOF_REQUESTED: {WithdrawalState.PROOF_READY, WithdrawalState.REJECTED},
    WithdrawalState.PROOF_READY: {WithdrawalState.SUBMITTED},
    WithdrawalState.SUBMITTED: {WithdrawalState.CONFIRMED, WithdrawalState.REJECTED},
    WithdrawalState.CONFIRMED: set(),
    WithdrawalState.REJECTED: {WithdrawalState.IDLE},
}
"""Valid state transitions for the withdrawal state machine."""

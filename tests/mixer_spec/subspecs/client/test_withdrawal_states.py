"""Tests for the withdrawal state machine."""

from __future__ import annotations

import pytest

from mixer_spec.subspecs.client import WithdrawalState

ALLOWED = {
    (WithdrawalState.IDLE, WithdrawalState.PROOF_REQUESTED),
    (WithdrawalState.PROOF_REQUESTED, WithdrawalState.PROOF_READY),
    (WithdrawalState.PROOF_REQUESTED, WithdrawalState.REJECTED),
    (WithdrawalState.PROOF_READY, WithdrawalState.SUBMITTED),
    (WithdrawalState.SUBMITTED, WithdrawalState.CONFIRMED),
    (WithdrawalState.SUBMITTED, WithdrawalState.REJECTED),
    (WithdrawalState.REJECTED, WithdrawalState.IDLE),
}


@pytest.mark.parametrize("source", list(WithdrawalState))
@pytest.mark.parametrize("target", list(WithdrawalState))
def test_transition_table(source: WithdrawalState, target: WithdrawalState) -> None:
    assert source.can_transition_to(target) == ((source, target) in ALLOWED)


def test_terminal_states() -> None:
    terminal = {state for state in WithdrawalState if state.is_terminal}
    assert terminal == {WithdrawalState.CONFIRMED, WithdrawalState.REJECTED}


def test_confirmed_is_final() -> None:
    assert not any(WithdrawalState.CONFIRMED.can_transition_to(s) for s in WithdrawalState)

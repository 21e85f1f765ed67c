"""Client side of the mixer: deposits and the withdrawal state machine."""

from .service import MixerClient
from .states import WithdrawalState
from .withdrawal import WithdrawalOrchestrator, WithdrawalOutcome

__all__ = [
    "MixerClient",
    "WithdrawalOrchestrator",
    "WithdrawalOutcome",
    "WithdrawalState",
]

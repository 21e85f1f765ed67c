"""Reusable type definitions for the mixer protocol."""

from .base import StrictBaseModel
from .byte_arrays import ZERO_HASH, BaseBytes, Bytes32
from .exceptions import (
    AccountNotFound,
    AlreadyInitialized,
    CapacityExceeded,
    InsufficientFunds,
    InvalidAccount,
    InvalidInstruction,
    InvalidLength,
    LeafNotFound,
    MissingRequiredSignature,
    MixerError,
    NullifierAlreadyUsed,
    ProofRejected,
    ProverFailure,
    UnknownRoot,
)
from .uint import Uint8, Uint64

__all__ = [
    # Core types
    "Uint8",
    "Uint64",
    "BaseBytes",
    "Bytes32",
    "ZERO_HASH",
    "StrictBaseModel",
    # Exceptions
    "MixerError",
    "CapacityExceeded",
    "LeafNotFound",
    "InvalidLength",
    "AlreadyInitialized",
    "UnknownRoot",
    "NullifierAlreadyUsed",
    "ProofRejected",
    "ProverFailure",
    "InvalidInstruction",
    "MissingRequiredSignature",
    "InsufficientFunds",
    "AccountNotFound",
    "InvalidAccount",
]

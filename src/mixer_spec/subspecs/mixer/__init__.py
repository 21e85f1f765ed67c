"""Mixer protocol state: constants, the root history window and deposit notes."""

from .constants import (
    ACTIVE_CONFIG,
    DEFAULT_DENOMINATION,
    MIXER_STATE_SEED,
    NULLIFIER_RECORD_SIZE,
    NULLIFIER_SEED,
    PROD_CONFIG,
    ROOT_HISTORY_SIZE,
    TEST_CONFIG,
    VAULT_SEED,
    MixerConfig,
)
from .note import Note, nullifier_hash_bytes, root_bytes
from .state import MIXER_STATE_SIZE, MixerState

__all__ = [
    "ACTIVE_CONFIG",
    "DEFAULT_DENOMINATION",
    "MIXER_STATE_SEED",
    "MIXER_STATE_SIZE",
    "NULLIFIER_RECORD_SIZE",
    "NULLIFIER_SEED",
    "PROD_CONFIG",
    "ROOT_HISTORY_SIZE",
    "TEST_CONFIG",
    "VAULT_SEED",
    "MixerConfig",
    "MixerState",
    "Note",
    "nullifier_hash_bytes",
    "root_bytes",
]

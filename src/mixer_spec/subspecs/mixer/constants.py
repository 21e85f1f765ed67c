"""
Mixer Protocol Configuration

Protocol constants, account seeds and the presets that select them.
"""

from typing_extensions import Final

from mixer_spec.config import MIXER_ENV
from mixer_spec.types import StrictBaseModel, Uint64

from ..merkle.zeros import TREE_DEPTH

# --- Tree and History ---

ROOT_HISTORY_SIZE: Final = 30
"""Number of recent roots a withdrawal may cite."""

DEFAULT_DENOMINATION: Final = Uint64(1_000_000_000)
"""One unit of the native token, in its smallest denomination."""

# --- Account Seeds ---

MIXER_STATE_SEED: Final = b"mixer_state"
"""Seed of the singleton state account address."""

VAULT_SEED: Final = b"mixer_vault"
"""Seed of the pooled vault account address."""

NULLIFIER_SEED: Final = b"nullifier"
"""First seed of every nullifier record address; the hash is the second."""

NULLIFIER_RECORD_SIZE: Final = 0
"""Nullifier records carry no data; their existence is the whole record."""


class MixerConfig(StrictBaseModel):
    """
    Parameters of one mixer deployment that may vary between presets.

    The root history is not among them: `ROOT_HISTORY_SIZE` is fixed by the
    state account layout.
    """

    tree_depth: int


PROD_CONFIG: Final = MixerConfig(tree_depth=TREE_DEPTH)
"""The deployed parameters: 2^20 leaves."""

TEST_CONFIG: Final = MixerConfig(tree_depth=8)
"""Shallow tree for fast tests."""

ACTIVE_CONFIG: Final = TEST_CONFIG if MIXER_ENV == "test" else PROD_CONFIG
"""The preset selected by `MIXER_ENV`."""

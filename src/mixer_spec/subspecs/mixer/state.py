"""
The singleton mixer state and its root history window.

On the ledger the state is a fixed 969-byte account:

    denomination u64 LE (8) || roots 30 x 32 || current_root_index u8 (1)

Empty history slots hold 32 zero bytes. The all-zero root is therefore never
a valid withdrawal root.
"""

from __future__ import annotations

from pydantic import field_validator
from typing_extensions import Final

from mixer_spec.types import ZERO_HASH, Bytes32, InvalidLength, StrictBaseModel, Uint8, Uint64

from .constants import ROOT_HISTORY_SIZE

MIXER_STATE_SIZE: Final = Uint64.byte_length() + ROOT_HISTORY_SIZE * Bytes32.LENGTH + 1
"""Byte length of the encoded state account (969)."""


class MixerState(StrictBaseModel):
    """
    Denomination plus a ring buffer of recent roots.

    Instances are immutable: `push_root` returns the next state.
    """

    denomination: Uint64
    """Amount moved by every deposit and every withdrawal."""

    roots: tuple[Bytes32, ...]
    """The ring buffer, `ROOT_HISTORY_SIZE` slots."""

    current_root_index: Uint8
    """Slot holding the most recently pushed root."""

    @field_validator("roots")
    @classmethod
    def check_history_size(cls, roots: tuple[Bytes32, ...]) -> tuple[Bytes32, ...]:
        """The window has a fixed number of slots."""
        if len(roots) != ROOT_HISTORY_SIZE:
            raise ValueError(f"Root history must have {ROOT_HISTORY_SIZE} slots, got {len(roots)}")
        return roots

    @field_validator("current_root_index")
    @classmethod
    def check_cursor(cls, index: Uint8) -> Uint8:
        """The cursor always points inside the window."""
        if int(index) >= ROOT_HISTORY_SIZE:
            raise ValueError(f"Root index {int(index)} outside history of {ROOT_HISTORY_SIZE}")
        return index

    @classmethod
    def initial(cls, denomination: Uint64) -> MixerState:
        """A fresh state: every slot empty, cursor at slot 0."""
        return cls(
            denomination=denomination,
            roots=(ZERO_HASH,) * ROOT_HISTORY_SIZE,
            current_root_index=Uint8(0),
        )

    def push_root(self, root: Bytes32) -> MixerState:
        """
        Write `root` into the slot after the cursor and advance the cursor.

        The oldest root is overwritten once the window is full.
        """
        next_index = (int(self.current_root_index) + 1) % ROOT_HISTORY_SIZE
        roots = list(self.roots)
        roots[next_index] = root
        return self.model_copy(
            update={"roots": tuple(roots), "current_root_index": Uint8(next_index)}
        )

    def is_known_root(self, root: Bytes32) -> bool:
        """
        Whether `root` occupies a slot of the window.

        Scans backwards from the cursor, so the most recent roots are found
        first.
        """
        if root == ZERO_HASH:
            return False

        index = int(self.current_root_index)
        for _ in range(ROOT_HISTORY_SIZE):
            if self.roots[index] == root:
                return True
            index = (index - 1) % ROOT_HISTORY_SIZE
        return False

    def latest_root(self) -> Bytes32:
        """The slot at the cursor; zero bytes before the first push."""
        return self.roots[int(self.current_root_index)]

    def encode(self) -> bytes:
        """Serialize to the account layout."""
        return (
            self.denomination.to_bytes()
            + b"".join(bytes(root) for root in self.roots)
            + self.current_root_index.to_bytes()
        )

    @classmethod
    def decode(cls, data: bytes) -> MixerState:
        """
        Parse the account layout.

        Raises:
            InvalidLength: If `data` is not exactly `MIXER_STATE_SIZE` bytes.
        """
        if len(data) != MIXER_STATE_SIZE:
            raise InvalidLength(cls.__name__, MIXER_STATE_SIZE, len(data))

        denomination_end = Uint64.byte_length()
        roots_end = denomination_end + ROOT_HISTORY_SIZE * Bytes32.LENGTH
        roots = tuple(
            Bytes32(data[offset : offset + Bytes32.LENGTH])
            for offset in range(denomination_end, roots_end, Bytes32.LENGTH)
        )
        return cls(
            denomination=Uint64.decode_bytes(data[:denomination_end]),
            roots=roots,
            current_root_index=Uint8(data[roots_end]),
        )

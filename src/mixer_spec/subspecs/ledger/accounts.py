"""Ledger accounts and the rent-exemption rule."""

from __future__ import annotations

from pydantic import Field
from typing_extensions import Final

from mixer_spec.types import StrictBaseModel

from .address import SYSTEM_PROGRAM_ID, Address

ACCOUNT_STORAGE_OVERHEAD: Final = 128
"""Bytes charged per account on top of its data."""

LAMPORTS_PER_BYTE_YEAR: Final = 3480
"""Rent rate."""

EXEMPTION_THRESHOLD_YEARS: Final = 2
"""Years of rent an account must hold up front to be exempt."""


def minimum_balance(data_len: int) -> int:
    """Lamports an account of `data_len` bytes must hold to be rent exempt."""
    rate = LAMPORTS_PER_BYTE_YEAR * EXEMPTION_THRESHOLD_YEARS
    return (ACCOUNT_STORAGE_OVERHEAD + data_len) * rate


class Account(StrictBaseModel):
    """
    One ledger account.

    Immutable; the ledger replaces accounts wholesale on every change so that
    a snapshot of the account map is a complete rollback point.
    """

    lamports: int = Field(ge=0)
    """Balance."""

    data: bytes = b""
    """Program-defined contents."""

    owner: Address = SYSTEM_PROGRAM_ID
    """Program allowed to write `data`."""

    def with_lamports(self, lamports: int) -> Account:
        """Same account with a new balance."""
        return self.model_copy(update={"lamports": lamports})

    def with_data(self, data: bytes) -> Account:
        """Same account with new contents."""
        return self.model_copy(update={"data": data})

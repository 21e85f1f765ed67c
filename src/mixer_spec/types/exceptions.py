"""
Exception hierarchy for the mixer protocol.

Every failure is terminal for the operation that raised it. Nothing in this
package retries internally; callers decide what to do with each error.
"""

from __future__ import annotations


class MixerError(Exception):
    """
    Base exception for all mixer-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# -----------------------------------------------------------------------------
# Local (client-side) errors
# -----------------------------------------------------------------------------


class CapacityExceeded(MixerError):
    """
    Raised when inserting into a Merkle tree that already holds 2^depth leaves.

    Attributes:
        capacity: The maximum number of leaves the tree can hold.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(f"Merkle tree is full ({capacity} leaves)")


class LeafNotFound(MixerError):
    """
    Raised when an inclusion proof is requested for a leaf never inserted.

    Attributes:
        index: The requested leaf index, or None when looked up by value.
    """

    def __init__(self, index: int | None) -> None:
        self.index = index
        if index is None:
            super().__init__("Commitment is not in the tree")
        else:
            super().__init__(f"Leaf {index} was never inserted")


class InvalidLength(MixerError, ValueError):
    """
    Raised when a fixed-size field does not have its exact byte length.

    Attributes:
        field_name: Name of the offending field.
        expected: Required length in bytes.
        actual: Length that was supplied.
    """

    def __init__(self, field_name: str, expected: int, actual: int) -> None:
        self.field_name = field_name
        self.expected = expected
        self.actual = actual
        super().__init__(f"{field_name} must be {expected} bytes, got {actual}")


class ProverFailure(MixerError):
    """
    Raised when the external proving toolchain fails to produce a proof.

    Attributes:
        detail: Toolchain output or reason, if any.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Proof generation failed: {detail}")


# -----------------------------------------------------------------------------
# Program (execution environment) errors
# -----------------------------------------------------------------------------


class AlreadyInitialized(MixerError):
    """Raised when Initialize runs against an existing mixer state."""

    def __init__(self) -> None:
        super().__init__("Mixer state is already initialized")


class UnknownRoot(MixerError):
    """
    Raised when a withdrawal cites a root outside the history window.

    Attributes:
        root: The cited root, as hex.
    """

    def __init__(self, root: str) -> None:
        self.root = root
        super().__init__(f"Unknown root {root}")


class NullifierAlreadyUsed(MixerError):
    """
    Raised when the nullifier record for a hash already exists.

    Attributes:
        nullifier_hash: The spent nullifier hash, as hex.
    """

    def __init__(self, nullifier_hash: str) -> None:
        self.nullifier_hash = nullifier_hash
        super().__init__(f"Nullifier already used: {nullifier_hash}")


class ProofRejected(MixerError):
    """Raised when the external verifier declines a proof."""

    def __init__(self, detail: str = "verifier declined the proof") -> None:
        self.detail = detail
        super().__init__(f"Verification failed: {detail}")


class InvalidInstruction(MixerError):
    """Raised when instruction data cannot be decoded."""


class MissingRequiredSignature(MixerError):
    """
    Raised when an account marked as signer did not sign the transaction.

    Attributes:
        address: Base58 form of the account.
    """

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Missing required signature for {address}")


class InsufficientFunds(MixerError):
    """
    Raised when a debit exceeds an account's balance.

    Attributes:
        address: Base58 form of the account.
        balance: Balance before the debit.
        requested: Amount that was requested.
    """

    def __init__(self, address: str, balance: int, requested: int) -> None:
        self.address = address
        self.balance = balance
        self.requested = requested
        super().__init__(f"Account {address} has {balance} lamports, needs {requested}")


class AccountNotFound(MixerError):
    """
    Raised when an instruction needs an account that does not exist.

    Attributes:
        address: Base58 form of the account.
    """

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Account {address} not found")


class InvalidAccount(MixerError):
    """Raised when an account does not match what an instruction expects."""

"""
The proving capability the withdrawal flow depends on.

Proof generation is opaque here: a prover turns circuit inputs into a proof
blob and a public-witness blob. Nothing interprets those bytes except the
external verifier.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import Field, model_validator

from mixer_spec.types import StrictBaseModel

from ..bn254.field import Fr
from ..merkle import MerkleProof
from ..mixer.note import Note


class CircuitInputs(StrictBaseModel):
    """Everything the withdrawal circuit takes, public inputs first."""

    root: Fr
    """Public: the tree root the proof opens against."""

    nullifier_hash: Fr
    """Public: `Hash1(nullifier)`."""

    recipient: int = Field(ge=0, lt=2**256)
    """Public: the recipient address read as a little-endian integer."""

    nullifier: Fr
    """Private."""

    secret: Fr
    """Private."""

    merkle_proof: list[Fr]
    """Private: siblings from the leaf upwards."""

    is_even: list[bool]
    """Private: whether the path node is the left child at each level."""

    @model_validator(mode="after")
    def check_path_lengths(self) -> CircuitInputs:
        """Siblings and parity flags cover the same levels."""
        if len(self.merkle_proof) != len(self.is_even):
            raise ValueError("merkle_proof and is_even must have the same length")
        return self

    @classmethod
    def for_withdrawal(cls, note: Note, proof: MerkleProof, recipient: int) -> CircuitInputs:
        """Assemble inputs from a note, its inclusion proof and the recipient field."""
        return cls(
            root=proof.root,
            nullifier_hash=note.nullifier_hash,
            recipient=recipient,
            nullifier=note.nullifier,
            secret=note.secret,
            merkle_proof=list(proof.siblings),
            is_even=list(proof.is_even),
        )

    def to_prover_toml(self) -> str:
        """Render as the circuit's `Prover.toml`."""
        siblings = ",\n".join(f'  "{sibling.hex()}"' for sibling in self.merkle_proof)
        parities = ",\n".join(f"  {str(even).lower()}" for even in self.is_even)
        return (
            "# Mixer Circuit Prover Inputs\n"
            "\n"
            "# Public inputs\n"
            f'root = "{self.root.hex()}"\n'
            f'nullifier_hash = "{self.nullifier_hash.hex()}"\n'
            f'recipient = "0x{self.recipient:064x}"\n'
            "\n"
            "# Private inputs\n"
            f'nullifier = "{self.nullifier.hex()}"\n'
            f'secret = "{self.secret.hex()}"\n'
            f"merkle_proof = [\n{siblings}\n]\n"
            f"is_even = [\n{parities}\n]\n"
        )


class ProofArtifacts(StrictBaseModel):
    """A finished proof and its public witness."""

    proof: bytes
    public_witness: bytes

    @property
    def proof_with_witness(self) -> bytes:
        """The Withdraw payload tail: proof bytes then public-witness bytes."""
        return self.proof + self.public_witness


class Prover(Protocol):
    """
    Turns circuit inputs into proof artifacts.

    Implementations must be cancellable: a cancelled `prove` produces no
    artifacts and leaves no partial output that could be mistaken for one.
    """

    async def prove(self, inputs: CircuitInputs) -> ProofArtifacts:
        """
        Generate a proof.

        Raises:
            ProverFailure: If the inputs do not satisfy the circuit or the
                toolchain fails.
        """
        ...

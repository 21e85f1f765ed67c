"""Proof generation: circuit inputs, the prover capability and the CLI-backed prover."""

from .interface import CircuitInputs, ProofArtifacts, Prover
from .toolchain import ToolchainProver

__all__ = ["CircuitInputs", "ProofArtifacts", "Prover", "ToolchainProver"]

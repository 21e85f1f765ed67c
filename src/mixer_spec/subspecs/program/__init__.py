"""The mixer program: instruction processing against the ledger stand-in."""

from .processor import MixerProgram, deploy, read_state

__all__ = ["MixerProgram", "deploy", "read_state"]

"""
Prover backed by the Noir + Sunspot command-line toolchain.

Steps, all inside the circuit directory:

1. write `Prover.toml`
2. `nargo execute` produces the witness `target/<name>.gz`
3. `sunspot prove <acir> <witness> <ccs> <pk>` produces `target/<name>.proof`
   and `target/<name>.pw`
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from mixer_spec.types import ProverFailure

from .interface import CircuitInputs, ProofArtifacts

logger = logging.getLogger(__name__)


class ToolchainProver:
    """Runs `nargo` and `sunspot` as subprocesses."""

    def __init__(
        self,
        circuit_dir: Path | str,
        circuit_name: str = "circuits",
        nargo: str = "nargo",
        sunspot: str = "sunspot",
    ) -> None:
        """
        Args:
            circuit_dir: Directory holding the Noir project (`Nargo.toml`).
            circuit_name: Artifact basename under `target/`.
            nargo: Path to the `nargo` executable.
            sunspot: Path to the `sunspot` executable.
        """
        self.circuit_dir = Path(circuit_dir)
        self.circuit_name = circuit_name
        self.nargo = nargo
        self.sunspot = sunspot

    @property
    def target_dir(self) -> Path:
        return self.circuit_dir / "target"

    def _artifact(self, suffix: str) -> Path:
        return self.target_dir / f"{self.circuit_name}.{suffix}"

    @property
    def proof_path(self) -> Path:
        return self._artifact("proof")

    @property
    def public_witness_path(self) -> Path:
        return self._artifact("pw")

    async def prove(self, inputs: CircuitInputs) -> ProofArtifacts:
        """Write the inputs, run both tools, read back the artifacts."""
        started = time.perf_counter()

        # Stale artifacts from an earlier run must never be returned.
        for path in (self.proof_path, self.public_witness_path):
            path.unlink(missing_ok=True)

        (self.circuit_dir / "Prover.toml").write_text(inputs.to_prover_toml())

        await self._run(self.nargo, "execute")
        await self._run(
            self.sunspot,
            "prove",
            str(self._artifact("json")),
            str(self._artifact("gz")),
            str(self._artifact("ccs")),
            str(self._artifact("pk")),
        )

        try:
            artifacts = ProofArtifacts(
                proof=self.proof_path.read_bytes(),
                public_witness=self.public_witness_path.read_bytes(),
            )
        except FileNotFoundError as exc:
            raise ProverFailure(f"missing artifact {exc.filename}") from exc

        elapsed = time.perf_counter() - started
        logger.info(
            "Proof generated in %.2fs (%d proof bytes, %d witness bytes)",
            elapsed,
            len(artifacts.proof),
            len(artifacts.public_witness),
        )
        return artifacts

    async def _run(self, program: str, *args: str) -> None:
        """
        Run one toolchain command to completion.

        Raises:
            ProverFailure: If the command cannot start or exits non-zero.
        """
        logger.debug("Running %s %s", program, " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                program,
                *args,
                cwd=self.circuit_dir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ProverFailure(f"cannot run {program}: {exc}") from exc

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip() or stdout.decode(errors="replace")
            raise ProverFailure(f"{program} {args[0]} exited with {process.returncode}: {detail}")

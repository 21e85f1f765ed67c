"""
Mixer client: the depositor's and withdrawer's view of one deployment.

Keeps the client-side mirror of the deposit tree in step with the roots it
publishes. The mirror must see every deposit of the deployment, in order,
for its roots to match the ones on the ledger.
"""

from __future__ import annotations

import logging

from mixer_spec.types import MixerError

from ..instructions import MixerAddresses, build_deposit, build_initialize
from ..ledger import Address, Ledger, Transaction
from ..merkle import IncrementalMerkleTree
from ..metrics import registry as metrics
from ..mixer.constants import ACTIVE_CONFIG, MixerConfig
from ..mixer.note import Note, root_bytes
from ..mixer.state import MixerState
from ..program import read_state
from ..prover import Prover
from ..storage import NodeStore
from .withdrawal import WithdrawalOrchestrator, WithdrawalOutcome

logger = logging.getLogger(__name__)


class MixerClient:
    """Deposits into and withdraws from one mixer deployment."""

    def __init__(
        self,
        ledger: Ledger,
        addresses: MixerAddresses,
        prover: Prover,
        config: MixerConfig = ACTIVE_CONFIG,
        store: NodeStore | None = None,
    ) -> None:
        """
        Args:
            ledger: Execution environment holding the deployment.
            addresses: Program, verifier, state and vault addresses.
            prover: Proof generation capability used for withdrawals.
            config: Deployment parameters; fixes the mirror's depth.
            store: Node store for the mirror; in-memory if omitted.
        """
        self.ledger = ledger
        self.addresses = addresses
        self.prover = prover
        self.config = config
        self.tree = IncrementalMerkleTree(depth=config.tree_depth, store=store)
        metrics.tree_leaves.set(self.tree.leaf_count)

    def state(self) -> MixerState:
        """
        The mixer state as currently stored on the ledger.

        Raises:
            AccountNotFound: If the mixer was never initialized.
        """
        return read_state(self.ledger, self.addresses.state)

    def initialize(self, payer: Address, denomination: int) -> None:
        """
        Create the mixer state with a fixed denomination.

        Raises:
            AlreadyInitialized: If the state already exists.
        """
        instruction = build_initialize(self.addresses, payer, denomination)
        self.ledger.execute(Transaction(instructions=(instruction,), signers=(payer,)))

    def deposit(self, depositor: Address, note: Note | None = None) -> tuple[Note, int]:
        """
        Deposit one denomination under a note's commitment.

        The commitment goes into the mirror first, so a full tree fails before
        anything is sent. The vault transfer and the root publication form a
        single transaction. A failed transaction leaves the mirror ahead of the
        ledger; the leaf index stays consumed.

        Args:
            depositor: Signer paying the denomination.
            note: The note to deposit; a fresh one if omitted.

        Returns:
            The note and its leaf index.

        Raises:
            CapacityExceeded: If the mirror is full.
            InsufficientFunds: If the depositor cannot pay.
        """
        note = note if note is not None else Note.generate()
        denomination = int(self.state().denomination)

        index = self.tree.insert(note.commitment)
        metrics.tree_leaves.set(self.tree.leaf_count)

        transaction = build_deposit(
            self.addresses, depositor, denomination, root_bytes(self.tree.root())
        )
        try:
            self.ledger.execute(transaction)
        except MixerError:
            metrics.deposits_total.labels(outcome="failed").inc()
            raise

        metrics.deposits_total.labels(outcome="confirmed").inc()
        logger.info("Deposit at leaf %d, root %s", index, self.tree.root_hex)
        return note, index

    def withdrawal(
        self, note: Note, recipient: Address, relayer: Address
    ) -> WithdrawalOrchestrator:
        """A withdrawal flow for `note`, not yet started."""
        return WithdrawalOrchestrator(
            ledger=self.ledger,
            addresses=self.addresses,
            tree=self.tree,
            prover=self.prover,
            note=note,
            recipient=recipient,
            relayer=relayer,
        )

    async def withdraw(self, note: Note, recipient: Address, relayer: Address) -> WithdrawalOutcome:
        """Run a withdrawal flow for `note` to a terminal state."""
        return await self.withdrawal(note, recipient, relayer).run()

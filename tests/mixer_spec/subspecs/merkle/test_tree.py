"""Tests for the incremental Merkle tree."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from mixer_spec.subspecs.bn254 import Fr
from mixer_spec.subspecs.merkle import (
    TREE_DEPTH,
    ZERO_LEAF,
    IncrementalMerkleTree,
    verify_proof,
    zero_values,
)
from mixer_spec.subspecs.poseidon import hash2
from mixer_spec.subspecs.storage import MemoryNodeStore, NodeStore, SQLiteNodeStore
from mixer_spec.types import CapacityExceeded, LeafNotFound
from tests.mixer_spec.helpers import make_commitments, naive_root

DEPTH = 3


class TestZeroValues:
    """Per-level defaults for unpopulated nodes."""

    def test_zero_leaf(self) -> None:
        assert ZERO_LEAF.hex() == "0x0d823319708ab99ec915efd4f7e03d11ca1790918e8f04cd14100aceca2aa9ff"

    def test_each_level_hashes_the_previous(self) -> None:
        zeros = zero_values(DEPTH)
        assert len(zeros) == DEPTH + 1
        assert zeros[0] == ZERO_LEAF
        for level in range(DEPTH):
            assert zeros[level + 1] == hash2(zeros[level], zeros[level])

    def test_prefix_consistency(self) -> None:
        """A deeper table extends a shallower one."""
        assert zero_values(DEPTH + 2)[: DEPTH + 1] == zero_values(DEPTH)


class TestEmptyTree:
    """A tree with no leaves."""

    def test_root_is_top_zero_value(self) -> None:
        tree = IncrementalMerkleTree(depth=DEPTH)
        assert tree.root() == zero_values(DEPTH)[DEPTH]

    def test_default_depth(self) -> None:
        tree = IncrementalMerkleTree()
        assert tree.depth == TREE_DEPTH == 20
        assert tree.capacity == 2**20
        assert tree.leaf_count == 0
        assert tree.root() == zero_values(20)[20]

    def test_depth_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            IncrementalMerkleTree(depth=0)


class TestInsert:
    """Appending leaves."""

    def test_indices_are_sequential(self) -> None:
        tree = IncrementalMerkleTree(depth=DEPTH)
        assert [tree.insert(leaf) for leaf in make_commitments(3)] == [0, 1, 2]
        assert tree.leaf_count == 3
        assert len(tree) == 3

    def test_root_matches_full_recomputation_after_each_insert(self) -> None:
        """Every intermediate root equals a from-scratch fold of the leaf set."""
        tree = IncrementalMerkleTree(depth=DEPTH)
        leaves = make_commitments(5)
        for count, leaf in enumerate(leaves, start=1):
            tree.insert(leaf)
            assert tree.root() == naive_root(leaves[:count], DEPTH)

    def test_single_leaf_at_depth_twenty(self) -> None:
        """One insert into the full-depth tree walks all twenty levels."""
        tree = IncrementalMerkleTree()
        leaf = Fr(value=7)
        tree.insert(leaf)

        zeros = zero_values(TREE_DEPTH)
        expected = leaf
        for level in range(TREE_DEPTH):
            expected = hash2(expected, zeros[level])
        assert tree.root() == expected

    def test_duplicate_values_get_distinct_indices(self) -> None:
        tree = IncrementalMerkleTree(depth=DEPTH)
        leaf = Fr(value=9)
        assert tree.insert(leaf) == 0
        assert tree.insert(leaf) == 1
        assert tree.index_of(leaf) == 0

    def test_capacity_exceeded(self) -> None:
        """The 2^depth + 1-th insert fails and leaves the tree untouched."""
        tree = IncrementalMerkleTree(depth=2)
        for leaf in make_commitments(4):
            tree.insert(leaf)
        root = tree.root()

        with pytest.raises(CapacityExceeded) as exc_info:
            tree.insert(Fr(value=99))

        assert exc_info.value.capacity == 4
        assert tree.leaf_count == 4
        assert tree.root() == root

    @settings(max_examples=10)
    @given(values=st.lists(st.integers(min_value=0, max_value=2**64), min_size=1, max_size=8))
    def test_root_property(self, values: list[int]) -> None:
        """For any leaf sequence the root equals the full fold."""
        tree = IncrementalMerkleTree(depth=DEPTH)
        leaves = [Fr(value=v) for v in values]
        for leaf in leaves:
            tree.insert(leaf)
        assert tree.root() == naive_root(leaves, DEPTH)


class TestProof:
    """Inclusion proofs."""

    def test_every_proof_opens_the_final_root(self) -> None:
        """After N inserts, all N proofs validate against the same root."""
        tree = IncrementalMerkleTree(depth=DEPTH)
        leaves = make_commitments(6)
        for leaf in leaves:
            tree.insert(leaf)

        final_root = tree.root()
        for index, leaf in enumerate(leaves):
            proof = tree.proof(index)
            assert proof.root == final_root
            assert proof.leaf == leaf
            assert proof.leaf_index == index
            assert proof.depth == DEPTH
            assert verify_proof(proof)
            assert tree.verify(proof)

    def test_proof_reflects_later_inserts(self) -> None:
        """Siblings are read live, so an early proof changes as the tree grows."""
        tree = IncrementalMerkleTree(depth=DEPTH)
        tree.insert(Fr(value=1))
        before = tree.proof(0)
        tree.insert(Fr(value=2))
        after = tree.proof(0)

        assert before.siblings[0] == zero_values(DEPTH)[0]
        assert after.siblings[0] == Fr(value=2)
        assert after.root == tree.root()
        assert not tree.verify(before)

    def test_parity_follows_index_bits(self) -> None:
        tree = IncrementalMerkleTree(depth=DEPTH)
        for leaf in make_commitments(6):
            tree.insert(leaf)

        proof = tree.proof(5)
        assert proof.is_even == [False, True, False]
        assert proof.path_indices == [1, 0, 1]

    @pytest.mark.parametrize("index", [-1, 2, 100])
    def test_unknown_leaf(self, index: int) -> None:
        tree = IncrementalMerkleTree(depth=DEPTH)
        tree.insert(Fr(value=1))
        tree.insert(Fr(value=2))
        with pytest.raises(LeafNotFound):
            tree.proof(index)

    def test_tampered_sibling_fails(self) -> None:
        tree = IncrementalMerkleTree(depth=DEPTH)
        for leaf in make_commitments(2):
            tree.insert(leaf)
        proof = tree.proof(0)

        siblings = list(proof.siblings)
        siblings[1] = Fr(value=12345)
        assert not verify_proof(proof.model_copy(update={"siblings": siblings}))

    def test_parity_inconsistent_with_index_fails(self) -> None:
        tree = IncrementalMerkleTree(depth=DEPTH)
        for leaf in make_commitments(2):
            tree.insert(leaf)
        proof = tree.proof(0)
        assert not verify_proof(proof.model_copy(update={"leaf_index": 1}))


class TestIndexOf:
    """Lookup by value."""

    def test_found_and_missing(self) -> None:
        tree = IncrementalMerkleTree(depth=DEPTH)
        leaves = make_commitments(3)
        for leaf in leaves:
            tree.insert(leaf)
        assert tree.index_of(leaves[2]) == 2
        assert tree.index_of(Fr(value=1000)) is None


class TestPersistence:
    """A tree over SQLite resumes after a restart."""

    def test_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "tree.db"
        leaves = make_commitments(3)

        with SQLiteNodeStore(path) as store:
            tree = IncrementalMerkleTree(depth=DEPTH, store=store)
            for leaf in leaves:
                tree.insert(leaf)
            root = tree.root()

        with SQLiteNodeStore(path) as store:
            reopened = IncrementalMerkleTree(depth=DEPTH, store=store)
            assert reopened.leaf_count == 3
            assert reopened.root() == root
            assert reopened.insert(Fr(value=50)) == 3
            assert reopened.root() == naive_root([*leaves, Fr(value=50)], DEPTH)


class _FailingHasher:
    """Poseidon that raises on its n-th call once armed."""

    def __init__(self) -> None:
        self.fail_after: int | None = None
        self.calls = 0

    def __call__(self, left: Fr, right: Fr) -> Fr:
        if self.fail_after is not None:
            self.calls += 1
            if self.calls > self.fail_after:
                raise RuntimeError("hasher failed")
        return hash2(left, right)


class TestInsertFailure:
    """An insert that fails part-way writes nothing."""

    @pytest.mark.parametrize("backend", ["memory", "sqlite"])
    def test_state_unchanged(self, backend: str) -> None:
        store: NodeStore = MemoryNodeStore() if backend == "memory" else SQLiteNodeStore(":memory:")
        hasher = _FailingHasher()
        tree = IncrementalMerkleTree(depth=DEPTH, store=store, hasher=hasher)
        leaves = make_commitments(2)
        for leaf in leaves:
            tree.insert(leaf)
        root = tree.root()
        leaf_nodes = store.iter_leaves()

        hasher.fail_after = 1
        with pytest.raises(RuntimeError):
            tree.insert(Fr(value=99))

        assert tree.leaf_count == 2
        assert tree.root() == root
        assert store.iter_leaves() == leaf_nodes
        assert store.get_node(0, 2) is None
        assert store.get_node(1, 1) is None

        hasher.fail_after = None
        assert tree.verify(tree.proof(1))
        assert tree.insert(Fr(value=99)) == 2
        assert tree.root() == naive_root([*leaves, Fr(value=99)], DEPTH)
        store.close()

"""
SQLite node store for the client-side Merkle tree mirror.

Persists the sparse node map so that a client can restart without replaying
every deposit. Values are stored as 32-byte big-endian field encodings in
BLOB columns.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from mixer_spec.subspecs.bn254 import Fr

from .namespaces import ALL_NAMESPACES, METADATA, NODES


class SQLiteNodeStore:
    """
    SQLite implementation of the NodeStore protocol.

    Stores tree nodes in a single SQLite file.
    Thread-safe through SQLite's built-in locking.
    """

    def __init__(self, path: Path | str) -> None:
        """
        Initialize SQLite node store.

        Creates database file and tables if they don't exist.

        Args:
            path: Path to SQLite database file.
                  Use ":memory:" for in-memory database.
        """
        self._path = Path(path) if isinstance(path, str) else path

        # The check_same_thread=False flag allows multiple threads to share
        # this connection. SQLite serializes writes internally.
        self._conn = sqlite3.connect(
            str(self._path),
            check_same_thread=False,
        )
        self._conn.row_factory = sqlite3.Row
        self._in_batch = False

        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        cursor = self._conn.cursor()
        for namespace in ALL_NAMESPACES:
            cursor.execute(namespace.CREATE_TABLE)
        self._conn.commit()

    # -------------------------------------------------------------------------
    # Node Operations
    # -------------------------------------------------------------------------

    def get_node(self, level: int, index: int) -> Fr | None:
        """Retrieve a node value, or None if never populated."""
        cursor = self._conn.cursor()
        cursor.execute(
            f"SELECT value FROM {NODES.TABLE_NAME} WHERE level = ? AND idx = ?",
            (level, index),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return Fr.from_bytes32(row["value"])

    def put_node(self, level: int, index: int, value: Fr) -> None:
        """Store a node value, replacing any previous value."""
        cursor = self._conn.cursor()

        # Interior nodes are rewritten on every insert below them.
        cursor.execute(
            f"""
            INSERT OR REPLACE INTO {NODES.TABLE_NAME} (level, idx, value)
            VALUES (?, ?, ?)
            """,
            (level, index, bytes(value.to_bytes32())),
        )
        self._commit()

    def iter_leaves(self) -> list[tuple[int, Fr]]:
        """All populated leaves in index order."""
        cursor = self._conn.cursor()
        cursor.execute(
            f"SELECT idx, value FROM {NODES.TABLE_NAME} WHERE level = 0 ORDER BY idx",
        )
        return [(row["idx"], Fr.from_bytes32(row["value"])) for row in cursor.fetchall()]

    # -------------------------------------------------------------------------
    # Metadata Operations
    # -------------------------------------------------------------------------

    def get_leaf_count(self) -> int:
        """Number of leaves inserted so far."""
        cursor = self._conn.cursor()
        cursor.execute(
            f"SELECT value FROM {METADATA.TABLE_NAME} WHERE key = ?",
            (METADATA.KEY_LEAF_COUNT,),
        )
        row = cursor.fetchone()
        return 0 if row is None else int(row["value"])

    def put_leaf_count(self, count: int) -> None:
        """Record the number of leaves inserted so far."""
        cursor = self._conn.cursor()
        cursor.execute(
            f"""
            INSERT OR REPLACE INTO {METADATA.TABLE_NAME} (key, value)
            VALUES (?, ?)
            """,
            (METADATA.KEY_LEAF_COUNT, count),
        )
        self._commit()

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def _commit(self) -> None:
        """Commit now unless a batch is open."""
        if not self._in_batch:
            self._conn.commit()

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Run the block as one transaction, rolled back if it raises."""
        self._in_batch = True
        try:
            with self._conn:
                yield
        finally:
            self._in_batch = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close database connection."""
        self._conn.close()

    def __enter__(self) -> SQLiteNodeStore:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

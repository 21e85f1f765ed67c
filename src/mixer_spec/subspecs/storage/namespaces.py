"""
Database namespace definitions for storage tables.

Defines table names and schema constants for SQLite storage.
Each namespace represents a logical grouping of related data.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class NodeNamespace:
    """
    Namespace for Merkle node storage.

    Nodes are keyed by their `(level, idx)` coordinate.
    Values are 32-byte big-endian field encodings.
    """

    TABLE_NAME: str = "nodes"
    """Table name for node storage."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS nodes (
            level INTEGER NOT NULL,
            idx INTEGER NOT NULL,
            value BLOB NOT NULL,
            PRIMARY KEY (level, idx)
        )
    """
    """SQL to create nodes table."""


@dataclass(frozen=True, slots=True)
class MetadataNamespace:
    """
    Namespace for tree metadata.

    Uses a key-value pattern with fixed keys.
    """

    TABLE_NAME: str = "metadata"
    """Table name for metadata storage."""

    KEY_LEAF_COUNT: str = "leaf_count"
    """Key for the number of inserted leaves."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS metadata (
            key TEXT PRIMARY KEY,
            value INTEGER NOT NULL
        )
    """
    """SQL to create metadata table."""


# Singleton instances for convenient access
NODES = NodeNamespace()
METADATA = MetadataNamespace()

ALL_NAMESPACES = [NODES, METADATA]
"""All namespace definitions for schema initialization."""

"""
Storage module for the client-side Merkle tree mirror.

Provides a node-store abstraction so the mirror can live in memory for a
single session or in SQLite across restarts.
"""

from .database import NodeStore
from .memory import MemoryNodeStore
from .namespaces import MetadataNamespace, NodeNamespace
from .sqlite import SQLiteNodeStore

__all__ = [
    "NodeStore",
    "MemoryNodeStore",
    "SQLiteNodeStore",
    "NodeNamespace",
    "MetadataNamespace",
]

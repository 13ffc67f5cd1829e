"""Node stores feeding the graph engine."""
from __future__ import annotations

from lattice.storage.errors import (
    DuplicateNodeError,
    InvalidNodeError,
    LatticeExistsError,
    NodeNotFoundError,
    NotInLatticeError,
    StorageError,
)
from lattice.storage.files import (
    FileNodeStore,
    find_lattice_root,
    init_lattice,
    load_node,
    save_node,
)
from lattice.storage.memory import InMemoryNodeStore
from lattice.storage.protocols import NodeSource, NodeStore

__all__ = [
    "DuplicateNodeError",
    "FileNodeStore",
    "InMemoryNodeStore",
    "InvalidNodeError",
    "LatticeExistsError",
    "NodeNotFoundError",
    "NodeSource",
    "NodeStore",
    "NotInLatticeError",
    "StorageError",
    "find_lattice_root",
    "init_lattice",
    "load_node",
    "save_node",
]

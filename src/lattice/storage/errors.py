"""Storage-layer exceptions."""
from __future__ import annotations


class StorageError(Exception):
    """Base class for node store failures."""


class NotInLatticeError(StorageError):
    """Raised when no ``.lattice`` directory can be found."""


class LatticeExistsError(StorageError):
    """Raised when initialising over an existing lattice without ``force``."""


class NodeNotFoundError(StorageError):
    """Raised when a node id does not resolve to a stored record."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class DuplicateNodeError(StorageError):
    """Raised when adding a node whose id is already taken."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node id already exists: {node_id}")
        self.node_id = node_id


class InvalidNodeError(StorageError):
    """Raised when a node file cannot be parsed into an entity."""

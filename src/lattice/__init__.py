from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Lattice Contributors"

from lattice.models import (
    DriftReport,
    Entity,
    GraphNode,
    NodeKind,
    TraversalDirection,
)
from lattice.graph import LatticeGraph
from lattice.storage import FileNodeStore, InMemoryNodeStore

__all__ = [
    "DriftReport",
    "Entity",
    "FileNodeStore",
    "GraphNode",
    "InMemoryNodeStore",
    "LatticeGraph",
    "NodeKind",
    "TraversalDirection",
]

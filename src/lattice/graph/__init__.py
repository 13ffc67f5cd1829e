"""Graph engine: node index, edge extraction, traversal, drift detection."""
from __future__ import annotations

from lattice.graph.drift import find_drift
from lattice.graph.edges import extract_edges, relationship_for_bucket
from lattice.graph.engine import LatticeGraph
from lattice.graph.index import NodeIndex, build_node_index
from lattice.graph.traverse import traverse_graph
from lattice.graph.versioning import (
    bump_version,
    classify_drift,
    is_valid_version,
    parse_version,
)

__all__ = [
    "LatticeGraph",
    "NodeIndex",
    "build_node_index",
    "bump_version",
    "classify_drift",
    "extract_edges",
    "find_drift",
    "is_valid_version",
    "parse_version",
    "relationship_for_bucket",
    "traverse_graph",
]

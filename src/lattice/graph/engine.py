"""Graph engine entry point used by the CLI and MCP tools."""
from __future__ import annotations

from lattice.graph.drift import find_drift
from lattice.graph.index import NodeIndex, build_node_index
from lattice.graph.traverse import traverse_graph
from lattice.models import DriftReport, GraphNode, TraversalDirection
from lattice.storage.protocols import NodeSource


class LatticeGraph:
    """Graph operations over a node source.

    Every call rebuilds the index from the source; nothing is cached between
    calls.
    """

    def __init__(self, source: NodeSource) -> None:
        self._source = source

    def build_index(self) -> NodeIndex:
        return build_node_index(self._source)

    def traverse(
        self,
        start_id: str,
        direction: TraversalDirection | str = TraversalDirection.BOTH,
        max_depth: int = 3,
    ) -> list[GraphNode]:
        return traverse_graph(start_id, self.build_index(), direction, max_depth)

    def detect_drift(self) -> list[DriftReport]:
        return find_drift(self.build_index())

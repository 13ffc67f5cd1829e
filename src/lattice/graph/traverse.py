"""Bounded, cycle-safe traversal of the node graph."""
from __future__ import annotations

import logging
from collections import deque
from typing import Mapping

from lattice.graph.edges import extract_edges
from lattice.models import (
    EdgeDirection,
    Entity,
    GraphNode,
    IncidentEdge,
    TraversalDirection,
)

_logger = logging.getLogger(__name__)


def _outgoing(entity: Entity) -> list[IncidentEdge]:
    return [
        IncidentEdge(
            kind=edge.kind,
            node_id=edge.target_id,
            version=edge.bound_version,
            direction=EdgeDirection.OUTGOING,
        )
        for edge in extract_edges(entity)
    ]


def _incoming(node_id: str, index: Mapping[str, Entity]) -> list[IncidentEdge]:
    # Full scan of every other node; no reverse index is kept.
    found: list[IncidentEdge] = []
    for other_id, other in index.items():
        if other_id == node_id:
            continue
        for edge in extract_edges(other):
            if edge.target_id == node_id:
                found.append(
                    IncidentEdge(
                        kind=edge.kind,
                        node_id=other_id,
                        version=edge.bound_version,
                        direction=EdgeDirection.INCOMING,
                    )
                )
    return found


def traverse_graph(
    start_id: str,
    index: Mapping[str, Entity],
    direction: TraversalDirection | str = TraversalDirection.BOTH,
    max_depth: int = 3,
) -> list[GraphNode]:
    """Collect the nodes reachable from ``start_id`` within ``max_depth`` hops.

    Nodes are expanded breadth-first, so each one is visited once, at its
    shortest distance from the start. A visited node carries all of its
    outgoing edges (downstream/both) and all edges pointing at it
    (upstream/both), whether or not the far end is part of the result.
    With ``both``, an edge between two visited nodes appears on each of them.

    A ``start_id`` missing from the index gives an empty list.

    Raises:
        ValueError: If ``max_depth`` is negative or ``direction`` is unknown.
    """
    direction = TraversalDirection(direction)
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")

    if start_id not in index:
        return []

    follow_out = direction in (TraversalDirection.DOWNSTREAM, TraversalDirection.BOTH)
    follow_in = direction in (TraversalDirection.UPSTREAM, TraversalDirection.BOTH)

    result: list[GraphNode] = []
    seen: set[str] = {start_id}
    queue: deque[tuple[str, int]] = deque([(start_id, 0)])

    while queue:
        node_id, depth = queue.popleft()
        node = GraphNode(entity=index[node_id], depth=depth)
        if follow_out:
            node.edges.extend(_outgoing(node.entity))
        if follow_in:
            node.edges.extend(_incoming(node_id, index))
        result.append(node)

        if depth >= max_depth:
            continue
        for edge in node.edges:
            if edge.node_id in seen or edge.node_id not in index:
                continue
            seen.add(edge.node_id)
            queue.append((edge.node_id, depth + 1))

    _logger.debug(
        "Traversed %d node(s) from %s (%s, depth %d)",
        len(result),
        start_id,
        direction.value,
        max_depth,
    )
    return result

"""Flatten a node's relationship buckets into a uniform edge list."""
from __future__ import annotations

from lattice.models import EDGE_BUCKETS, Edge, Entity


def relationship_for_bucket(bucket: str) -> str:
    """Relationship kind stored under ``bucket``; unknown buckets name themselves."""
    kind = EDGE_BUCKETS.get(bucket)
    return kind.value if kind is not None else bucket


def extract_edges(entity: Entity) -> list[Edge]:
    """Return every outbound edge of ``entity``.

    Order is bucket order, then order within the bucket. Nodes without edges
    yield an empty list.
    """
    edges: list[Edge] = []
    for bucket, refs in entity.edges.items():
        kind = relationship_for_bucket(bucket)
        for ref in refs:
            edges.append(
                Edge(
                    source_id=entity.id,
                    kind=kind,
                    target_id=ref.target,
                    bound_version=ref.bound_version,
                    rationale=ref.rationale,
                    strength=ref.strength,
                )
            )
    return edges

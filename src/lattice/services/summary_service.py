"""Lattice-wide status summary."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lattice.graph.drift import find_drift
from lattice.graph.index import build_node_index
from lattice.models import KIND_ORDER, NodeKind, Priority, Resolution
from lattice.services.search_service import UNRESOLVED
from lattice.storage.protocols import NodeSource


@dataclass
class LatticeSummary:
    node_counts: dict[str, int] = field(default_factory=dict)
    by_resolution: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)
    pending: list[str] = field(default_factory=list)
    orphaned_requirements: list[str] = field(default_factory=list)
    orphaned_theses: list[str] = field(default_factory=list)
    drifted_nodes: int = 0
    stale_edges: int = 0

    @property
    def has_drift(self) -> bool:
        return self.stale_edges > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": dict(self.node_counts),
            "requirements": {
                "by_resolution": dict(self.by_resolution),
                "by_priority": dict(self.by_priority),
                "pending": list(self.pending),
                "orphaned": list(self.orphaned_requirements),
            },
            "theses": {"orphaned": list(self.orphaned_theses)},
            "drift": {
                "has_drift": self.has_drift,
                "nodes": self.drifted_nodes,
                "stale_edges": self.stale_edges,
            },
        }


def summarize_lattice(source: NodeSource) -> LatticeSummary:
    """Count nodes and requirement outcomes, and list loose ends.

    A requirement is orphaned when it has no ``derives_from`` edge; a thesis
    is orphaned when no requirement derives from it.
    """
    index = build_node_index(source)
    summary = LatticeSummary(
        node_counts={kind.value: 0 for kind in KIND_ORDER},
        by_resolution={UNRESOLVED: 0, **{r.value: 0 for r in Resolution}},
        by_priority={p.value: 0 for p in Priority},
    )

    derived_theses: set[str] = set()
    for entity in index.values():
        summary.node_counts[entity.kind.value] += 1
        if entity.kind is not NodeKind.REQUIREMENT:
            continue

        status = entity.resolution.status if entity.resolution else None
        summary.by_resolution[status.value if status else UNRESOLVED] += 1
        if status is not None and status.pending:
            summary.pending.append(entity.id)
        if entity.priority is not None:
            summary.by_priority[entity.priority.value] += 1

        derives_from = entity.edges.get("derives_from") or []
        if not derives_from:
            summary.orphaned_requirements.append(entity.id)
        derived_theses.update(ref.target for ref in derives_from)

    summary.orphaned_theses = [
        entity.id
        for entity in index.values()
        if entity.kind is NodeKind.THESIS and entity.id not in derived_theses
    ]

    reports = find_drift(index)
    summary.drifted_nodes = len(reports)
    summary.stale_edges = sum(len(r.items) for r in reports)
    return summary

"""Version drift detection across the whole node index."""
from __future__ import annotations

import logging
from typing import Mapping

from lattice.graph.edges import extract_edges
from lattice.graph.versioning import classify_drift
from lattice.models import DriftItem, DriftReport, DriftSeverity, Entity

_logger = logging.getLogger(__name__)


def find_drift(index: Mapping[str, Entity]) -> list[DriftReport]:
    """Report every edge whose bound version is behind its target's version.

    Reports come out in index order, one per source node that has at least
    one stale edge. Edges to ids missing from the index are skipped.
    """
    reports: list[DriftReport] = []

    for node_id, node in index.items():
        items: list[DriftItem] = []
        for edge in extract_edges(node):
            target = index.get(edge.target_id)
            if target is None:
                continue
            severity = classify_drift(edge.bound_version, target.version)
            if severity is DriftSeverity.NONE:
                continue
            items.append(
                DriftItem(
                    target_id=edge.target_id,
                    bound_version=edge.bound_version,
                    target_current_version=target.version,
                    severity=severity,
                    edge_kind=edge.kind,
                )
            )

        if items:
            reports.append(
                DriftReport(
                    source_id=node_id,
                    source_kind=node.kind,
                    source_current_version=node.version,
                    items=items,
                )
            )

    _logger.debug(
        "Drift check found %d stale edge(s) across %d node(s)",
        sum(len(r.items) for r in reports),
        len(reports),
    )
    return reports

"""Tests for lattice.services.summary_service."""
from __future__ import annotations

from lattice.models import NodeKind, Priority, Resolution, ResolutionInfo
from lattice.services import summarize_lattice
from lattice.storage import FileNodeStore, InMemoryNodeStore


class TestSummarizeLattice:
    def test_empty(self):
        summary = summarize_lattice(InMemoryNodeStore())
        assert summary.node_counts == {"source": 0, "thesis": 0, "requirement": 0, "implementation": 0}
        assert not summary.has_drift
        assert summary.pending == []

    def test_counts_and_loose_ends(self, make_entity):
        store = InMemoryNodeStore([
            make_entity("THX-1", NodeKind.THESIS),
            make_entity("THX-2", NodeKind.THESIS),
            make_entity("REQ-A", edges={"derives_from": [("THX-1", "1.0.0")]}, priority=Priority.P0),
            make_entity(
                "REQ-B",
                priority=Priority.P0,
                resolution=ResolutionInfo(status=Resolution.BLOCKED, reason="vendor"),
            ),
            make_entity(
                "REQ-C",
                edges={"derives_from": [("THX-1", "1.0.0")]},
                resolution=ResolutionInfo(status=Resolution.WONTFIX, reason="dropped"),
            ),
        ])
        summary = summarize_lattice(store)
        assert summary.node_counts["requirement"] == 3
        assert summary.by_resolution == {
            "unresolved": 1, "verified": 0, "blocked": 1, "deferred": 0, "wontfix": 1,
        }
        assert summary.by_priority == {"P0": 2, "P1": 0, "P2": 0}
        assert summary.pending == ["REQ-B"]
        assert summary.orphaned_requirements == ["REQ-B"]
        assert summary.orphaned_theses == ["THX-2"]

    def test_drift_counts(self, sample_lattice):
        data = summarize_lattice(FileNodeStore(sample_lattice)).to_dict()
        assert data["drift"] == {"has_drift": True, "nodes": 1, "stale_edges": 1}
        assert data["requirements"]["orphaned"] == []
        assert data["theses"]["orphaned"] == []

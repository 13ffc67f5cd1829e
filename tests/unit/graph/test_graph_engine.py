"""Tests for lattice.graph.engine.LatticeGraph."""
from __future__ import annotations

from lattice.graph import LatticeGraph
from lattice.models import DriftSeverity, NodeKind
from lattice.storage import FileNodeStore, InMemoryNodeStore


class TestLatticeGraph:
    def test_index_is_rebuilt_on_each_call(self, make_entity):
        store = InMemoryNodeStore([make_entity("REQ-A")])
        graph = LatticeGraph(store)
        assert list(graph.build_index()) == ["REQ-A"]

        store.save(make_entity("REQ-B"))
        assert set(graph.build_index()) == {"REQ-A", "REQ-B"}

    def test_drift_reflects_store_changes(self, make_entity):
        store = InMemoryNodeStore([
            make_entity("REQ-A", version="1.0.0"),
            make_entity("IMP-X", NodeKind.IMPLEMENTATION, edges={"satisfies": [("REQ-A", "1.0.0")]}),
        ])
        graph = LatticeGraph(store)
        assert graph.detect_drift() == []

        store.get("REQ-A").version = "1.1.0"
        (report,) = graph.detect_drift()
        assert report.items[0].severity is DriftSeverity.MINOR

    def test_over_file_store(self, sample_lattice):
        graph = LatticeGraph(FileNodeStore(sample_lattice))

        nodes = graph.traverse("IMP-X", "downstream", 3)
        assert [n.entity.id for n in nodes] == ["IMP-X", "REQ-A", "THX-1", "SRC-1"]

        (report,) = graph.detect_drift()
        assert report.source_id == "IMP-X"
        assert report.items[0].target_id == "REQ-A"
        assert report.items[0].severity is DriftSeverity.MAJOR

    def test_non_utf8_node_file_is_skipped(self, sample_lattice):
        (sample_lattice / ".lattice" / "requirements" / "bad.yaml").write_bytes(b"id: REQ-BAD\ntitle: \xff\xfe\n")
        graph = LatticeGraph(FileNodeStore(sample_lattice))

        assert "REQ-BAD" not in graph.build_index()
        (report,) = graph.detect_drift()
        assert report.source_id == "IMP-X"
        assert len(graph.traverse("REQ-A", "both", 1)) == 3

"""Tests for lattice.graph.drift."""
from __future__ import annotations

from lattice.graph.drift import find_drift
from lattice.graph.index import build_node_index
from lattice.models import DriftSeverity, NodeKind
from lattice.storage import InMemoryNodeStore


def _index(*entities):
    return build_node_index(InMemoryNodeStore(entities))


class TestFindDrift:
    def test_no_edges_no_reports(self, make_entity):
        assert find_drift(_index(make_entity("REQ-A"), make_entity("REQ-B"))) == []

    def test_current_bindings_are_not_reported(self, make_entity):
        index = _index(
            make_entity("REQ-A", version="1.2.0"),
            make_entity("IMP-X", NodeKind.IMPLEMENTATION, edges={"satisfies": [("REQ-A", "1.2.0")]}),
        )
        assert find_drift(index) == []

    def test_major_drift_report(self, make_entity):
        index = _index(
            make_entity("REQ-A", version="2.0.0"),
            make_entity("IMP-X", NodeKind.IMPLEMENTATION, version="1.4.0",
                        edges={"satisfies": [("REQ-A", "1.0.0")]}),
        )
        (report,) = find_drift(index)
        assert report.source_id == "IMP-X"
        assert report.source_kind is NodeKind.IMPLEMENTATION
        assert report.source_current_version == "1.4.0"
        (item,) = report.items
        assert item.target_id == "REQ-A"
        assert item.bound_version == "1.0.0"
        assert item.target_current_version == "2.0.0"
        assert item.severity is DriftSeverity.MAJOR
        assert item.edge_kind == "satisfies"

    def test_one_report_per_source_with_all_items(self, make_entity):
        index = _index(
            make_entity("REQ-A", version="1.0.3"),
            make_entity("REQ-B", version="1.1.0"),
            make_entity("REQ-C", version="1.0.0"),
            make_entity("IMP-X", NodeKind.IMPLEMENTATION, edges={
                "satisfies": [("REQ-A", "1.0.0"), ("REQ-B", "1.0.0"), ("REQ-C", "1.0.0")],
            }),
        )
        (report,) = find_drift(index)
        assert [(i.target_id, i.severity) for i in report.items] == [
            ("REQ-A", DriftSeverity.PATCH),
            ("REQ-B", DriftSeverity.MINOR),
        ]
        assert report.max_severity is DriftSeverity.MINOR

    def test_dangling_edges_are_skipped(self, make_entity):
        index = _index(
            make_entity("IMP-X", NodeKind.IMPLEMENTATION, edges={"satisfies": [("GHOST", "0.1.0")]}),
        )
        assert find_drift(index) == []

    def test_missing_binding_compares_against_default(self, make_entity):
        index = _index(
            make_entity("SRC-1", NodeKind.SOURCE, version="1.0.1"),
            make_entity("THX-1", NodeKind.THESIS, edges={"supported_by": [("SRC-1", None)]}),
        )
        (report,) = find_drift(index)
        assert report.items[0].bound_version == "1.0.0"
        assert report.items[0].severity is DriftSeverity.PATCH

    def test_bound_ahead_of_target_is_ignored(self, make_entity):
        index = _index(
            make_entity("REQ-A", version="1.0.0"),
            make_entity("IMP-X", NodeKind.IMPLEMENTATION, edges={"satisfies": [("REQ-A", "3.0.0")]}),
        )
        assert find_drift(index) == []

    def test_reports_follow_index_order(self, make_entity):
        index = _index(
            make_entity("IMP-X", NodeKind.IMPLEMENTATION, edges={"satisfies": [("REQ-A", "1.0.0")]}),
            make_entity("REQ-A", version="1.1.0"),
            make_entity("THX-1", NodeKind.THESIS, version="2.0.0"),
            make_entity("REQ-B", edges={"derives_from": [("THX-1", "1.0.0")]}),
        )
        assert [r.source_id for r in find_drift(index)] == ["REQ-B", "IMP-X"]

    def test_report_serialises(self, make_entity):
        index = _index(
            make_entity("REQ-A", version="2.0.0"),
            make_entity("IMP-X", NodeKind.IMPLEMENTATION, edges={"satisfies": [("REQ-A", "1.0.0")]}),
        )
        data = find_drift(index)[0].to_dict()
        assert data["source_kind"] == "implementation"
        assert data["items"][0]["severity"] == "major"

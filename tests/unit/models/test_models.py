"""Tests for lattice.models."""
from __future__ import annotations

from datetime import date

import pytest

from lattice.models import (
    DriftItem,
    DriftReport,
    DriftSeverity,
    EdgeReference,
    Entity,
    NodeKind,
    NodeStatus,
    Priority,
    Resolution,
)


class TestNodeKind:
    def test_directories(self):
        assert NodeKind.SOURCE.directory == "sources"
        assert NodeKind.THESIS.directory == "theses"
        assert NodeKind.REQUIREMENT.directory == "requirements"
        assert NodeKind.IMPLEMENTATION.directory == "implementations"


class TestDriftSeverity:
    def test_rank_order(self):
        ranks = [s.rank for s in (DriftSeverity.NONE, DriftSeverity.PATCH, DriftSeverity.MINOR, DriftSeverity.MAJOR)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4


class TestEdgeReference:
    def test_bound_version_defaults(self):
        assert EdgeReference(target="REQ-A").bound_version == "1.0.0"
        assert EdgeReference(target="REQ-A", version="2.3.4").bound_version == "2.3.4"

    def test_from_dict_coerces_yaml_scalars(self):
        ref = EdgeReference.from_dict({"target": "REQ-A", "version": 1.0, "strength": "0.5"})
        assert ref.version == "1.0"
        assert ref.strength == 0.5

    def test_to_dict_omits_unset_fields(self):
        assert EdgeReference(target="REQ-A").to_dict() == {"target": "REQ-A"}


class TestEntity:
    def _record(self, **overrides):
        data = {
            "id": "REQ-CORE-001",
            "type": "requirement",
            "title": "Cache responses",
            "body": "Responses are cached for 60s.",
            "status": "active",
            "version": "1.2.0",
            "created_at": "2025-01-01T00:00:00+00:00",
            "created_by": "agent:planner",
            "priority": "P0",
            "tags": ["perf"],
            "edges": {
                "derives_from": [{"target": "THX-1", "version": "1.0.0", "rationale": "core bet"}],
            },
        }
        data.update(overrides)
        return data

    def test_from_dict(self):
        entity = Entity.from_dict(self._record())
        assert entity.id == "REQ-CORE-001"
        assert entity.kind is NodeKind.REQUIREMENT
        assert entity.status is NodeStatus.ACTIVE
        assert entity.version == "1.2.0"
        assert entity.edges["derives_from"][0].rationale == "core bet"
        assert entity.priority is Priority.P0
        assert entity.tags == ["perf"]
        assert entity.extra == {}

    def test_round_trip_preserves_record(self):
        record = self._record()
        assert Entity.from_dict(record).to_dict() == record

    def test_missing_id_raises(self):
        with pytest.raises(ValueError, match="'id'"):
            Entity.from_dict(self._record(id=""))

    def test_missing_type_raises(self):
        record = self._record()
        del record["type"]
        with pytest.raises(ValueError, match="'type'"):
            Entity.from_dict(record)

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            Entity.from_dict(self._record(type="epic"))

    def test_malformed_edges_raise(self):
        with pytest.raises(ValueError, match="edges"):
            Entity.from_dict(self._record(edges=["THX-1"]))

    def test_yaml_dates_become_strings(self):
        entity = Entity.from_dict(self._record(created_at=date(2025, 1, 2)))
        assert entity.created_at == "2025-01-02"

    def test_null_status_defaults_to_active(self):
        assert Entity.from_dict(self._record(status=None)).status is NodeStatus.ACTIVE

    def test_type_is_case_insensitive(self):
        assert Entity.from_dict(self._record(type="Thesis")).kind is NodeKind.THESIS

    def test_unknown_keys_kept_in_extra(self):
        entity = Entity.from_dict(self._record(meta={"url": "https://example.org"}))
        assert entity.extra == {"meta": {"url": "https://example.org"}}
        assert entity.to_dict()["meta"] == {"url": "https://example.org"}

    def test_priority_is_case_insensitive(self):
        assert Entity.from_dict(self._record(priority="p1")).priority is Priority.P1

    def test_unknown_priority_raises(self):
        with pytest.raises(ValueError):
            Entity.from_dict(self._record(priority="urgent"))

    def test_comma_separated_tags(self):
        assert Entity.from_dict(self._record(tags="perf, api")).tags == ["perf", "api"]

    def test_resolution_round_trip(self):
        resolution = {
            "status": "blocked",
            "reason": "waiting on vendor",
            "resolved_at": "2025-02-01T00:00:00+00:00",
            "resolved_by": "human:ana",
        }
        record = self._record(resolution=resolution, category="CORE")
        entity = Entity.from_dict(record)
        assert entity.resolution.status is Resolution.BLOCKED
        assert entity.resolution.status.pending
        assert entity.category == "CORE"
        assert entity.to_dict() == record

    def test_unknown_resolution_raises(self):
        with pytest.raises(ValueError):
            Entity.from_dict(self._record(resolution={"status": "done"}))

    def test_verifications_round_trip(self):
        verification = {
            "requirement": "REQ-CORE-001",
            "requirement_version": "1.2.0",
            "tests_pass": True,
            "coverage": 0.9,
            "files": ["src/cache.py"],
            "verified_at": "2025-02-01T00:00:00+00:00",
            "verified_by": "agent:ci",
        }
        record = self._record(type="implementation", verifications=[verification])
        entity = Entity.from_dict(record)
        assert entity.verifications[0].coverage == 0.9
        assert entity.to_dict()["verifications"] == [verification]


class TestDriftReport:
    def test_max_severity(self):
        report = DriftReport(
            source_id="IMP-X",
            source_kind=NodeKind.IMPLEMENTATION,
            source_current_version="1.0.0",
            items=[
                DriftItem("REQ-A", "1.0.0", "1.0.1", DriftSeverity.PATCH),
                DriftItem("REQ-B", "1.0.0", "2.0.0", DriftSeverity.MAJOR),
            ],
        )
        assert report.max_severity is DriftSeverity.MAJOR

    def test_empty_report_severity_is_none(self):
        report = DriftReport("IMP-X", NodeKind.IMPLEMENTATION, "1.0.0")
        assert report.max_severity is DriftSeverity.NONE

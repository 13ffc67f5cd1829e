"""Unit tests for the write-side `lattice` commands: init, add, bump, reaffirm, lint."""
from __future__ import annotations

import json

import pytest

from lattice.cli import main
from lattice.cli.node_cmd import _parse_edge_args
from lattice.models import Priority, Resolution
from lattice.storage import FileNodeStore


def _run(capsys, *argv):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


class TestParseEdgeArgs:
    def test_groups_by_bucket(self):
        assert _parse_edge_args(["satisfies:REQ-A", "depends_on:IMP-1", "satisfies:REQ-B"]) == {
            "satisfies": ["REQ-A", "REQ-B"],
            "depends_on": ["IMP-1"],
        }

    @pytest.mark.parametrize("value", ["REQ-A", "satisfies:", ":REQ-A"])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="BUCKET:TARGET"):
            _parse_edge_args([value])


class TestInit:
    def test_creates_lattice(self, tmp_path, capsys):
        code, out, _ = _run(capsys, "--root", str(tmp_path), "init")
        assert code == 0
        assert (tmp_path / ".lattice" / "requirements").is_dir()
        assert "Initialised lattice" in out

    def test_existing_lattice_is_error(self, lattice_root, capsys):
        code, _, err = _run(capsys, "--root", str(lattice_root), "init")
        assert code == 1
        assert "already initialised" in err

    def test_force(self, lattice_root, capsys):
        assert _run(capsys, "--root", str(lattice_root), "init", "--force")[0] == 0

    def test_user_settings(self, tmp_path, capsys, monkeypatch):
        home = tmp_path / "home"
        monkeypatch.setenv("LATTICE_DATA_DIR", str(home))
        code, out, _ = _run(capsys, "--root", str(tmp_path), "init", "--user")
        assert code == 0
        assert (home / "config" / "settings.toml").is_file()
        assert "User settings at" in out

    def test_user_settings_not_created_by_default(self, tmp_path, capsys, monkeypatch):
        home = tmp_path / "home"
        monkeypatch.setenv("LATTICE_DATA_DIR", str(home))
        assert _run(capsys, "--root", str(tmp_path), "init")[0] == 0
        assert not (home / "config" / "settings.toml").exists()


class TestAdd:
    def test_adds_node_with_bound_edges(self, sample_lattice, capsys):
        code, out, _ = _run(
            capsys,
            "--root", str(sample_lattice),
            "add", "implementation", "IMP-Y",
            "--title", "Disk cache",
            "--edge", "satisfies:REQ-A",
            "--created-by", "human:sam",
        )
        assert code == 0
        assert "Created IMP-Y" in out

        entity = FileNodeStore(sample_lattice).get("IMP-Y")
        assert entity.version == "1.0.0"
        assert entity.created_by == "human:sam"
        assert entity.edges["satisfies"][0].version == "2.0.0"

    def test_requirement_priority(self, lattice_root, capsys):
        code, _, _ = _run(
            capsys, "--root", str(lattice_root), "add", "requirement", "REQ-1", "--title", "T", "--priority", "P1",
            "--category", "Core", "--tags", "api, cache",
        )
        assert code == 0
        entity = FileNodeStore(lattice_root).get("REQ-1")
        assert entity.priority is Priority.P1
        assert entity.category == "Core"
        assert entity.tags == ["api", "cache"]
        assert entity.extra == {}

    def test_unknown_bucket_warns(self, lattice_root, capsys):
        code, out, _ = _run(
            capsys, "--root", str(lattice_root), "add", "thesis", "THX-1", "--title", "T", "--edge", "inspired_by:SRC-1"
        )
        assert code == 0
        assert "unknown edge type 'inspired_by'" in out

    def test_duplicate_id(self, sample_lattice, capsys):
        code, _, err = _run(capsys, "--root", str(sample_lattice), "add", "source", "REQ-A", "--title", "T")
        assert code == 1
        assert "Node id already exists: REQ-A" in err

    def test_bad_edge_argument(self, lattice_root, capsys):
        code, _, err = _run(capsys, "--root", str(lattice_root), "add", "source", "S", "--title", "T", "--edge", "nope")
        assert code == 1
        assert "BUCKET:TARGET" in err

    def test_default_edge_version_from_config(self, lattice_root, capsys, monkeypatch):
        monkeypatch.setenv("LATTICE_DEFAULT_EDGE_VERSION", "0.1.0")
        _run(capsys, "--root", str(lattice_root), "add", "thesis", "THX-1", "--title", "T", "--edge", "supported_by:SRC-X")
        assert FileNodeStore(lattice_root).get("THX-1").edges["supported_by"][0].version == "0.1.0"


class TestBump:
    def test_bump_minor_with_changes(self, sample_lattice, capsys):
        code, out, _ = _run(
            capsys, "--root", str(sample_lattice), "bump", "THX-1", "--part", "minor", "--body", "Revised"
        )
        assert code == 0
        assert "v1.2.0" in out
        entity = FileNodeStore(sample_lattice).get("THX-1")
        assert entity.version == "1.2.0"
        assert entity.body == "Revised"

    def test_missing_node(self, sample_lattice, capsys):
        code, _, err = _run(capsys, "--root", str(sample_lattice), "bump", "NOPE")
        assert code == 1
        assert "Node not found" in err


class TestReaffirm:
    def test_clears_drift(self, sample_lattice, capsys):
        code, out, _ = _run(capsys, "--root", str(sample_lattice), "reaffirm", "IMP-X")
        assert code == 0
        assert "Reaffirmed 1 edge(s)" in out

        code, out, _ = _run(capsys, "--root", str(sample_lattice), "drift", "--check", "--format", "json")
        assert code == 0
        assert json.loads(out) == []

    def test_nothing_to_do(self, sample_lattice, capsys):
        code, out, _ = _run(capsys, "--root", str(sample_lattice), "reaffirm", "THX-1")
        assert code == 0
        assert "Nothing to reaffirm" in out

    def test_target_filter(self, sample_lattice, capsys):
        code, out, _ = _run(capsys, "--root", str(sample_lattice), "reaffirm", "IMP-X", "--target", "SRC-1")
        assert code == 0
        assert "Nothing to reaffirm" in out


class TestLint:
    def test_clean(self, sample_lattice, capsys):
        code, out, _ = _run(capsys, "--root", str(sample_lattice), "lint")
        assert code == 0
        assert "No issues found" in out

    def test_warnings_pass_unless_strict(self, sample_lattice, write_node, capsys):
        write_node(sample_lattice, "sources", {"id": "SRC-2", "type": "source", "title": "S"})
        assert _run(capsys, "--root", str(sample_lattice), "lint")[0] == 0
        assert _run(capsys, "--root", str(sample_lattice), "lint", "--strict")[0] == 1

    def test_errors_fail(self, sample_lattice, write_node, capsys):
        write_node(sample_lattice, "sources", {"id": "SRC-1", "type": "source", "title": "Dup"}, "dup.yaml")
        code, out, err = _run(capsys, "--root", str(sample_lattice), "lint", "--format", "json")
        assert code == 1
        payload = json.loads(out)
        assert payload["errors"] == 1
        assert any("Duplicate ID 'SRC-1'" in i["message"] for i in payload["issues"])

    def test_fix(self, sample_lattice, write_node, capsys):
        (sample_lattice / ".lattice" / "config.toml").unlink()
        write_node(sample_lattice, "sources", {"id": "SRC-2", "type": "source", "title": "S"})
        code, out, _ = _run(capsys, "--root", str(sample_lattice), "lint", "--fix", "--strict", "--format", "json")
        assert code == 0
        payload = json.loads(out)
        assert payload["issues"] == []
        assert len(payload["fixed"]) == 2


class TestResolve:
    def test_verified(self, sample_lattice, capsys):
        code, out, _ = _run(capsys, "--root", str(sample_lattice), "resolve", "REQ-A", "--verified", "--by", "human:kim")
        assert code == 0
        assert "resolved as verified" in out
        resolution = FileNodeStore(sample_lattice).get("REQ-A").resolution
        assert resolution.status is Resolution.VERIFIED
        assert resolution.resolved_by == "human:kim"

    def test_blocked_with_reason_json(self, sample_lattice, capsys):
        code, out, _ = _run(
            capsys, "--root", str(sample_lattice), "resolve", "REQ-A", "--blocked", "waiting on [vendor] API",
            "--format", "json",
        )
        assert code == 0
        payload = json.loads(out)
        assert payload["resolution"]["status"] == "blocked"
        assert payload["resolution"]["reason"] == "waiting on [vendor] API"
        assert payload["version"] == "2.0.0"

    def test_outcome_is_required(self, sample_lattice, capsys):
        with pytest.raises(SystemExit):
            main(["--root", str(sample_lattice), "resolve", "REQ-A"])

    def test_not_a_requirement(self, sample_lattice, capsys):
        code, _, err = _run(capsys, "--root", str(sample_lattice), "resolve", "IMP-X", "--wontfix", "dropped")
        assert code == 1
        assert "not a requirement" in err


class TestVerify:
    def test_rebinds_and_resolves(self, sample_lattice, capsys):
        code, out, _ = _run(
            capsys, "--root", str(sample_lattice), "verify", "IMP-X", "satisfies", "REQ-A",
            "--tests-pass", "--coverage", "0.9", "--files", "cache.py, lru.py",
        )
        assert code == 0
        assert "Rebound edge" in out
        assert "REQ-A resolved as verified" in out

        store = FileNodeStore(sample_lattice)
        implementation = store.get("IMP-X")
        assert implementation.edges["satisfies"][0].version == "2.0.0"
        (verification,) = implementation.verifications
        assert verification.coverage == 0.9
        assert verification.files == ["cache.py", "lru.py"]
        assert store.get("REQ-A").resolution.status is Resolution.VERIFIED

    def test_bad_coverage(self, sample_lattice, capsys):
        code, _, err = _run(
            capsys, "--root", str(sample_lattice), "verify", "IMP-X", "satisfies", "REQ-A", "--coverage", "90",
        )
        assert code == 1
        assert "coverage must be between 0.0 and 1.0" in err


class TestRefine:
    def test_creates_sub_requirement(self, sample_lattice, capsys):
        code, out, _ = _run(
            capsys, "--root", str(sample_lattice), "refine", "REQ-A",
            "--gap-type", "design_decision",
            "--title", "Eviction policy",
            "--description", "LRU or LFU?",
            "--implementation", "IMP-X",
            "--format", "json",
        )
        assert code == 0
        payload = json.loads(out)
        assert payload["sub_requirement"]["id"] == "REQ-A-A"
        assert payload["sub_requirement"]["status"] == "draft"
        assert payload["parent_updated"] is True
        assert payload["implementation_updated"] is True

    def test_unknown_parent(self, sample_lattice, capsys):
        code, _, err = _run(
            capsys, "--root", str(sample_lattice), "refine", "REQ-NOPE",
            "--gap-type", "clarification", "--title", "T", "--description", "D",
        )
        assert code == 1
        assert "REQ-NOPE" in err

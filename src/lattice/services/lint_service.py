"""Structural lint for lattice node files, with auto-fix for simple issues."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from lattice.config.constants import (
    DEFAULT_EDGE_VERSION,
    DEFAULT_NODE_VERSION,
    LATTICE_CONFIG_FILE,
    LATTICE_DIR,
)
from lattice.core.logging_config import get_logger
from lattice.graph.edges import extract_edges
from lattice.graph.index import build_node_index
from lattice.graph.versioning import is_valid_version
from lattice.models import EDGE_BUCKETS, NodeKind, NodeStatus, Priority, Resolution
from lattice.storage.errors import InvalidNodeError
from lattice.storage.files import (
    FileNodeStore,
    iter_node_files,
    read_node_record,
    write_node_record,
)

logger = get_logger(__name__)


class LintSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


# Issue codes that fix_issues knows how to repair.
MISSING_CONFIG = "missing-config"
MISSING_VERSION = "missing-version"
MISSING_EDGE_VERSION = "missing-edge-version"
_FIXABLE_CODES = {MISSING_CONFIG, MISSING_VERSION, MISSING_EDGE_VERSION}


@dataclass
class LintIssue:
    """A single problem found in a lattice file."""

    file: Path
    severity: LintSeverity
    message: str
    node_id: str | None = None
    code: str = ""

    @property
    def fixable(self) -> bool:
        return self.code in _FIXABLE_CODES

    def __str__(self) -> str:
        node_part = f" ({self.node_id})" if self.node_id else ""
        return f"{self.severity.value}: {self.file.name}{node_part}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": str(self.file),
            "node_id": self.node_id,
            "severity": self.severity.value,
            "message": self.message,
            "fixable": self.fixable,
        }


@dataclass
class LintReport:
    issues: list[LintIssue] = field(default_factory=list)

    def errors(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity is LintSeverity.ERROR]

    def warnings(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity is LintSeverity.WARNING]

    def fixable(self) -> list[LintIssue]:
        return [i for i in self.issues if i.fixable]

    def has_errors(self) -> bool:
        return any(i.severity is LintSeverity.ERROR for i in self.issues)


def lint_lattice(root: Path) -> LintReport:
    """Check every node file under ``root/.lattice`` plus cross-file invariants."""
    lattice_dir = root / LATTICE_DIR
    report = LintReport()

    if not lattice_dir.is_dir():
        report.issues.append(
            LintIssue(lattice_dir, LintSeverity.ERROR, f"No {LATTICE_DIR} directory found")
        )
        return report

    config_path = lattice_dir / LATTICE_CONFIG_FILE
    if not config_path.exists():
        report.issues.append(
            LintIssue(
                config_path,
                LintSeverity.WARNING,
                f"Missing {LATTICE_CONFIG_FILE}",
                code=MISSING_CONFIG,
            )
        )

    seen: dict[str, Path] = {}
    for path in iter_node_files(lattice_dir):
        node_id = _lint_node_file(path, lattice_dir, report.issues)
        if not node_id:
            continue
        if node_id in seen:
            report.issues.append(
                LintIssue(
                    path,
                    LintSeverity.ERROR,
                    f"Duplicate ID '{node_id}' (also in {seen[node_id]})",
                    node_id=node_id,
                )
            )
        else:
            seen[node_id] = path

    _check_edge_targets(root, report.issues)
    logger.debug("Lint found %d issue(s) in %s", len(report.issues), lattice_dir)
    return report


def _is_member(enum: type[Enum], value: str) -> bool:
    # Node records accept these values case-insensitively.
    return any(value.lower() == m.value.lower() for m in enum)


def _lint_node_file(path: Path, lattice_dir: Path, issues: list[LintIssue]) -> str | None:
    """Lint one file; return its node id when it has one."""
    try:
        data = read_node_record(path)
    except OSError:
        issues.append(LintIssue(path, LintSeverity.ERROR, "Cannot read file"))
        return None
    except InvalidNodeError as exc:
        issues.append(LintIssue(path, LintSeverity.ERROR, str(exc)))
        return None

    node_id = str(data.get("id") or "").strip() or None

    def add(severity: LintSeverity, message: str, code: str = "") -> None:
        issues.append(LintIssue(path, severity, message, node_id=node_id, code=code))

    if node_id is None:
        add(LintSeverity.ERROR, "Missing or empty 'id' field")
    if not str(data.get("title") or "").strip():
        add(LintSeverity.ERROR, "Missing or empty 'title' field")

    kind: NodeKind | None = None
    try:
        kind = NodeKind(str(data.get("type", "")).lower())
    except ValueError:
        add(LintSeverity.ERROR, f"Missing or unknown 'type': {data.get('type')!r}")

    version = data.get("version")
    if version is None or str(version).strip() == "":
        add(
            LintSeverity.WARNING,
            f"Missing 'version' field (default: {DEFAULT_NODE_VERSION})",
            MISSING_VERSION,
        )
    elif not is_valid_version(str(version)):
        add(LintSeverity.WARNING, f"Invalid semver version: '{version}'")

    if kind is not None:
        relative = path.relative_to(lattice_dir)
        if relative.parts[0] != kind.directory:
            add(
                LintSeverity.WARNING,
                f"Node type '{kind.value}' should be in '{kind.directory}/' directory",
            )
        if kind is NodeKind.REQUIREMENT and not data.get("priority"):
            add(LintSeverity.WARNING, "Requirement missing 'priority' field")

    for key, enum in (("status", NodeStatus), ("priority", Priority)):
        value = data.get(key)
        if value and not _is_member(enum, str(value)):
            allowed = ", ".join(m.value for m in enum)
            add(LintSeverity.ERROR, f"Invalid {key} '{value}' (expected one of: {allowed})")

    resolution = data.get("resolution")
    if resolution is not None:
        status = resolution.get("status") if isinstance(resolution, dict) else None
        if not _is_member(Resolution, str(status or "")):
            add(LintSeverity.ERROR, f"Invalid resolution status {status!r}")

    edges = data.get("edges")
    if edges is None:
        return node_id
    if not isinstance(edges, dict):
        add(LintSeverity.ERROR, "'edges' must be a mapping of edge type to references")
        return node_id

    for bucket, refs in edges.items():
        if bucket not in EDGE_BUCKETS:
            add(LintSeverity.WARNING, f"Unknown edge type '{bucket}'")
        if not isinstance(refs, list):
            add(LintSeverity.ERROR, f"Edge type '{bucket}' must hold a list")
            continue
        for ref in refs:
            target = str(ref.get("target") or "").strip() if isinstance(ref, dict) else ""
            if not target:
                add(LintSeverity.ERROR, f"Empty target in '{bucket}' edge")
                continue
            bound = ref.get("version")
            if bound is None:
                add(
                    LintSeverity.WARNING,
                    f"Edge '{bucket}' -> '{target}' missing version binding",
                    MISSING_EDGE_VERSION,
                )
            elif not is_valid_version(str(bound)):
                add(
                    LintSeverity.WARNING,
                    f"Edge '{bucket}' -> '{target}' has invalid version '{bound}'",
                )
    return node_id


def _check_edge_targets(root: Path, issues: list[LintIssue]) -> None:
    index = build_node_index(FileNodeStore(root))
    for node in index.values():
        for edge in extract_edges(node):
            if edge.target_id and edge.target_id not in index:
                issues.append(
                    LintIssue(
                        Path(f"<{node.id}>"),
                        LintSeverity.WARNING,
                        f"Edge references non-existent node '{edge.target_id}'",
                        node_id=node.id,
                    )
                )


def fix_issues(root: Path, report: LintReport) -> list[str]:
    """Repair fixable issues in place; return a description of each fix."""
    from lattice.config.user_config_writer import ensure_lattice_config_exists

    fixed: list[str] = []
    files_to_patch: set[Path] = set()

    for issue in report.fixable():
        if issue.code == MISSING_CONFIG:
            path = ensure_lattice_config_exists(root)
            fixed.append(f"Created {path}")
        else:
            files_to_patch.add(issue.file)

    for path in sorted(files_to_patch):
        data = read_node_record(path)
        changes = _fill_missing_versions(data)
        if changes:
            write_node_record(path, data)
            fixed.append(f"Added {changes} version binding(s) in {path.name}")
    return fixed


def _fill_missing_versions(data: dict[str, Any]) -> int:
    changes = 0
    version = data.get("version")
    if version is None or str(version).strip() == "":
        data["version"] = DEFAULT_NODE_VERSION
        changes += 1
    edges = data.get("edges")
    if isinstance(edges, dict):
        for refs in edges.values():
            if not isinstance(refs, list):
                continue
            for ref in refs:
                if isinstance(ref, dict) and ref.get("target") and ref.get("version") is None:
                    ref["version"] = DEFAULT_EDGE_VERSION
                    changes += 1
    return changes

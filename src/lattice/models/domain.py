"""Lattice node and graph data models."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from lattice.models.enums import (
    DriftSeverity,
    EdgeDirection,
    NodeKind,
    NodeStatus,
    Priority,
    Resolution,
)

# Version assumed for an edge reference written without one.
DEFAULT_EDGE_VERSION = "1.0.0"

_CORE_KEYS = (
    "id",
    "type",
    "title",
    "body",
    "status",
    "version",
    "created_at",
    "created_by",
    "updated_at",
    "priority",
    "category",
    "tags",
    "resolution",
    "verifications",
    "edges",
)


def _as_text(value: Any) -> str:
    # YAML turns unquoted timestamps and versions like 1.0 into non-strings.
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return "" if value is None else str(value)


def _as_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        raise ValueError(f"'tags' must be a list, got {type(value).__name__}")
    return [t for t in (_as_text(v).strip() for v in value) if t]


@dataclass
class ResolutionInfo:
    """How and when a requirement was resolved."""

    status: Resolution
    resolved_at: str = ""
    resolved_by: str = ""
    reason: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ResolutionInfo":
        if not isinstance(data, dict):
            raise ValueError("'resolution' must be a mapping")
        reason = data.get("reason")
        return cls(
            status=Resolution(str(data.get("status", "")).lower()),
            resolved_at=_as_text(data.get("resolved_at")),
            resolved_by=_as_text(data.get("resolved_by")),
            reason=_as_text(reason) if reason is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.reason is not None:
            data["reason"] = self.reason
        data["resolved_at"] = self.resolved_at
        data["resolved_by"] = self.resolved_by
        return data


@dataclass
class Verification:
    """Evidence that an implementation satisfies one requirement version."""

    requirement: str
    requirement_version: str
    tests_pass: bool = False
    coverage: float | None = None
    files: list[str] = field(default_factory=list)
    verified_at: str = ""
    verified_by: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Verification":
        coverage = data.get("coverage")
        return cls(
            requirement=_as_text(data.get("requirement")),
            requirement_version=_as_text(data.get("requirement_version")),
            tests_pass=bool(data.get("tests_pass", False)),
            coverage=float(coverage) if coverage is not None else None,
            files=[_as_text(f) for f in data.get("files") or []],
            verified_at=_as_text(data.get("verified_at")),
            verified_by=_as_text(data.get("verified_by")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "requirement": self.requirement,
            "requirement_version": self.requirement_version,
            "tests_pass": self.tests_pass,
        }
        if self.coverage is not None:
            data["coverage"] = self.coverage
        if self.files:
            data["files"] = list(self.files)
        data["verified_at"] = self.verified_at
        data["verified_by"] = self.verified_by
        return data


@dataclass
class EdgeReference:
    """A version-bound pointer from one node to another, as stored in its record."""

    target: str
    version: str | None = None
    rationale: str | None = None
    strength: float | None = None

    @property
    def bound_version(self) -> str:
        return self.version or DEFAULT_EDGE_VERSION

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EdgeReference":
        version = data.get("version")
        strength = data.get("strength")
        return cls(
            target=_as_text(data.get("target")),
            version=_as_text(version) if version is not None else None,
            rationale=data.get("rationale"),
            strength=float(strength) if strength is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"target": self.target}
        if self.version is not None:
            data["version"] = self.version
        if self.rationale is not None:
            data["rationale"] = self.rationale
        if self.strength is not None:
            data["strength"] = self.strength
        return data


@dataclass
class Entity:
    """A typed knowledge-graph node.

    ``edges`` maps bucket names (``satisfies``, ``supported_by``, ...) to the
    references stored under them, in file order. Requirement fields
    (``priority``, ``category``, ``tags``, ``resolution``) and implementation
    ``verifications`` are typed; anything else, such as ``meta``, is kept
    untouched in ``extra``.
    """

    id: str
    kind: NodeKind
    title: str
    body: str = ""
    status: NodeStatus = NodeStatus.ACTIVE
    version: str = "1.0.0"
    created_at: str = ""
    created_by: str = ""
    updated_at: str | None = None
    priority: Priority | None = None
    category: str | None = None
    tags: list[str] = field(default_factory=list)
    resolution: ResolutionInfo | None = None
    verifications: list[Verification] = field(default_factory=list)
    edges: dict[str, list[EdgeReference]] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entity":
        """Build an entity from a parsed node record.

        Raises:
            ValueError: If ``id`` or ``type`` is missing or not recognised, or
                a typed field (``status``, ``priority``, ``resolution``) holds
                an unknown value.
        """
        node_id = _as_text(data.get("id")).strip()
        if not node_id:
            raise ValueError("Node record has no 'id'")
        raw_type = data.get("type")
        if raw_type is None:
            raise ValueError(f"Node {node_id} has no 'type'")
        kind = NodeKind(str(raw_type).lower())

        edges: dict[str, list[EdgeReference]] = {}
        raw_edges = data.get("edges") or {}
        if not isinstance(raw_edges, dict):
            raise ValueError(f"Node {node_id} has malformed 'edges'")
        for bucket, refs in raw_edges.items():
            if not isinstance(refs, list):
                continue
            edges[str(bucket)] = [
                EdgeReference.from_dict(ref) for ref in refs if isinstance(ref, dict)
            ]

        updated_at = data.get("updated_at")
        priority = data.get("priority")
        category = data.get("category")
        resolution = data.get("resolution")
        return cls(
            id=node_id,
            kind=kind,
            title=_as_text(data.get("title")),
            body=_as_text(data.get("body")),
            status=NodeStatus(str(data.get("status") or NodeStatus.ACTIVE.value).lower()),
            version=_as_text(data.get("version")),
            created_at=_as_text(data.get("created_at")),
            created_by=_as_text(data.get("created_by")),
            updated_at=_as_text(updated_at) if updated_at is not None else None,
            priority=Priority(str(priority).upper()) if priority else None,
            category=_as_text(category) if category else None,
            tags=_as_tags(data.get("tags")),
            resolution=ResolutionInfo.from_dict(resolution) if resolution else None,
            verifications=[
                Verification.from_dict(v) for v in data.get("verifications") or [] if isinstance(v, dict)
            ],
            edges=edges,
            extra={k: v for k, v in data.items() if k not in _CORE_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "title": self.title,
            "body": self.body,
            "status": self.status.value,
            "version": self.version,
            "created_at": self.created_at,
            "created_by": self.created_by,
        }
        if self.updated_at is not None:
            data["updated_at"] = self.updated_at
        if self.priority is not None:
            data["priority"] = self.priority.value
        if self.category is not None:
            data["category"] = self.category
        if self.tags:
            data["tags"] = list(self.tags)
        if self.resolution is not None:
            data["resolution"] = self.resolution.to_dict()
        if self.verifications:
            data["verifications"] = [v.to_dict() for v in self.verifications]
        data.update(self.extra)
        if self.edges:
            data["edges"] = {
                bucket: [ref.to_dict() for ref in refs]
                for bucket, refs in self.edges.items()
            }
        return data


@dataclass(frozen=True)
class Edge:
    """One outbound edge of a node, flattened out of its bucket."""

    source_id: str
    kind: str
    target_id: str
    bound_version: str
    rationale: str | None = None
    strength: float | None = None


@dataclass(frozen=True)
class IncidentEdge:
    """An edge as seen from a traversed node.

    ``node_id`` is the other endpoint: the target for outgoing edges, the
    source for incoming ones.
    """

    kind: str
    node_id: str
    version: str
    direction: EdgeDirection

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "node_id": self.node_id,
            "version": self.version,
            "direction": self.direction.value,
        }


@dataclass
class GraphNode:
    """A node reached by a traversal, with the edges recorded while expanding it."""

    entity: Entity
    edges: list[IncidentEdge] = field(default_factory=list)
    depth: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.entity.id,
            "type": self.entity.kind.value,
            "title": self.entity.title,
            "version": self.entity.version,
            "depth": self.depth,
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass(frozen=True)
class DriftItem:
    """A single stale edge."""

    target_id: str
    bound_version: str
    target_current_version: str
    severity: DriftSeverity
    edge_kind: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_id": self.target_id,
            "edge_kind": self.edge_kind,
            "bound_version": self.bound_version,
            "target_current_version": self.target_current_version,
            "severity": self.severity.value,
        }


@dataclass
class DriftReport:
    """All stale edges owned by one source node."""

    source_id: str
    source_kind: NodeKind
    source_current_version: str
    items: list[DriftItem] = field(default_factory=list)

    @property
    def max_severity(self) -> DriftSeverity:
        return max((i.severity for i in self.items), key=lambda s: s.rank, default=DriftSeverity.NONE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "source_kind": self.source_kind.value,
            "source_current_version": self.source_current_version,
            "items": [i.to_dict() for i in self.items],
        }

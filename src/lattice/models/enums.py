"""Enumerations for lattice."""
from __future__ import annotations

from enum import Enum


class NodeKind(str, Enum):
    """The four kinds of lattice node."""

    SOURCE = "source"
    THESIS = "thesis"
    REQUIREMENT = "requirement"
    IMPLEMENTATION = "implementation"

    @property
    def directory(self) -> str:
        """Name of the directory holding this kind under ``.lattice/``."""
        return _KIND_DIRECTORIES[self]


_KIND_DIRECTORIES: dict[NodeKind, str] = {
    NodeKind.SOURCE: "sources",
    NodeKind.THESIS: "theses",
    NodeKind.REQUIREMENT: "requirements",
    NodeKind.IMPLEMENTATION: "implementations",
}

# Load order for the node index; later kinds win on id collisions.
KIND_ORDER: tuple[NodeKind, ...] = (
    NodeKind.SOURCE,
    NodeKind.THESIS,
    NodeKind.REQUIREMENT,
    NodeKind.IMPLEMENTATION,
)


class NodeStatus(str, Enum):
    """Lifecycle status of a node."""

    DRAFT = "draft"
    ACTIVE = "active"
    DEPRECATED = "deprecated"
    SUPERSEDED = "superseded"


class Priority(str, Enum):
    """Requirement priority, P0 most urgent."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"


class Resolution(str, Enum):
    """Outcome recorded against a requirement."""

    VERIFIED = "verified"
    BLOCKED = "blocked"
    DEFERRED = "deferred"
    WONTFIX = "wontfix"

    @property
    def pending(self) -> bool:
        """Blocked and deferred requirements still need revisiting."""
        return self in (Resolution.BLOCKED, Resolution.DEFERRED)


class GapType(str, Enum):
    """Why a requirement was refined into a sub-requirement."""

    CLARIFICATION = "clarification"
    DESIGN_DECISION = "design_decision"
    MISSING_REQUIREMENT = "missing_requirement"
    CONTRADICTION = "contradiction"


class EdgeKind(str, Enum):
    """Typed relationships between nodes."""

    SUPPORTS = "supports"
    DERIVES = "derives"
    SATISFIES = "satisfies"
    DEPENDS_ON = "depends_on"
    EXTENDS = "extends"
    REVEALS_GAP_IN = "reveals_gap_in"
    CHALLENGES = "challenges"
    VALIDATES = "validates"
    CONFLICTS_WITH = "conflicts_with"
    SUPERSEDES = "supersedes"


# Bucket name in a node record -> relationship kind it holds.
EDGE_BUCKETS: dict[str, EdgeKind] = {
    "supported_by": EdgeKind.SUPPORTS,
    "derives_from": EdgeKind.DERIVES,
    "satisfies": EdgeKind.SATISFIES,
    "depends_on": EdgeKind.DEPENDS_ON,
    "extends": EdgeKind.EXTENDS,
    "reveals_gap_in": EdgeKind.REVEALS_GAP_IN,
    "challenges": EdgeKind.CHALLENGES,
    "validates": EdgeKind.VALIDATES,
    "conflicts_with": EdgeKind.CONFLICTS_WITH,
    "supersedes": EdgeKind.SUPERSEDES,
}


class EdgeDirection(str, Enum):
    """Which side of an edge a traversed node sits on."""

    OUTGOING = "outgoing"
    INCOMING = "incoming"


class TraversalDirection(str, Enum):
    """Which edges a traversal follows."""

    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"
    BOTH = "both"


class DriftSeverity(str, Enum):
    """Magnitude of the gap between a bound version and a target's current version."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[DriftSeverity, int] = {
    DriftSeverity.NONE: 0,
    DriftSeverity.PATCH: 1,
    DriftSeverity.MINOR: 2,
    DriftSeverity.MAJOR: 3,
}

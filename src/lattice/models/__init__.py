"""Data models for lattice."""
from __future__ import annotations

from lattice.models.domain import (
    DEFAULT_EDGE_VERSION,
    DriftItem,
    DriftReport,
    Edge,
    EdgeReference,
    Entity,
    GraphNode,
    IncidentEdge,
    ResolutionInfo,
    Verification,
)
from lattice.models.enums import (
    EDGE_BUCKETS,
    KIND_ORDER,
    DriftSeverity,
    EdgeDirection,
    EdgeKind,
    GapType,
    NodeKind,
    NodeStatus,
    Priority,
    Resolution,
    TraversalDirection,
)

__all__ = [
    "DEFAULT_EDGE_VERSION",
    "EDGE_BUCKETS",
    "KIND_ORDER",
    "DriftItem",
    "DriftReport",
    "DriftSeverity",
    "Edge",
    "EdgeDirection",
    "EdgeKind",
    "EdgeReference",
    "Entity",
    "GapType",
    "GraphNode",
    "IncidentEdge",
    "NodeKind",
    "NodeStatus",
    "Priority",
    "Resolution",
    "ResolutionInfo",
    "TraversalDirection",
    "Verification",
]

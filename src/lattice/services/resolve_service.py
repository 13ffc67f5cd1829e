"""Record outcomes on requirements: resolutions and implementation evidence."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from lattice.core.logging_config import get_logger
from lattice.graph.index import build_node_index
from lattice.models import (
    EdgeReference,
    Entity,
    NodeKind,
    Resolution,
    ResolutionInfo,
    Verification,
)
from lattice.storage.errors import NodeNotFoundError
from lattice.storage.protocols import NodeStore

logger = get_logger(__name__)

SATISFIES_BUCKET = "satisfies"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_kind(entity: Entity, kind: NodeKind) -> None:
    if entity.kind is not kind:
        article = "an" if kind.value[0] in "aeiou" else "a"
        raise ValueError(f"{entity.id} is a {entity.kind.value}, not {article} {kind.value}")


def resolve_node(
    store: NodeStore,
    node_id: str,
    resolution: Resolution | str,
    reason: str | None = None,
    *,
    resolved_by: str = "unknown",
) -> Entity:
    """Mark a requirement as verified, blocked, deferred or wontfix.

    Any earlier resolution is replaced. The node's version is left alone:
    a resolution describes progress, not a change to the requirement.

    Raises:
        NodeNotFoundError: If ``node_id`` is not stored.
        ValueError: If the node is not a requirement, ``resolution`` is
            unknown, or a non-verified resolution comes without a reason.
    """
    status = Resolution(resolution)
    reason = (reason or "").strip() or None
    if status is not Resolution.VERIFIED and reason is None:
        raise ValueError(f"A reason is required to mark {node_id} as {status.value}")

    entity = store.get(node_id)
    _require_kind(entity, NodeKind.REQUIREMENT)
    entity.resolution = ResolutionInfo(
        status=status,
        resolved_at=_utcnow_iso(),
        resolved_by=resolved_by,
        reason=reason,
    )
    store.save(entity)
    logger.info("Resolved %s as %s", node_id, status.value)
    return entity


@dataclass(frozen=True)
class VerifyResult:
    implementation: Entity
    edge_added: bool
    edge_rebound: bool
    requirement_resolved: bool


def verify_implementation(
    store: NodeStore,
    implementation_id: str,
    requirement_id: str,
    *,
    tests_pass: bool = False,
    coverage: float | None = None,
    files: Sequence[str] = (),
    verified_by: str = "unknown",
) -> VerifyResult:
    """Record evidence that an implementation satisfies a requirement.

    The implementation's ``satisfies`` edge to the requirement is created,
    or rebound to the requirement's current version. Evidence for the same
    requirement replaces the previous entry. Passing tests also resolve the
    requirement as verified.

    Raises:
        NodeNotFoundError: If either node is not stored.
        ValueError: If the nodes have the wrong kinds or ``coverage`` is
            outside 0.0-1.0.
    """
    if coverage is not None and not 0.0 <= coverage <= 1.0:
        raise ValueError(f"coverage must be between 0.0 and 1.0, got {coverage}")

    index = build_node_index(store)
    for node_id in (implementation_id, requirement_id):
        if node_id not in index:
            raise NodeNotFoundError(node_id)
    requirement = index[requirement_id]
    _require_kind(requirement, NodeKind.REQUIREMENT)

    implementation = store.get(implementation_id)
    _require_kind(implementation, NodeKind.IMPLEMENTATION)

    edge_added = edge_rebound = False
    refs = implementation.edges.setdefault(SATISFIES_BUCKET, [])
    existing = next((r for r in refs if r.target == requirement_id), None)
    if existing is None:
        refs.append(EdgeReference(target=requirement_id, version=requirement.version))
        edge_added = True
    elif existing.version != requirement.version:
        existing.version = requirement.version
        edge_rebound = True

    implementation.verifications = [
        v for v in implementation.verifications if v.requirement != requirement_id
    ]
    implementation.verifications.append(
        Verification(
            requirement=requirement_id,
            requirement_version=requirement.version,
            tests_pass=tests_pass,
            coverage=coverage,
            files=[f.strip() for f in files if f.strip()],
            verified_at=_utcnow_iso(),
            verified_by=verified_by,
        )
    )
    store.save(implementation)
    logger.info("Recorded verification of %s against %s", implementation_id, requirement_id)

    if tests_pass:
        resolve_node(store, requirement_id, Resolution.VERIFIED, resolved_by=verified_by)

    return VerifyResult(
        implementation=implementation,
        edge_added=edge_added,
        edge_rebound=edge_rebound,
        requirement_resolved=tests_pass,
    )

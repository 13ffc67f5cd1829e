"""Split a gap found in a requirement out into its own sub-requirement."""
from __future__ import annotations

import string
from dataclasses import dataclass
from datetime import datetime, timezone

from lattice.config.constants import DEFAULT_NODE_VERSION
from lattice.core.logging_config import get_logger
from lattice.graph.index import NodeIndex, build_node_index
from lattice.models import EdgeReference, Entity, GapType, NodeKind, NodeStatus
from lattice.storage.errors import NodeNotFoundError
from lattice.storage.protocols import NodeStore

logger = get_logger(__name__)

# Gaps that need a human decision start out as drafts.
_REVIEW_GAPS = {GapType.DESIGN_DECISION, GapType.CONTRADICTION}


@dataclass(frozen=True)
class RefineResult:
    sub_requirement: Entity
    parent_updated: bool
    implementation_updated: bool


def _parse_gap_type(value: GapType | str) -> GapType:
    try:
        return GapType(value)
    except ValueError:
        allowed = ", ".join(g.value for g in GapType)
        raise ValueError(f"Invalid gap type '{value}'; expected one of: {allowed}") from None


def next_sub_requirement_id(parent_id: str, index: NodeIndex) -> str:
    """First free ``<parent>-A`` .. ``<parent>-Z`` id."""
    for letter in string.ascii_uppercase:
        candidate = f"{parent_id}-{letter}"
        if candidate not in index:
            return candidate
    raise ValueError(f"{parent_id} already has 26 sub-requirements")


def _add_edge(entity: Entity, bucket: str, target: Entity) -> bool:
    refs = entity.edges.setdefault(bucket, [])
    if any(ref.target == target.id for ref in refs):
        return False
    refs.append(EdgeReference(target=target.id, version=target.version))
    return True


def refine_requirement(
    store: NodeStore,
    parent_id: str,
    gap_type: GapType | str,
    title: str,
    description: str,
    *,
    proposed: str | None = None,
    implementation_id: str | None = None,
    created_by: str = "unknown",
) -> RefineResult:
    """Create a sub-requirement for a gap discovered in ``parent_id``.

    The sub-requirement inherits the parent's priority, category, tags and
    ``derives_from`` edges, and ``extends`` the parent. The parent gains a
    ``depends_on`` edge to it. When ``implementation_id`` is given, that
    implementation gains a ``reveals_gap_in`` edge to the parent.

    Raises:
        NodeNotFoundError: If the parent or implementation is not stored.
        ValueError: If ``gap_type`` is unknown, a node has the wrong kind, or
            the parent has no free sub-requirement id left.
    """
    gap = _parse_gap_type(gap_type)
    index = build_node_index(store)

    if parent_id not in index:
        raise NodeNotFoundError(parent_id)
    parent = store.get(parent_id)
    if parent.kind is not NodeKind.REQUIREMENT:
        raise ValueError(f"{parent_id} is a {parent.kind.value}, not a requirement")

    implementation: Entity | None = None
    if implementation_id is not None:
        if implementation_id not in index:
            raise NodeNotFoundError(implementation_id)
        implementation = store.get(implementation_id)
        if implementation.kind is not NodeKind.IMPLEMENTATION:
            raise ValueError(
                f"{implementation_id} is a {implementation.kind.value}, not an implementation"
            )

    body = description.strip()
    if proposed:
        body += f"\n\nProposed resolution: {proposed.strip()}"

    sub = Entity(
        id=next_sub_requirement_id(parent_id, index),
        kind=NodeKind.REQUIREMENT,
        title=title,
        body=body,
        status=NodeStatus.DRAFT if gap in _REVIEW_GAPS else NodeStatus.ACTIVE,
        version=DEFAULT_NODE_VERSION,
        created_at=datetime.now(timezone.utc).isoformat(),
        created_by=created_by,
        priority=parent.priority,
        category=parent.category,
        tags=list(parent.tags),
        extra={"gap_type": gap.value},
    )
    for ref in parent.edges.get("derives_from", []):
        target = index.get(ref.target)
        sub.edges.setdefault("derives_from", []).append(
            EdgeReference(target=ref.target, version=target.version if target else ref.version)
        )
    _add_edge(sub, "extends", parent)
    store.save(sub)

    parent_updated = _add_edge(parent, "depends_on", sub)
    if parent_updated:
        store.save(parent)

    implementation_updated = False
    if implementation is not None:
        implementation_updated = _add_edge(implementation, "reveals_gap_in", parent)
        if implementation_updated:
            store.save(implementation)

    logger.info("Refined %s into %s (%s)", parent_id, sub.id, gap.value)
    return RefineResult(
        sub_requirement=sub,
        parent_updated=parent_updated,
        implementation_updated=implementation_updated,
    )

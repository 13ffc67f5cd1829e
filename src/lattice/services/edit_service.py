"""Edit nodes: content changes with version bumps, and edge reaffirmation."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from lattice.core.logging_config import get_logger
from lattice.graph.index import build_node_index
from lattice.graph.versioning import bump_version
from lattice.models import Entity, NodeStatus
from lattice.storage.errors import NodeNotFoundError
from lattice.storage.protocols import NodeStore

logger = get_logger(__name__)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Rebinding:
    """An edge moved from one bound version to its target's current one."""

    target_id: str
    old_version: str
    new_version: str


def edit_node(
    store: NodeStore,
    node_id: str,
    part: str = "patch",
    *,
    title: str | None = None,
    body: str | None = None,
    status: NodeStatus | str | None = None,
) -> Entity:
    """Apply content changes to a node and bump its version by ``part``.

    Raises:
        NodeNotFoundError: If ``node_id`` is not stored.
        ValueError: If ``part`` or ``status`` is invalid.
    """
    entity = store.get(node_id)
    new_version = bump_version(entity.version, part)
    new_status = NodeStatus(status) if status is not None else None

    if title is not None:
        entity.title = title
    if body is not None:
        entity.body = body
    if new_status is not None:
        entity.status = new_status

    logger.info("Bumped %s %s -> %s", node_id, entity.version, new_version)
    entity.version = new_version
    entity.updated_at = _utcnow_iso()
    store.save(entity)
    return entity


def reaffirm_edges(
    store: NodeStore,
    source_id: str,
    target_id: str | None = None,
) -> list[Rebinding]:
    """Rebind a node's edges to their targets' current versions.

    Only edges pointing at ``target_id`` are touched when it is given.
    Dangling edges are left as they are. The source node's own version does
    not change.

    Raises:
        NodeNotFoundError: If ``source_id`` is not stored.
    """
    index = build_node_index(store)
    if source_id not in index:
        raise NodeNotFoundError(source_id)
    source = store.get(source_id)

    rebound: list[Rebinding] = []
    for refs in source.edges.values():
        for ref in refs:
            if target_id is not None and ref.target != target_id:
                continue
            target = index.get(ref.target)
            if target is None or ref.version == target.version:
                continue
            rebound.append(Rebinding(ref.target, ref.bound_version, target.version))
            ref.version = target.version

    if rebound:
        store.save(source)
        logger.info("Reaffirmed %d edge(s) on %s", len(rebound), source_id)
    return rebound

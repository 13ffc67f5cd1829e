"""Add new nodes to a file-backed lattice."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from lattice.config.constants import DEFAULT_EDGE_VERSION, DEFAULT_NODE_VERSION
from lattice.core.logging_config import get_logger
from lattice.graph.index import build_node_index
from lattice.graph.versioning import is_valid_version
from lattice.models import EdgeReference, Entity, NodeKind, NodeStatus, Priority
from lattice.storage.errors import DuplicateNodeError
from lattice.storage.files import FileNodeStore

logger = get_logger(__name__)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def add_node(
    root: Path,
    kind: NodeKind | str,
    node_id: str,
    title: str,
    body: str = "",
    *,
    status: NodeStatus | str = NodeStatus.ACTIVE,
    created_by: str = "unknown",
    priority: Priority | str | None = None,
    category: str | None = None,
    tags: Sequence[str] = (),
    edges: Mapping[str, Sequence[str]] | None = None,
    extra: Mapping[str, Any] | None = None,
    default_edge_version: str = DEFAULT_EDGE_VERSION,
) -> Path:
    """Create a node file and return its path.

    Each edge is bound to its target's current version, or to
    ``default_edge_version`` when the target does not exist yet.

    Raises:
        DuplicateNodeError: If ``node_id`` is already used by any node.
        ValueError: If a bound version is not ``MAJOR.MINOR.PATCH``, or
            ``priority`` is not P0, P1 or P2.
    """
    store = FileNodeStore(root)
    index = build_node_index(store)
    if node_id in index:
        raise DuplicateNodeError(node_id)

    edge_refs: dict[str, list[EdgeReference]] = {}
    for bucket, targets in (edges or {}).items():
        refs: list[EdgeReference] = []
        for target in targets:
            target_node = index.get(target)
            version = target_node.version if target_node is not None else default_edge_version
            if not is_valid_version(version):
                raise ValueError(f"Cannot bind edge to {target}: invalid version '{version}'")
            refs.append(EdgeReference(target=target, version=version))
        if refs:
            edge_refs[bucket] = refs

    entity = Entity(
        id=node_id,
        kind=NodeKind(kind),
        title=title,
        body=body,
        status=NodeStatus(status),
        version=DEFAULT_NODE_VERSION,
        created_at=_utcnow_iso(),
        created_by=created_by,
        priority=Priority(priority.upper()) if priority else None,
        category=category or None,
        tags=[t.strip() for t in tags if t.strip()],
        edges=edge_refs,
        extra=dict(extra or {}),
    )
    path = store.save(entity)
    logger.info("Added %s %s at %s", entity.kind.value, node_id, path)
    return path

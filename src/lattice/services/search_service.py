"""Filtered node search over the node index."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from lattice.graph.edges import extract_edges
from lattice.graph.index import NodeIndex
from lattice.graph.traverse import traverse_graph
from lattice.models import Entity, NodeKind, Priority, Resolution, TraversalDirection
from lattice.storage.errors import NodeNotFoundError

# Extra resolution filters on top of the Resolution values.
UNRESOLVED = "unresolved"
PENDING = "pending"
_RESOLUTION_ALIASES = {"open": UNRESOLVED}


@dataclass
class SearchQuery:
    """Search filters; every filter that is set must match.

    Text, tag and category matching ignore case. ``tags`` requires all of
    the given tags. ``related_to`` keeps nodes within ``related_depth`` hops
    of that node in either direction, plus nodes sharing an edge target with
    it.
    """

    kind: NodeKind | None = None
    text: str | None = None
    priority: Priority | None = None
    resolution: str | None = None
    tags: list[str] = field(default_factory=list)
    category: str | None = None
    id_prefix: str | None = None
    related_to: str | None = None
    related_depth: int = 1

    @classmethod
    def build(
        cls,
        *,
        kind: NodeKind | str | None = None,
        text: str | None = None,
        priority: Priority | str | None = None,
        resolution: str | None = None,
        tags: Sequence[str] = (),
        category: str | None = None,
        id_prefix: str | None = None,
        related_to: str | None = None,
        related_depth: int = 1,
    ) -> "SearchQuery":
        """Validate raw filter values.

        Raises:
            ValueError: If ``kind``, ``priority`` or ``resolution`` is unknown.
        """
        return cls(
            kind=NodeKind(kind.lower()) if kind else None,
            text=text or None,
            priority=Priority(priority.upper()) if priority else None,
            resolution=_parse_resolution_filter(resolution),
            tags=[t.strip() for t in tags if t.strip()],
            category=category or None,
            id_prefix=id_prefix or None,
            related_to=related_to or None,
            related_depth=related_depth,
        )


def _parse_resolution_filter(value: str | None) -> str | None:
    if not value:
        return None
    value = value.strip().lower()
    value = _RESOLUTION_ALIASES.get(value, value)
    allowed = [r.value for r in Resolution] + [UNRESOLVED, PENDING]
    if value not in allowed:
        raise ValueError(f"Invalid resolution filter '{value}'; expected one of: {', '.join(allowed)}")
    return value


def related_node_ids(index: NodeIndex, node_id: str, depth: int = 1) -> set[str]:
    """Ids near ``node_id``: its traversal neighbourhood plus nodes sharing a target.

    Raises:
        NodeNotFoundError: If ``node_id`` is not in the index.
    """
    if node_id not in index:
        raise NodeNotFoundError(node_id)

    related = {n.entity.id for n in traverse_graph(node_id, index, TraversalDirection.BOTH, depth)}
    targets = {edge.target_id for edge in extract_edges(index[node_id])}
    for other in index.values():
        if any(edge.target_id in targets for edge in extract_edges(other)):
            related.add(other.id)
    related.discard(node_id)
    return related


def _matches_resolution(entity: Entity, wanted: str) -> bool:
    status = entity.resolution.status if entity.resolution else None
    if wanted == UNRESOLVED:
        return status is None
    if wanted == PENDING:
        return status is not None and status.pending
    return status is not None and status.value == wanted


def search_nodes(index: NodeIndex, query: SearchQuery) -> list[Entity]:
    """Entities matching ``query``, in index order."""
    related = (
        related_node_ids(index, query.related_to, query.related_depth)
        if query.related_to
        else None
    )
    text = query.text.lower() if query.text else None
    wanted_tags = {t.lower() for t in query.tags}

    results: list[Entity] = []
    for entity in index.values():
        if query.kind is not None and entity.kind is not query.kind:
            continue
        if query.id_prefix and not entity.id.upper().startswith(query.id_prefix.upper()):
            continue
        if related is not None and entity.id not in related:
            continue
        if text and text not in entity.title.lower() and text not in entity.body.lower():
            continue
        if query.priority is not None and entity.priority is not query.priority:
            continue
        if query.resolution and not _matches_resolution(entity, query.resolution):
            continue
        if wanted_tags and not wanted_tags <= {t.lower() for t in entity.tags}:
            continue
        if query.category and (entity.category or "").lower() != query.category.lower():
            continue
        results.append(entity)
    return results

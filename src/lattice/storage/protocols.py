from __future__ import annotations

from typing import Protocol, Sequence

from lattice.models import Entity, NodeKind


class NodeSource(Protocol):
    """Anything that can hand the graph engine its entities, one kind at a time.

    Implementations return an empty sequence when a kind has no data yet.
    """

    def load_entities_by_kind(self, kind: NodeKind) -> Sequence[Entity]:
        ...


class NodeStore(NodeSource, Protocol):
    """A node source that can also look up and persist single entities."""

    def get(self, node_id: str) -> Entity:
        ...

    def save(self, entity: Entity) -> None:
        ...

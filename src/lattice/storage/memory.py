"""In-process node store."""
from __future__ import annotations

from typing import Iterable

from lattice.models import Entity, NodeKind
from lattice.storage.errors import NodeNotFoundError


class InMemoryNodeStore:
    """Holds entities in a list; for embedding the engine without files."""

    def __init__(self, entities: Iterable[Entity] = ()) -> None:
        self._entities: list[Entity] = list(entities)

    def load_entities_by_kind(self, kind: NodeKind) -> list[Entity]:
        return [e for e in self._entities if e.kind == kind]

    def get(self, node_id: str) -> Entity:
        for entity in self._entities:
            if entity.id == node_id:
                return entity
        raise NodeNotFoundError(node_id)

    def save(self, entity: Entity) -> None:
        for i, existing in enumerate(self._entities):
            if existing.id == entity.id:
                self._entities[i] = entity
                return
        self._entities.append(entity)

"""Node index: every known entity keyed by id."""
from __future__ import annotations

import logging

from lattice.models import KIND_ORDER, Entity
from lattice.storage.protocols import NodeSource

_logger = logging.getLogger(__name__)

NodeIndex = dict[str, Entity]


def build_node_index(source: NodeSource) -> NodeIndex:
    """Aggregate all four kinds into one ``id -> entity`` mapping.

    Kinds load in ``KIND_ORDER``; a later entity with an id already seen
    replaces the earlier one. Duplicate detection belongs to the store and
    lint, not here. Load failures propagate.
    """
    index: NodeIndex = {}
    for kind in KIND_ORDER:
        for entity in source.load_entities_by_kind(kind):
            index[entity.id] = entity
    _logger.debug("Built node index with %d entities", len(index))
    return index

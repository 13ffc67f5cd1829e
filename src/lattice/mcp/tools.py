"""Graph queries exposed to MCP clients. Every tool returns a JSON string."""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from lattice.config import Config, PathResolver
from lattice.graph import LatticeGraph
from lattice.models import NodeKind
from lattice.storage import FileNodeStore, NodeNotFoundError


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _json_dumps(payload: object) -> str:
    return json.dumps(payload, default=_json_default, ensure_ascii=True)


def resolve_root(lattice_root: str | None) -> Path:
    """Resolve the lattice root from an explicit path, config or the working directory."""
    if lattice_root is not None and str(lattice_root).strip():
        resolved = Path(str(lattice_root)).expanduser()
        if not resolved.exists():
            raise FileNotFoundError(f"Lattice root does not exist: {resolved}")
        return resolved
    return PathResolver.get_lattice_root(Config.load())


def build_graph(lattice_root: str | None) -> LatticeGraph:
    return LatticeGraph(FileNodeStore(resolve_root(lattice_root)))


def parse_kind(kind: str | None) -> NodeKind | None:
    if kind is None or not kind.strip():
        return None
    value = kind.lower().strip()
    try:
        return NodeKind(value)
    except ValueError:
        allowed = ", ".join(k.value for k in NodeKind)
        raise ValueError(f"Invalid kind; expected one of: {allowed}") from None


def lattice_list(*, kind: str | None = None, lattice_root: str | None = None) -> str:
    kind_filter = parse_kind(kind)
    index = build_graph(lattice_root).build_index()
    nodes = [
        {
            "id": node.id,
            "type": node.kind.value,
            "title": node.title,
            "status": node.status.value,
            "version": node.version,
        }
        for node in index.values()
        if kind_filter is None or node.kind is kind_filter
    ]
    return _json_dumps({"nodes": nodes, "total": len(nodes)})


def lattice_get(*, node_id: str, lattice_root: str | None = None) -> str:
    index = build_graph(lattice_root).build_index()
    node = index.get(node_id)
    if node is None:
        raise NodeNotFoundError(node_id)
    return _json_dumps(node.to_dict())


def lattice_trace(
    *,
    node_id: str,
    direction: str = "both",
    max_depth: int = 3,
    lattice_root: str | None = None,
) -> str:
    nodes = build_graph(lattice_root).traverse(node_id, direction.lower().strip(), max_depth)
    return _json_dumps({
        "start": node_id,
        "direction": direction,
        "max_depth": max_depth,
        "nodes": [n.to_dict() for n in nodes],
    })


def lattice_drift(*, lattice_root: str | None = None) -> str:
    reports = build_graph(lattice_root).detect_drift()
    return _json_dumps({
        "reports": [r.to_dict() for r in reports],
        "total_stale_edges": sum(len(r.items) for r in reports),
    })


def lattice_search(
    *,
    kind: str | None = "requirement",
    query: str | None = None,
    priority: str | None = None,
    resolution: str | None = None,
    tags: str | None = None,
    category: str | None = None,
    id_prefix: str | None = None,
    related_to: str | None = None,
    related_depth: int = 1,
    lattice_root: str | None = None,
) -> str:
    from lattice.services import SearchQuery, search_nodes

    search = SearchQuery.build(
        kind=parse_kind(kind),
        text=query,
        priority=priority,
        resolution=resolution,
        tags=(tags or "").split(","),
        category=category,
        id_prefix=id_prefix,
        related_to=related_to,
        related_depth=related_depth,
    )
    results = search_nodes(build_graph(lattice_root).build_index(), search)
    return _json_dumps({
        "count": len(results),
        "results": [
            {
                "id": node.id,
                "type": node.kind.value,
                "title": node.title,
                "version": node.version,
                "priority": node.priority.value if node.priority else None,
                "resolution": node.resolution.status.value if node.resolution else None,
                "tags": list(node.tags),
            }
            for node in results
        ],
    })


def lattice_summary(*, lattice_root: str | None = None) -> str:
    from lattice.services import summarize_lattice

    return _json_dumps(summarize_lattice(FileNodeStore(resolve_root(lattice_root))).to_dict())


def lattice_resolve(
    *,
    node_id: str,
    status: str,
    reason: str | None = None,
    resolved_by: str = "agent",
    lattice_root: str | None = None,
) -> str:
    from lattice.services import resolve_node

    store = FileNodeStore(resolve_root(lattice_root))
    entity = resolve_node(store, node_id, status.lower().strip(), reason, resolved_by=resolved_by)
    return _json_dumps({"id": entity.id, "resolution": entity.resolution.to_dict()})


def lattice_verify(
    *,
    implementation_id: str,
    requirement_id: str,
    tests_pass: bool = False,
    coverage: float | None = None,
    files: str | None = None,
    verified_by: str = "agent",
    lattice_root: str | None = None,
) -> str:
    from lattice.services import verify_implementation

    result = verify_implementation(
        FileNodeStore(resolve_root(lattice_root)),
        implementation_id,
        requirement_id,
        tests_pass=tests_pass,
        coverage=coverage,
        files=(files or "").split(","),
        verified_by=verified_by,
    )
    return _json_dumps({
        "implementation": result.implementation.id,
        "requirement": requirement_id,
        "edge_added": result.edge_added,
        "edge_rebound": result.edge_rebound,
        "requirement_resolved": result.requirement_resolved,
    })


def lattice_refine(
    *,
    parent_id: str,
    gap_type: str,
    title: str,
    description: str,
    proposed: str | None = None,
    implementation_id: str | None = None,
    created_by: str = "agent",
    lattice_root: str | None = None,
) -> str:
    from lattice.services import refine_requirement

    result = refine_requirement(
        FileNodeStore(resolve_root(lattice_root)),
        parent_id,
        gap_type.lower().strip(),
        title,
        description,
        proposed=proposed,
        implementation_id=implementation_id,
        created_by=created_by,
    )
    return _json_dumps({
        "sub_requirement": result.sub_requirement.to_dict(),
        "parent_updated": result.parent_updated,
        "implementation_updated": result.implementation_updated,
    })

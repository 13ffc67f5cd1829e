from __future__ import annotations

import asyncio
import inspect
from typing import Any

from lattice.mcp import tools


def _require_mcp() -> Any:
    try:
        from mcp.server.fastmcp import FastMCP  # type: ignore[import-not-found]
    except ImportError as exc:
        raise RuntimeError("MCP support is not installed. Install with: pip install 'lattice-graph[mcp]'") from exc
    return FastMCP


def lattice_list(kind: str | None = None, lattice_root: str | None = None) -> str:
    """List nodes.

    Args:
        kind: Optional kind filter (source | thesis | requirement | implementation)
        lattice_root: Optional project directory holding .lattice/

    Returns:
        JSON string payload.
    """
    return tools.lattice_list(kind=kind, lattice_root=lattice_root)


def lattice_get(node_id: str, lattice_root: str | None = None) -> str:
    return tools.lattice_get(node_id=node_id, lattice_root=lattice_root)


def lattice_trace(
    node_id: str,
    direction: str = "both",
    max_depth: int = 3,
    lattice_root: str | None = None,
) -> str:
    """Traverse the graph from a node.

    Args:
        node_id: Start node id
        direction: upstream | downstream | both
        max_depth: Maximum hops from the start node (>= 0)
        lattice_root: Optional project directory holding .lattice/

    Returns:
        JSON string payload. An unknown node id gives an empty node list.
    """
    return tools.lattice_trace(
        node_id=node_id,
        direction=direction,
        max_depth=max_depth,
        lattice_root=lattice_root,
    )


def lattice_drift(lattice_root: str | None = None) -> str:
    return tools.lattice_drift(lattice_root=lattice_root)


def lattice_search(
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
    """Search nodes. Every filter given must match.

    Args:
        kind: Node kind to search; empty searches every kind
        query: Text to find in title or body (case-insensitive)
        priority: P0 | P1 | P2
        resolution: verified | blocked | deferred | wontfix | pending | unresolved
        tags: Comma-separated tags; a node must carry all of them
        category: Category name (case-insensitive)
        id_prefix: Only ids starting with this
        related_to: Only nodes near this node in the graph
        related_depth: Hops for related_to
        lattice_root: Optional project directory holding .lattice/

    Returns:
        JSON string payload with "count" and "results".
    """
    return tools.lattice_search(
        kind=kind,
        query=query,
        priority=priority,
        resolution=resolution,
        tags=tags,
        category=category,
        id_prefix=id_prefix,
        related_to=related_to,
        related_depth=related_depth,
        lattice_root=lattice_root,
    )


def lattice_summary(lattice_root: str | None = None) -> str:
    return tools.lattice_summary(lattice_root=lattice_root)


def lattice_resolve(
    node_id: str,
    status: str,
    reason: str | None = None,
    resolved_by: str = "agent",
    lattice_root: str | None = None,
) -> str:
    """Record the outcome of a requirement.

    Args:
        node_id: Requirement id
        status: verified | blocked | deferred | wontfix
        reason: Required for every status except verified
        resolved_by: Who resolved it
        lattice_root: Optional project directory holding .lattice/
    """
    return tools.lattice_resolve(
        node_id=node_id,
        status=status,
        reason=reason,
        resolved_by=resolved_by,
        lattice_root=lattice_root,
    )


def lattice_verify(
    implementation_id: str,
    requirement_id: str,
    tests_pass: bool = False,
    coverage: float | None = None,
    files: str | None = None,
    verified_by: str = "agent",
    lattice_root: str | None = None,
) -> str:
    return tools.lattice_verify(
        implementation_id=implementation_id,
        requirement_id=requirement_id,
        tests_pass=tests_pass,
        coverage=coverage,
        files=files,
        verified_by=verified_by,
        lattice_root=lattice_root,
    )


def lattice_refine(
    parent_id: str,
    gap_type: str,
    title: str,
    description: str,
    proposed: str | None = None,
    implementation_id: str | None = None,
    created_by: str = "agent",
    lattice_root: str | None = None,
) -> str:
    """Create a sub-requirement for a gap found in a requirement.

    Args:
        parent_id: Requirement with the gap
        gap_type: clarification | design_decision | missing_requirement | contradiction
        title: Sub-requirement title
        description: What is missing or unclear
        proposed: Optional proposed resolution
        implementation_id: Optional implementation that revealed the gap
        created_by: Author recorded on the new node
        lattice_root: Optional project directory holding .lattice/
    """
    return tools.lattice_refine(
        parent_id=parent_id,
        gap_type=gap_type,
        title=title,
        description=description,
        proposed=proposed,
        implementation_id=implementation_id,
        created_by=created_by,
        lattice_root=lattice_root,
    )


_TOOLS = (
    ("lattice_list", "List lattice nodes, optionally of one kind", lattice_list),
    ("lattice_get", "Fetch a lattice node by id", lattice_get),
    ("lattice_trace", "Trace the nodes connected to a node", lattice_trace),
    ("lattice_drift", "Report edges bound to outdated node versions", lattice_drift),
    ("lattice_search", "Search nodes by text, priority, resolution, tags and graph proximity", lattice_search),
    ("lattice_summary", "Summarize node counts, requirement outcomes and drift", lattice_summary),
    ("lattice_resolve", "Record a requirement as verified, blocked, deferred or wontfix", lattice_resolve),
    ("lattice_verify", "Record that an implementation satisfies a requirement", lattice_verify),
    ("lattice_refine", "Create a sub-requirement for a gap in a requirement", lattice_refine),
)


def build_server() -> Any:
    """Create a FastMCP instance with every lattice tool registered."""
    FastMCP = _require_mcp()
    mcp = FastMCP(name="Lattice")
    for name, description, fn in _TOOLS:
        mcp.tool(name=name, description=description)(fn)
    return mcp


def run() -> None:
    """Run the MCP server over stdio."""
    mcp = build_server()
    result = mcp.run()
    if inspect.isawaitable(result):
        async def _main() -> None:
            await result

        asyncio.run(_main())

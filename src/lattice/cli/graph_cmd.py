"""CLI commands that read the graph: list, get, trace, drift, search, summary."""
from __future__ import annotations

import argparse

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lattice.cli.common import print_error, print_json, resolve_project
from lattice.config import Config
from lattice.graph import LatticeGraph, extract_edges
from lattice.models import (
    DriftReport,
    DriftSeverity,
    EdgeDirection,
    Entity,
    GraphNode,
    NodeKind,
    NodeStatus,
    Priority,
)
from lattice.storage import FileNodeStore

_SEVERITY_STYLES = {
    DriftSeverity.PATCH: "yellow",
    DriftSeverity.MINOR: "dark_orange",
    DriftSeverity.MAJOR: "bold red",
}


def _preview(text: str, limit: int = 60) -> str:
    return escape((text[:limit] + "…") if len(text) > limit else text)


def _resolution_label(entity: Entity) -> str:
    return entity.resolution.status.value if entity.resolution else ""


def _list_row(entity: Entity) -> dict:
    return {
        "id": entity.id,
        "type": entity.kind.value,
        "title": entity.title,
        "status": entity.status.value,
        "version": entity.version,
        "priority": entity.priority.value if entity.priority else None,
        "category": entity.category,
        "resolution": _resolution_label(entity) or None,
        "tags": list(entity.tags),
    }


def _node_table(title: str, nodes: list[Entity]) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Type", style="cyan")
    table.add_column("Version", justify="right")
    table.add_column("Status", style="magenta")
    table.add_column("Priority", style="yellow")
    table.add_column("Title", no_wrap=False, max_width=60)
    for node in nodes:
        table.add_row(
            escape(node.id),
            node.kind.value,
            escape(node.version),
            ", ".join(filter(None, (node.status.value, _resolution_label(node)))),
            node.priority.value if node.priority else "",
            _preview(node.title),
        )
    return table


def cmd_list(args: argparse.Namespace, config: Config) -> int:
    root, _config = resolve_project(args, config)
    index = LatticeGraph(FileNodeStore(root)).build_index()

    nodes = list(index.values())
    if args.kind:
        nodes = [n for n in nodes if n.kind is NodeKind(args.kind)]
    if args.status:
        nodes = [n for n in nodes if n.status is NodeStatus(args.status)]
    if args.priority:
        nodes = [n for n in nodes if n.priority is Priority(args.priority)]
    if args.pending:
        nodes = [n for n in nodes if n.resolution is not None and n.resolution.status.pending]

    if args.format_ == "json":
        print_json([_list_row(n) for n in nodes])
        return 0

    console = Console()
    if not nodes:
        console.print("[yellow]No nodes found.[/yellow]")
        return 0
    console.print(_node_table(f"Lattice Nodes ({len(nodes)})", nodes))
    return 0


def cmd_get(args: argparse.Namespace, config: Config) -> int:
    root, _config = resolve_project(args, config)
    index = LatticeGraph(FileNodeStore(root)).build_index()

    node = index.get(args.node_id)
    if node is None:
        print_error(f"Node not found: {args.node_id}")
        return 1

    if args.format_ == "json":
        print_json(node.to_dict())
        return 0

    console = Console()
    console.print(f"[bold]{escape(node.id)}[/bold]  [cyan]{node.kind.value}[/cyan]  v{escape(node.version)}")
    console.print(f"Title:   {escape(node.title)}")
    console.print(f"Status:  {node.status.value}")
    if node.priority is not None:
        console.print(f"Priority: {node.priority.value}")
    if node.category:
        console.print(f"Category: {escape(node.category)}")
    if node.tags:
        console.print(f"Tags:    {escape(', '.join(node.tags))}")
    if node.resolution is not None:
        reason = f" ({escape(node.resolution.reason)})" if node.resolution.reason else ""
        console.print(f"Resolution: {node.resolution.status.value}{reason}")
    if node.created_at:
        console.print(f"Created: {escape(node.created_at)} by {escape(node.created_by or 'unknown')}")
    if node.updated_at:
        console.print(f"Updated: {escape(node.updated_at)}")
    if node.body:
        console.print()
        console.print(escape(node.body.rstrip()))

    edges = extract_edges(node)
    if edges:
        table = Table(title="Edges", show_lines=False)
        table.add_column("Relationship", style="cyan")
        table.add_column("Target", style="bold")
        table.add_column("Bound")
        table.add_column("Current")
        for edge in edges:
            target = index.get(edge.target_id)
            current = escape(target.version) if target is not None else "[red]missing[/red]"
            table.add_row(escape(edge.kind), escape(edge.target_id), escape(edge.bound_version), current)
        console.print()
        console.print(table)

    for verification in node.verifications:
        coverage = f", coverage {verification.coverage:.0%}" if verification.coverage is not None else ""
        tests = "tests pass" if verification.tests_pass else "tests not recorded"
        console.print(
            f"Verified against {escape(verification.requirement)}@{escape(verification.requirement_version)}: "
            f"{tests}{coverage}"
        )
    return 0


def _render_trace(console: Console, start_id: str, nodes: list[GraphNode]) -> None:
    table = Table(title=f"Trace from {escape(start_id)} ({len(nodes)} nodes)", show_lines=False)
    table.add_column("Depth", justify="right")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Type", style="cyan")
    table.add_column("Version", justify="right")
    table.add_column("Edges", no_wrap=False)
    for node in nodes:
        edges = "\n".join(
            f"{'→' if e.direction is EdgeDirection.OUTGOING else '←'} {e.kind} {e.node_id}@{e.version}"
            for e in node.edges
        )
        table.add_row(
            str(node.depth),
            escape(node.entity.id),
            node.entity.kind.value,
            escape(node.entity.version),
            escape(edges),
        )
    console.print(table)


def cmd_trace(args: argparse.Namespace, config: Config) -> int:
    root, config = resolve_project(args, config)
    direction = args.direction or config.graph.default_direction
    depth = args.depth if args.depth is not None else config.graph.default_max_depth

    nodes = LatticeGraph(FileNodeStore(root)).traverse(args.node_id, direction, depth)

    if args.format_ == "json":
        print_json([n.to_dict() for n in nodes])
        return 0

    console = Console()
    if not nodes:
        console.print(f"[yellow]No nodes reached from {escape(args.node_id)}.[/yellow]")
        return 0
    _render_trace(console, args.node_id, nodes)
    return 0


def _render_drift(console: Console, reports: list[DriftReport]) -> None:
    table = Table(title=f"Drift ({sum(len(r.items) for r in reports)} stale edges)", show_lines=False)
    table.add_column("Source", style="bold", no_wrap=True)
    table.add_column("Relationship", style="cyan")
    table.add_column("Target", no_wrap=True)
    table.add_column("Bound", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Severity")
    for report in reports:
        for item in report.items:
            style = _SEVERITY_STYLES.get(item.severity, "")
            table.add_row(
                escape(f"{report.source_id} (v{report.source_current_version})"),
                escape(item.edge_kind),
                escape(item.target_id),
                escape(item.bound_version),
                escape(item.target_current_version),
                f"[{style}]{item.severity.value}[/{style}]" if style else item.severity.value,
            )
    console.print(table)


def cmd_drift(args: argparse.Namespace, config: Config) -> int:
    root, config = resolve_project(args, config)
    reports = LatticeGraph(FileNodeStore(root)).detect_drift()

    if args.format_ == "json":
        print_json([r.to_dict() for r in reports])
    else:
        console = Console()
        if reports:
            _render_drift(console, reports)
        else:
            console.print("[green]No drift detected.[/green]")

    if not args.check:
        return 0

    threshold = config.drift.threshold
    failing = [r for r in reports if r.max_severity.rank >= threshold.rank]
    if failing:
        print_error(
            f"{len(failing)} node(s) have drift at or above '{threshold.value}'. "
            "Review the targets, then run `lattice reaffirm` or update the nodes."
        )
        return 1
    return 0


def cmd_search(args: argparse.Namespace, config: Config) -> int:
    from lattice.services import SearchQuery, search_nodes

    root, _config = resolve_project(args, config)
    query = SearchQuery.build(
        kind=args.kind,
        text=args.query,
        priority=args.priority,
        resolution=args.resolution,
        tags=[t for value in args.tag for t in value.split(",")],
        category=args.category,
        id_prefix=args.id_prefix,
        related_to=args.related_to,
        related_depth=args.related_depth,
    )
    results = search_nodes(LatticeGraph(FileNodeStore(root)).build_index(), query)

    if args.format_ == "json":
        print_json({"count": len(results), "results": [_list_row(n) for n in results]})
        return 0

    console = Console()
    if not results:
        console.print("[yellow]No matching nodes.[/yellow]")
        return 0
    console.print(_node_table(f"Search results ({len(results)})", results))
    return 0


def cmd_summary(args: argparse.Namespace, config: Config) -> int:
    from lattice.services import summarize_lattice

    root, _config = resolve_project(args, config)
    summary = summarize_lattice(FileNodeStore(root))

    if args.format_ == "json":
        print_json(summary.to_dict())
        return 0

    console = Console()
    console.print("[bold cyan]Lattice Summary[/bold cyan]")
    console.print()
    counts = summary.node_counts
    console.print("[bold]Nodes:[/bold]")
    console.print(
        f"  {counts['source']} sources, {counts['thesis']} theses, "
        f"{counts['requirement']} requirements, {counts['implementation']} implementations"
    )
    console.print("[bold]Requirements by resolution:[/bold]")
    console.print("  " + ", ".join(f"{n} {name}" for name, n in summary.by_resolution.items()))
    console.print("[bold]Requirements by priority:[/bold]")
    console.print("  " + ", ".join(f"{n} {name}" for name, n in summary.by_priority.items()))

    if summary.has_drift:
        console.print(
            f"[yellow]Drift: {summary.stale_edges} stale edge(s) on {summary.drifted_nodes} node(s)[/yellow]"
        )
    else:
        console.print("[green]Drift: none[/green]")

    for label, ids in (
        ("Pending requirements (blocked or deferred)", summary.pending),
        ("Orphaned requirements (no derives_from)", summary.orphaned_requirements),
        ("Orphaned theses (no requirements derive from them)", summary.orphaned_theses),
    ):
        if ids:
            console.print(f"[yellow]{label}: {len(ids)}[/yellow]")
            for node_id in ids:
                console.print(f"  - {escape(node_id)}")
    return 0

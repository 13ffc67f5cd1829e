"""CLI commands that change the lattice."""
from __future__ import annotations

import argparse
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from lattice.cli.common import print_error, print_json, resolve_project
from lattice.config import Config


def _parse_edge_args(values: list[str]) -> dict[str, list[str]]:
    """Turn ``BUCKET:TARGET`` strings into ``{bucket: [targets]}``, keeping order."""
    edges: dict[str, list[str]] = {}
    for value in values:
        bucket, sep, target = value.partition(":")
        bucket, target = bucket.strip(), target.strip()
        if not sep or not bucket or not target:
            raise ValueError(f"Invalid edge '{value}'; expected BUCKET:TARGET")
        edges.setdefault(bucket, []).append(target)
    return edges


def cmd_init(args: argparse.Namespace, config: Config) -> int:
    from lattice.storage import init_lattice

    root = (args.root or Path.cwd()).resolve()
    lattice_dir = init_lattice(root, force=args.force)
    console = Console()
    console.print(f"[green]Initialised lattice at {lattice_dir}[/green]")
    if args.user:
        from lattice.config.user_config_writer import ensure_user_settings_exists

        console.print(f"User settings at {ensure_user_settings_exists()}")
    return 0


def cmd_add(args: argparse.Namespace, config: Config) -> int:
    from lattice.models import EDGE_BUCKETS
    from lattice.storage.add import add_node

    root, config = resolve_project(args, config)
    edges = _parse_edge_args(args.edge)
    unknown = [b for b in edges if b not in EDGE_BUCKETS]

    path = add_node(
        root,
        args.kind,
        args.node_id,
        args.title,
        args.body,
        status=args.status,
        created_by=args.created_by,
        edges=edges,
        priority=args.priority,
        category=args.category,
        tags=_split_csv(args.tags),
        default_edge_version=config.graph.default_edge_version,
    )

    console = Console()
    for bucket in unknown:
        console.print(f"[yellow]Warning: unknown edge type '{bucket}'[/yellow]")
    console.print(f"[green]Created {escape(args.node_id)}[/green] at {escape(str(path))}")
    return 0


def cmd_bump(args: argparse.Namespace, config: Config) -> int:
    from lattice.services import edit_node
    from lattice.storage import FileNodeStore

    root, _config = resolve_project(args, config)
    entity = edit_node(
        FileNodeStore(root),
        args.node_id,
        args.part,
        title=args.title,
        body=args.body,
        status=args.status,
    )
    Console().print(f"[green]{escape(entity.id)}[/green] is now v{escape(entity.version)}")
    return 0


def cmd_reaffirm(args: argparse.Namespace, config: Config) -> int:
    from lattice.services import reaffirm_edges
    from lattice.storage import FileNodeStore

    root, _config = resolve_project(args, config)
    rebound = reaffirm_edges(FileNodeStore(root), args.source_id, args.target)

    console = Console()
    if not rebound:
        console.print(f"Nothing to reaffirm on {escape(args.source_id)}.")
        return 0
    for item in rebound:
        console.print(escape(f"  {args.source_id} -> {item.target_id}: {item.old_version} → {item.new_version}"))
    console.print(f"[green]Reaffirmed {len(rebound)} edge(s).[/green]")
    return 0


def cmd_lint(args: argparse.Namespace, config: Config) -> int:
    from lattice.services import LintSeverity, fix_issues, lint_lattice

    root, _config = resolve_project(args, config)
    report = lint_lattice(root)

    fixed: list[str] = []
    if args.fix and report.fixable():
        fixed = fix_issues(root, report)
        report = lint_lattice(root)

    failed = report.has_errors() or (args.strict and bool(report.issues))

    if args.format_ == "json":
        print_json({
            "issues": [i.to_dict() for i in report.issues],
            "errors": len(report.errors()),
            "warnings": len(report.warnings()),
            "fixed": fixed,
        })
        return 1 if failed else 0

    console = Console()
    for line in fixed:
        console.print(f"[green]Fixed:[/green] {line}")
    if not report.issues:
        console.print("[green]No issues found.[/green]")
        return 0

    for issue in report.issues:
        style = "red" if issue.severity is LintSeverity.ERROR else "yellow"
        suffix = " [dim](fixable)[/dim]" if issue.fixable else ""
        console.print(f"[{style}]{escape(str(issue))}[/{style}]{suffix}", highlight=False)
    console.print()
    console.print(f"{len(report.errors())} error(s), {len(report.warnings())} warning(s)")
    if report.fixable() and not args.fix:
        console.print("Run `lattice lint --fix` to repair fixable issues.")
    if failed:
        print_error("Lint failed.")
    return 1 if failed else 0


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def cmd_resolve(args: argparse.Namespace, config: Config) -> int:
    from lattice.models import Resolution
    from lattice.services import resolve_node
    from lattice.storage import FileNodeStore

    root, _config = resolve_project(args, config)
    if args.verified:
        status, reason = Resolution.VERIFIED, None
    elif args.blocked is not None:
        status, reason = Resolution.BLOCKED, args.blocked
    elif args.deferred is not None:
        status, reason = Resolution.DEFERRED, args.deferred
    else:
        status, reason = Resolution.WONTFIX, args.wontfix

    entity = resolve_node(FileNodeStore(root), args.node_id, status, reason, resolved_by=args.by)

    if args.format_ == "json":
        print_json(entity.to_dict())
        return 0
    suffix = f" ({escape(reason)})" if reason else ""
    Console().print(f"[green]{escape(entity.id)}[/green] resolved as {status.value}{suffix}")
    return 0


def cmd_verify(args: argparse.Namespace, config: Config) -> int:
    from lattice.services import verify_implementation
    from lattice.storage import FileNodeStore

    root, _config = resolve_project(args, config)
    result = verify_implementation(
        FileNodeStore(root),
        args.implementation_id,
        args.requirement_id,
        tests_pass=args.tests_pass,
        coverage=args.coverage,
        files=_split_csv(args.files),
        verified_by=args.by,
    )

    if args.format_ == "json":
        print_json({
            "implementation": result.implementation.to_dict(),
            "edge_added": result.edge_added,
            "edge_rebound": result.edge_rebound,
            "requirement_resolved": result.requirement_resolved,
        })
        return 0

    console = Console()
    imp_id, req_id = escape(args.implementation_id), escape(args.requirement_id)
    if result.edge_added:
        console.print(f"Added edge {imp_id} satisfies {req_id}")
    elif result.edge_rebound:
        console.print(f"Rebound edge {imp_id} satisfies {req_id} to the current version")
    console.print(f"[green]Recorded verification of {imp_id} against {req_id}[/green]")
    if result.requirement_resolved:
        console.print(f"{req_id} resolved as verified")
    return 0


def cmd_refine(args: argparse.Namespace, config: Config) -> int:
    from lattice.services import refine_requirement
    from lattice.storage import FileNodeStore

    root, _config = resolve_project(args, config)
    result = refine_requirement(
        FileNodeStore(root),
        args.parent_id,
        args.gap_type,
        args.title,
        args.description,
        proposed=args.proposed,
        implementation_id=args.implementation,
        created_by=args.created_by,
    )
    sub = result.sub_requirement

    if args.format_ == "json":
        print_json({
            "sub_requirement": sub.to_dict(),
            "parent_updated": result.parent_updated,
            "implementation_updated": result.implementation_updated,
        })
        return 0

    console = Console()
    console.print(f"[green]Created {escape(sub.id)}[/green] ({sub.status.value}): {escape(sub.title)}")
    if result.parent_updated:
        console.print(f"{escape(args.parent_id)} now depends on {escape(sub.id)}")
    if result.implementation_updated:
        console.print(f"{escape(args.implementation)} reveals a gap in {escape(args.parent_id)}")
    return 0

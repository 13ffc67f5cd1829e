"""Entry point for the `lattice` command."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable

from lattice.cli.common import print_error
from lattice.models import GapType, NodeKind, NodeStatus, Priority, TraversalDirection

_logger = logging.getLogger(__name__)

_FORMATS = ["text", "json"]
_PRIORITIES = [p.value for p in Priority]


def _add_format(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        dest="format_",
        choices=_FORMATS,
        default="text",
        help="Output format (default: text).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lattice",
        description="Versioned knowledge graph of sources, theses, requirements and implementations.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        metavar="DIR",
        help="Project directory holding .lattice/ (default: search upward from cwd).",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit.")
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init
    init_p = sub.add_parser("init", help="Create a .lattice directory.")
    init_p.add_argument("--force", action="store_true", help="Reinitialise an existing lattice.")
    init_p.add_argument(
        "--user",
        action="store_true",
        help="Also create the user settings file (~/.lattice/config/settings.toml) if missing.",
    )

    # add
    add_p = sub.add_parser("add", help="Add a node.")
    add_p.add_argument("kind", choices=[k.value for k in NodeKind], help="Node kind.")
    add_p.add_argument("node_id", metavar="ID", help="Node id, e.g. REQ-CORE-001.")
    add_p.add_argument("--title", required=True, help="Node title.")
    add_p.add_argument("--body", default="", help="Node body text.")
    add_p.add_argument(
        "--status",
        choices=[s.value for s in NodeStatus],
        default=NodeStatus.ACTIVE.value,
        help="Node status (default: active).",
    )
    add_p.add_argument(
        "--edge",
        action="append",
        default=[],
        metavar="BUCKET:TARGET",
        help="Edge to another node, e.g. satisfies:REQ-A. Repeatable.",
    )
    add_p.add_argument("--created-by", default="unknown", help="Author recorded on the node.")
    add_p.add_argument("--priority", choices=_PRIORITIES, default=None, help="Requirement priority.")
    add_p.add_argument("--category", default=None, help="Requirement category, e.g. API.")
    add_p.add_argument("--tags", default="", help="Comma-separated tags.")

    # list
    list_p = sub.add_parser("list", help="List nodes.")
    list_p.add_argument("kind", nargs="?", choices=[k.value for k in NodeKind], help="Only this kind.")
    list_p.add_argument("--status", choices=[s.value for s in NodeStatus], default=None)
    list_p.add_argument("--priority", choices=_PRIORITIES, default=None)
    list_p.add_argument("--pending", action="store_true", help="Only blocked or deferred nodes.")
    _add_format(list_p)

    # get
    get_p = sub.add_parser("get", help="Show one node.")
    get_p.add_argument("node_id", metavar="ID")
    _add_format(get_p)

    # trace
    trace_p = sub.add_parser("trace", help="Show the nodes connected to a node.")
    trace_p.add_argument("node_id", metavar="ID")
    trace_p.add_argument(
        "--direction",
        choices=[d.value for d in TraversalDirection],
        default=None,
        help="Edges to follow (default from config: both).",
    )
    trace_p.add_argument("--depth", type=int, default=None, help="Maximum hops (default from config: 3).")
    _add_format(trace_p)

    # drift
    drift_p = sub.add_parser("drift", help="Report edges bound to outdated versions.")
    drift_p.add_argument(
        "--check",
        action="store_true",
        help="Exit 1 when drift reaches drift.fail_severity. For CI pipelines.",
    )
    _add_format(drift_p)

    # lint
    lint_p = sub.add_parser("lint", help="Check node files for structural problems.")
    lint_p.add_argument("--fix", action="store_true", help="Repair fixable issues.")
    lint_p.add_argument("--strict", action="store_true", help="Exit 1 on warnings as well.")
    _add_format(lint_p)

    # bump
    bump_p = sub.add_parser("bump", help="Edit a node and bump its version.")
    bump_p.add_argument("node_id", metavar="ID")
    bump_p.add_argument("--part", choices=["major", "minor", "patch"], default="patch")
    bump_p.add_argument("--title", default=None)
    bump_p.add_argument("--body", default=None)
    bump_p.add_argument("--status", choices=[s.value for s in NodeStatus], default=None)

    # reaffirm
    reaffirm_p = sub.add_parser("reaffirm", help="Rebind a node's edges to current target versions.")
    reaffirm_p.add_argument("source_id", metavar="SOURCE_ID")
    reaffirm_p.add_argument("--target", default=None, metavar="TARGET_ID", help="Only edges to this node.")

    # resolve
    resolve_p = sub.add_parser("resolve", help="Record the outcome of a requirement.")
    resolve_p.add_argument("node_id", metavar="ID")
    outcome = resolve_p.add_mutually_exclusive_group(required=True)
    outcome.add_argument("--verified", action="store_true", help="Requirement is implemented and verified.")
    outcome.add_argument("--blocked", metavar="REASON", default=None, help="Blocked on something external.")
    outcome.add_argument("--deferred", metavar="REASON", default=None, help="Postponed to later work.")
    outcome.add_argument("--wontfix", metavar="REASON", default=None, help="Decided not to implement.")
    resolve_p.add_argument("--by", default="unknown", help="Who resolved it.")
    _add_format(resolve_p)

    # verify
    verify_p = sub.add_parser("verify", help="Record that an implementation satisfies a requirement.")
    verify_p.add_argument("implementation_id", metavar="IMPLEMENTATION_ID")
    verify_p.add_argument("relation", choices=["satisfies"], help="Always 'satisfies'.")
    verify_p.add_argument("requirement_id", metavar="REQUIREMENT_ID")
    verify_p.add_argument(
        "--tests-pass",
        action="store_true",
        help="Tests pass; also resolves the requirement as verified.",
    )
    verify_p.add_argument("--coverage", type=float, default=None, help="Test coverage between 0.0 and 1.0.")
    verify_p.add_argument("--files", default="", help="Comma-separated files that implement it.")
    verify_p.add_argument("--by", default="unknown", help="Who verified it.")
    _add_format(verify_p)

    # refine
    refine_p = sub.add_parser("refine", help="Create a sub-requirement for a gap in a requirement.")
    refine_p.add_argument("parent_id", metavar="PARENT_ID")
    refine_p.add_argument("--gap-type", required=True, choices=[g.value for g in GapType])
    refine_p.add_argument("--title", required=True, help="Sub-requirement title.")
    refine_p.add_argument("--description", required=True, help="What is missing or unclear.")
    refine_p.add_argument("--proposed", default=None, help="Proposed resolution.")
    refine_p.add_argument(
        "--implementation",
        default=None,
        metavar="IMPLEMENTATION_ID",
        help="Implementation that revealed the gap.",
    )
    refine_p.add_argument("--created-by", default="unknown", help="Author recorded on the node.")
    _add_format(refine_p)

    # search
    search_p = sub.add_parser("search", help="Find nodes by text, priority, tags and graph proximity.")
    search_p.add_argument(
        "--kind",
        choices=[k.value for k in NodeKind],
        default=NodeKind.REQUIREMENT.value,
        help="Node kind to search (default: requirement).",
    )
    search_p.add_argument("-q", "--query", default=None, help="Text to find in title or body.")
    search_p.add_argument("--priority", choices=_PRIORITIES, default=None)
    search_p.add_argument(
        "--resolution",
        default=None,
        help="verified, blocked, deferred, wontfix, pending or unresolved.",
    )
    search_p.add_argument("--tag", action="append", default=[], help="Required tag. Repeatable.")
    search_p.add_argument("--category", default=None)
    search_p.add_argument("--id-prefix", default=None, help="Only ids starting with this.")
    search_p.add_argument("--related-to", default=None, metavar="ID", help="Only nodes near this node.")
    search_p.add_argument("--related-depth", type=int, default=1, help="Hops for --related-to (default: 1).")
    _add_format(search_p)

    # summary
    summary_p = sub.add_parser("summary", help="Show node counts, requirement outcomes and drift.")
    _add_format(summary_p)

    return parser


def _commands() -> dict[str, Callable[..., int]]:
    from lattice.cli import graph_cmd, node_cmd

    return {
        "init": node_cmd.cmd_init,
        "add": node_cmd.cmd_add,
        "bump": node_cmd.cmd_bump,
        "reaffirm": node_cmd.cmd_reaffirm,
        "lint": node_cmd.cmd_lint,
        "resolve": node_cmd.cmd_resolve,
        "verify": node_cmd.cmd_verify,
        "refine": node_cmd.cmd_refine,
        "list": graph_cmd.cmd_list,
        "get": graph_cmd.cmd_get,
        "trace": graph_cmd.cmd_trace,
        "drift": graph_cmd.cmd_drift,
        "search": graph_cmd.cmd_search,
        "summary": graph_cmd.cmd_summary,
    }


def main(argv: list[str] | None = None) -> int:
    """Entry point for `lattice`."""
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    if args.version:
        from lattice import __version__

        print(__version__)
        return 0
    if not args.command:
        parser.print_help()
        return 0

    from lattice.config import Config
    from lattice.core.logging_config import setup_logging
    from lattice.storage.errors import StorageError

    try:
        config = Config.load()
    except (OSError, ValueError) as exc:
        print_error(f"Cannot load config: {exc}")
        return 1

    if args.verbose:
        config.logging.level = "DEBUG"
    setup_logging(config.logging)
    _logger.debug("Running %s", args.command)

    handler = _commands()[args.command]
    try:
        return handler(args, config)
    except (StorageError, ValueError) as exc:
        print_error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())

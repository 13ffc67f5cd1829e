"""Helpers shared by the CLI command modules."""
from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from lattice.config import Config, PathResolver


def print_error(msg: str) -> None:
    print(f"Error: {msg}", file=sys.stderr)


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def print_json(payload: object) -> None:
    print(json.dumps(payload, default=_json_default, indent=2, ensure_ascii=False))


def resolve_project(args: argparse.Namespace, config: Config) -> tuple[Path, Config]:
    """Find the lattice root and reload config with its project-level settings.

    Raises:
        NotInLatticeError: If no root can be resolved.
    """
    root = PathResolver.get_lattice_root(config, explicit=args.root)
    return root, Config.load(lattice_root=root)

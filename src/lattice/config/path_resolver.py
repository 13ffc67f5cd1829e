"""
Path resolution for lattice projects.

The lattice root is the directory holding ``.lattice/``. It is resolved from,
in order: an explicit path (``--root``), ``LATTICE_ROOT`` / ``[paths]
lattice_root``, then an upward search from the working directory.
"""

from __future__ import annotations

import os
from pathlib import Path

from .constants import ENV_LATTICE_ROOT, LATTICE_DIR, ERROR_NOT_IN_LATTICE


class PathResolver:
    """Resolves lattice project paths."""

    @staticmethod
    def expand_path_template(path: str) -> str:
        """
        Expand path templates with environment variables.

        Supports:
        - {username} -> current username
        - {home} -> user home directory
        - Environment variables: $VAR or ${VAR}
        """
        path = path.replace("{username}", os.getenv("USERNAME") or os.getenv("USER") or "unknown")
        path = path.replace("{home}", str(Path.home()))
        path = os.path.expanduser(path)
        return os.path.expandvars(path)

    @staticmethod
    def get_lattice_root(config=None, start: Path | None = None, explicit: Path | None = None) -> Path:
        """
        Get the lattice project root.

        Args:
            config: Optional Config object
            start: Directory to search upward from (default: cwd)
            explicit: Root given on the command line; wins over everything else

        Returns:
            Path to the project root (the parent of ``.lattice``)

        Raises:
            NotInLatticeError: If no root could be resolved
        """
        from lattice.storage.errors import NotInLatticeError
        from lattice.storage.files import find_lattice_root

        if explicit is not None:
            return Path(PathResolver.expand_path_template(str(explicit))).resolve()

        configured = config.paths.lattice_root if config is not None else os.getenv(ENV_LATTICE_ROOT)
        if configured:
            return Path(PathResolver.expand_path_template(configured)).resolve()

        search_from = start or Path.cwd()
        found = find_lattice_root(search_from)
        if found is None:
            raise NotInLatticeError(
                ERROR_NOT_IN_LATTICE.format(
                    lattice_dir=LATTICE_DIR,
                    start=search_from,
                    env_root=ENV_LATTICE_ROOT,
                ).strip()
            )
        return found

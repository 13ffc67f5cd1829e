"""YAML file-backed node store.

Layout::

    <root>/.lattice/
        config.toml
        sources/*.yaml
        theses/*.yaml
        requirements/**/*.yaml
        implementations/*.yaml
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from lattice.config.constants import LATTICE_DIR, NODE_FILE_SUFFIXES
from lattice.core.logging_config import get_logger
from lattice.models import KIND_ORDER, Entity, NodeKind
from lattice.storage.errors import (
    InvalidNodeError,
    LatticeExistsError,
    NodeNotFoundError,
)

logger = get_logger(__name__)


def find_lattice_root(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` (default: cwd) to the first directory holding ``.lattice/``."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / LATTICE_DIR).is_dir():
            return candidate
    return None


def init_lattice(root: Path, force: bool = False) -> Path:
    """Create the ``.lattice`` skeleton under ``root`` and return its path.

    Raises:
        LatticeExistsError: If ``.lattice`` already exists and ``force`` is False.
    """
    from lattice.config.user_config_writer import ensure_lattice_config_exists

    lattice_dir = root / LATTICE_DIR
    if lattice_dir.exists() and not force:
        raise LatticeExistsError(f"Lattice already initialised at {lattice_dir}")

    for kind in KIND_ORDER:
        (lattice_dir / kind.directory).mkdir(parents=True, exist_ok=True)
    ensure_lattice_config_exists(root)
    logger.info("Initialised lattice at %s", lattice_dir)
    return lattice_dir


def read_node_record(path: Path) -> dict[str, Any]:
    """Parse a node file into its raw mapping.

    Raises:
        InvalidNodeError: If the file is not UTF-8, not valid YAML or not a mapping.
        OSError: If the file cannot be read.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidNodeError(f"Cannot decode {path} as UTF-8: {exc}") from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise InvalidNodeError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidNodeError(f"Expected a mapping in {path}, got {type(data).__name__}")
    return data


def load_node(path: Path) -> Entity:
    """Load a single node file.

    Raises:
        InvalidNodeError: If the file does not describe a valid node.
    """
    data = read_node_record(path)
    try:
        return Entity.from_dict(data)
    except ValueError as exc:
        raise InvalidNodeError(f"Invalid node in {path}: {exc}") from exc


def write_node_record(path: Path, data: dict[str, Any]) -> None:
    """Write a raw node mapping to ``path`` as YAML, replacing the file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10_000,
    )
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_text(content, encoding="utf-8")
        tmp_path.replace(path)
    finally:
        tmp_path.unlink(missing_ok=True)


def save_node(path: Path, entity: Entity) -> None:
    write_node_record(path, entity.to_dict())


def iter_node_files(directory: Path) -> list[Path]:
    """All node files below ``directory``, sorted for a stable load order."""
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.rglob("*")
        if p.suffix in NODE_FILE_SUFFIXES and p.is_file()
    )


class FileNodeStore:
    """Node store reading one YAML file per node under ``<root>/.lattice``."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._lattice_dir = self._root / LATTICE_DIR

    @property
    def root(self) -> Path:
        return self._root

    @property
    def lattice_dir(self) -> Path:
        return self._lattice_dir

    def kind_dir(self, kind: NodeKind) -> Path:
        return self._lattice_dir / kind.directory

    def load_entities_by_kind(self, kind: NodeKind) -> list[Entity]:
        """Load every node stored under ``kind``'s directory.

        A missing directory yields ``[]``. Files that cannot be read or parsed
        are skipped with a warning.
        """
        entities: list[Entity] = []
        for path in iter_node_files(self.kind_dir(kind)):
            try:
                entities.append(load_node(path))
            except (InvalidNodeError, OSError) as exc:
                logger.warning("Skipping %s: %s", path, exc)
        return entities

    def find_node_path(self, node_id: str) -> Path:
        """Locate the file holding ``node_id``.

        Raises:
            NodeNotFoundError: If no readable file carries that id.
        """
        for kind in KIND_ORDER:
            for path in iter_node_files(self.kind_dir(kind)):
                try:
                    data = read_node_record(path)
                except (InvalidNodeError, OSError):
                    continue
                if str(data.get("id", "")).strip() == node_id:
                    return path
        raise NodeNotFoundError(node_id)

    def get(self, node_id: str) -> Entity:
        return load_node(self.find_node_path(node_id))

    def path_for(self, entity: Entity) -> Path:
        """Default location for a node that has no file yet."""
        return self.kind_dir(entity.kind) / f"{entity.id.lower()}.yaml"

    def save(self, entity: Entity) -> Path:
        """Persist ``entity`` to its existing file, or a new one if it has none."""
        try:
            path = self.find_node_path(entity.id)
        except NodeNotFoundError:
            path = self.path_for(entity)
        save_node(path, entity)
        logger.debug("Saved %s to %s", entity.id, path)
        return path

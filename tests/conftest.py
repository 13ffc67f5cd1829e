"""Pytest configuration and fixtures for lattice tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from lattice.models import EdgeReference, Entity, NodeKind


_LATTICE_ENV_VARS = (
    "LATTICE_ROOT",
    "LATTICE_DEFAULT_DIRECTION",
    "LATTICE_DEFAULT_MAX_DEPTH",
    "LATTICE_DEFAULT_EDGE_VERSION",
    "LATTICE_DRIFT_FAIL_SEVERITY",
    "LATTICE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch):
    """Keep the user's real ~/.lattice config and LATTICE_* variables out of tests."""
    for name in _LATTICE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LATTICE_DATA_DIR", str(tmp_path_factory.mktemp("lattice-home")))


@pytest.fixture
def make_entity() -> Callable[..., Entity]:
    """Factory for entities.

    ``edges`` maps a bucket to ``(target, version)`` pairs; a ``None``
    version leaves the binding unset.
    """

    def _make(
        node_id: str,
        kind: NodeKind = NodeKind.REQUIREMENT,
        version: str = "1.0.0",
        edges: dict[str, list[tuple[str, str | None]]] | None = None,
        **kwargs: Any,
    ) -> Entity:
        refs = {
            bucket: [EdgeReference(target=target, version=bound) for target, bound in targets]
            for bucket, targets in (edges or {}).items()
        }
        kwargs.setdefault("title", f"Title of {node_id}")
        return Entity(id=node_id, kind=kind, version=version, edges=refs, **kwargs)

    return _make


@pytest.fixture
def lattice_root(tmp_path) -> Path:
    """An initialised, empty lattice project."""
    from lattice.storage import init_lattice

    root = tmp_path / "project"
    root.mkdir()
    init_lattice(root)
    return root


@pytest.fixture
def write_node() -> Callable[..., Path]:
    """Write a raw node record as YAML under ``<root>/.lattice/<directory>/``."""

    def _write(root: Path, directory: str, data: dict[str, Any], filename: str | None = None) -> Path:
        target_dir = root / ".lattice" / directory
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / (filename or f"{str(data.get('id', 'node')).lower()}.yaml")
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_lattice(lattice_root, write_node) -> Path:
    """A small lattice: source -> thesis -> requirement <- implementation.

    ``IMP-X`` is bound to ``REQ-A@1.0.0`` while ``REQ-A`` is at ``2.0.0``.
    """
    write_node(lattice_root, "sources", {
        "id": "SRC-1",
        "type": "source",
        "title": "Benchmark paper",
        "version": "1.0.0",
    })
    write_node(lattice_root, "theses", {
        "id": "THX-1",
        "type": "thesis",
        "title": "Caching wins",
        "version": "1.1.0",
        "edges": {"supported_by": [{"target": "SRC-1", "version": "1.0.0"}]},
    })
    write_node(lattice_root, "requirements", {
        "id": "REQ-A",
        "type": "requirement",
        "title": "Cache responses",
        "version": "2.0.0",
        "priority": "P0",
        "edges": {"derives_from": [{"target": "THX-1", "version": "1.1.0"}]},
    })
    write_node(lattice_root, "implementations", {
        "id": "IMP-X",
        "type": "implementation",
        "title": "LRU cache",
        "version": "1.0.0",
        "edges": {"satisfies": [{"target": "REQ-A", "version": "1.0.0"}]},
    })
    return lattice_root

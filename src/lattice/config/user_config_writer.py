from __future__ import annotations

import os
import shutil
from pathlib import Path

from lattice.config.constants import (
    DEFAULT_CONFIG_SUBDIR,
    DEFAULT_DATA_DIR,
    DEFAULT_SETTINGS_FILE,
    ENV_DATA_DIR,
    LATTICE_CONFIG_FILE,
    LATTICE_DIR,
    SETTINGS_FILE,
)


class ConfigUpdateError(RuntimeError):
    """Raised when a config file cannot be created safely."""


def _default_config() -> Path:
    default_config = Path(__file__).parent / DEFAULT_SETTINGS_FILE
    if not default_config.exists():
        raise ConfigUpdateError(f"Default config not found: {default_config}")
    return default_config


def user_config_path(*, data_dir: Path | None = None) -> Path:
    """User settings path; ``LATTICE_DATA_DIR`` overrides the default data directory."""
    base = data_dir or Path(os.getenv(ENV_DATA_DIR, str(DEFAULT_DATA_DIR))).expanduser()
    return base / DEFAULT_CONFIG_SUBDIR / SETTINGS_FILE


def ensure_user_settings_exists(*, data_dir: Path | None = None) -> Path:
    """Ensure the user settings.toml exists; create by copying defaults if missing."""
    cfg_path = user_config_path(data_dir=data_dir)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists():
        shutil.copy(_default_config(), cfg_path)
    return cfg_path


def ensure_lattice_config_exists(root: Path) -> Path:
    """Ensure ``<root>/.lattice/config.toml`` exists; copy defaults if missing."""
    cfg_path = Path(root) / LATTICE_DIR / LATTICE_CONFIG_FILE
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists():
        shutil.copy(_default_config(), cfg_path)
    return cfg_path

"""
Configuration management with environment variable and .env support.

Configuration precedence (highest to lowest):
1. Environment variables (LATTICE_*)
2. Explicit config file passed to Config.load, else the project config file (<root>/.lattice/config.toml)
3. User config file (~/.lattice/config/settings.toml)
4. Hardcoded constants (constants.py)
"""

from __future__ import annotations

import os
from typing import overload
from dataclasses import dataclass
from pathlib import Path
import tomli
from dotenv import load_dotenv

from ..core.logging_config import LogConfig
from ..models.enums import DriftSeverity, TraversalDirection
from .constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_CONFIG_SUBDIR,
    LATTICE_DIR,
    LATTICE_CONFIG_FILE,
    SETTINGS_FILE,
    DEFAULT_SETTINGS_FILE,
    ENV_FILE,
    # Defaults
    DEFAULT_TRAVERSAL_DIRECTION,
    DEFAULT_MAX_DEPTH,
    DEFAULT_EDGE_VERSION,
    DEFAULT_DRIFT_FAIL_SEVERITY,
    # Environment variable names
    ENV_DATA_DIR,
    ENV_LATTICE_ROOT,
    ENV_DEFAULT_DIRECTION,
    ENV_DEFAULT_MAX_DEPTH,
    ENV_DEFAULT_EDGE_VERSION,
    ENV_DRIFT_FAIL_SEVERITY,
    ENV_LOG_LEVEL,
    ERROR_NO_CONFIG,
)


# Load .env file at module import time
# Search order: ./.env, ~/.lattice/.env, ~/.lattice/config/.env
def _load_env_files():
    """Load .env files from standard locations."""
    env_locations = [
        Path.cwd() / ENV_FILE,  # Project root
        DEFAULT_DATA_DIR / ENV_FILE,  # Data directory
        DEFAULT_DATA_DIR / DEFAULT_CONFIG_SUBDIR / ENV_FILE,  # Config directory
    ]

    for env_path in env_locations:
        if env_path.exists():
            load_dotenv(env_path, override=False)  # Don't override already-set vars


_load_env_files()


@overload
def _get_env_str(key: str, default: str) -> str: ...


@overload
def _get_env_str(key: str, default: None = None) -> str | None: ...


def _get_env_str(key: str, default: str | None = None) -> str | None:
    """Get string value from environment variable. Empty strings are treated as missing."""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value


def _get_env_int(key: str, default: int) -> int:
    """Get integer value from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_env_choice(key: str, default: str, choices: tuple[str, ...]) -> str:
    """Get a value restricted to ``choices``; anything else falls back to ``default``."""
    value = _get_env_str(key, default).lower()
    return value if value in choices else default


@dataclass
class PathsConfig:
    lattice_root: str | None

    @classmethod
    def from_dict(cls, data: dict) -> "PathsConfig":
        """Create PathsConfig from dict with environment variable overrides."""
        return cls(
            lattice_root=_get_env_str(ENV_LATTICE_ROOT, data.get("lattice_root") or None),
        )


_DIRECTIONS = tuple(d.value for d in TraversalDirection)
_SEVERITIES = tuple(s.value for s in DriftSeverity if s is not DriftSeverity.NONE)


@dataclass
class GraphConfig:
    default_direction: str
    default_max_depth: int
    default_edge_version: str

    @classmethod
    def from_dict(cls, data: dict) -> "GraphConfig":
        """Create GraphConfig from dict with environment variable overrides."""
        direction = str(data.get("default_direction", DEFAULT_TRAVERSAL_DIRECTION)).lower()
        if direction not in _DIRECTIONS:
            direction = DEFAULT_TRAVERSAL_DIRECTION
        max_depth = _get_env_int(
            ENV_DEFAULT_MAX_DEPTH,
            int(data.get("default_max_depth", DEFAULT_MAX_DEPTH)),
        )
        return cls(
            default_direction=_get_env_choice(ENV_DEFAULT_DIRECTION, direction, _DIRECTIONS),
            default_max_depth=max_depth if max_depth >= 0 else DEFAULT_MAX_DEPTH,
            default_edge_version=_get_env_str(
                ENV_DEFAULT_EDGE_VERSION,
                str(data.get("default_edge_version", DEFAULT_EDGE_VERSION)),
            ),
        )


@dataclass
class DriftConfig:
    fail_severity: str

    @classmethod
    def from_dict(cls, data: dict) -> "DriftConfig":
        """Create DriftConfig from dict with environment variable overrides."""
        severity = str(data.get("fail_severity", DEFAULT_DRIFT_FAIL_SEVERITY)).lower()
        if severity not in _SEVERITIES:
            severity = DEFAULT_DRIFT_FAIL_SEVERITY
        return cls(
            fail_severity=_get_env_choice(ENV_DRIFT_FAIL_SEVERITY, severity, _SEVERITIES),
        )

    @property
    def threshold(self) -> DriftSeverity:
        return DriftSeverity(self.fail_severity)


def _log_config_from_dict(data: dict) -> LogConfig:
    known = set(LogConfig.__dataclass_fields__)
    config = LogConfig(**{k: v for k, v in data.items() if k in known})
    config.level = _get_env_str(ENV_LOG_LEVEL, config.level)
    return config


@dataclass
class Config:
    paths: PathsConfig
    graph: GraphConfig
    drift: DriftConfig
    logging: LogConfig

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        lattice_root: Path | None = None,
    ) -> "Config":
        """
        Load configuration with proper precedence.

        Precedence (highest to lowest):
        1. Environment variables (LATTICE_*)
        2. config_path when given, else project config (<lattice_root>/.lattice/config.toml)
        3. User config (~/.lattice/config/settings.toml)
        4. Hardcoded constants

        Args:
            config_path: Optional explicit config file path
            lattice_root: Optional project root holding a .lattice directory

        Returns:
            Loaded Config object

        Raises:
            FileNotFoundError: If an explicit config_path does not exist
        """
        if config_path is not None:
            config_files = [config_path]
        else:
            config_files = []
            if lattice_root is not None:
                config_files.append(Path(lattice_root) / LATTICE_DIR / LATTICE_CONFIG_FILE)
            base_data_dir = Path(os.getenv(ENV_DATA_DIR, str(DEFAULT_DATA_DIR))).expanduser()
            config_files.append(base_data_dir / DEFAULT_CONFIG_SUBDIR / SETTINGS_FILE)

        data = None
        for config_file in config_files:
            if config_file.exists():
                with open(config_file, "rb") as f:
                    data = tomli.load(f)
                break

        if data is None:
            if config_path is not None:
                raise FileNotFoundError(
                    ERROR_NO_CONFIG.format(
                        path=config_path,
                        config_dir=DEFAULT_DATA_DIR / DEFAULT_CONFIG_SUBDIR,
                        default_file=Path(__file__).parent / DEFAULT_SETTINGS_FILE,
                        settings_file=SETTINGS_FILE,
                    )
                )
            data = {}

        return cls(
            paths=PathsConfig.from_dict(data.get("paths", {})),
            graph=GraphConfig.from_dict(data.get("graph", {})),
            drift=DriftConfig.from_dict(data.get("drift", {})),
            logging=_log_config_from_dict(data.get("logging", {})),
        )

"""
Constants and default values for Lattice.

Centralizes magic numbers and strings to improve maintainability.
"""

from pathlib import Path

# ============================================================================
# Application Metadata
# ============================================================================

CONFIG_DIR_NAME = ".lattice"

# ============================================================================
# Path Defaults
# ============================================================================

# Per-project lattice directory and its config file
LATTICE_DIR = ".lattice"
LATTICE_CONFIG_FILE = "config.toml"

# User-level data directory
DEFAULT_DATA_DIR = Path.home() / CONFIG_DIR_NAME
DEFAULT_CONFIG_SUBDIR = "config"
DEFAULT_LOGS_SUBDIR = "logs"

# Config file names
SETTINGS_FILE = "settings.toml"
DEFAULT_SETTINGS_FILE = "settings.default.toml"
ENV_FILE = ".env"

NODE_FILE_SUFFIXES = (".yaml", ".yml")

# ============================================================================
# Graph Defaults
# ============================================================================

DEFAULT_TRAVERSAL_DIRECTION = "both"
DEFAULT_MAX_DEPTH = 3
DEFAULT_EDGE_VERSION = "1.0.0"
DEFAULT_NODE_VERSION = "1.0.0"

# ============================================================================
# Drift Defaults
# ============================================================================

# Lowest severity that makes `lattice drift --check` fail
DEFAULT_DRIFT_FAIL_SEVERITY = "patch"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_DATA_DIR = "LATTICE_DATA_DIR"
ENV_LATTICE_ROOT = "LATTICE_ROOT"
ENV_DEFAULT_DIRECTION = "LATTICE_DEFAULT_DIRECTION"
ENV_DEFAULT_MAX_DEPTH = "LATTICE_DEFAULT_MAX_DEPTH"
ENV_DEFAULT_EDGE_VERSION = "LATTICE_DEFAULT_EDGE_VERSION"
ENV_DRIFT_FAIL_SEVERITY = "LATTICE_DRIFT_FAIL_SEVERITY"
ENV_LOG_LEVEL = "LATTICE_LOG_LEVEL"

# ============================================================================
# Error Messages
# ============================================================================

ERROR_NO_CONFIG = """
Configuration file not found: {path}

Create one with:
    lattice init

Or manually copy the default config:
    mkdir -p {config_dir}
    cp {default_file} {config_dir}/{settings_file}
"""

ERROR_NOT_IN_LATTICE = """
No {lattice_dir} directory found in {start} or any parent directory.

Run `lattice init` to create one, pass --root, or set {env_root}.
"""

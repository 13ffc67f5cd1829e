from lattice.config.settings import Config, DriftConfig, GraphConfig, PathsConfig
from lattice.config.path_resolver import PathResolver

__all__ = ["Config", "DriftConfig", "GraphConfig", "PathResolver", "PathsConfig"]

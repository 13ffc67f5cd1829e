"""Core runtime support - logging."""
from __future__ import annotations

from lattice.core.logging_config import LogConfig, get_logger, setup_logging

__all__ = [
    "LogConfig",
    "get_logger",
    "setup_logging",
]

"""Command-line interface for lattice."""
from lattice.cli.main import main

__all__ = ["main"]

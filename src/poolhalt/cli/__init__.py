"""CLI module for poolhalt.

This package contains all Click command definitions for the poolhalt CLI.
"""

from poolhalt.cli.main import cli

__all__ = ["cli"]

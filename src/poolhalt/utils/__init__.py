"""Utility modules for poolhalt.

This package contains shared utilities for logging and output formatting.
"""

from poolhalt.utils.logging import configure_logging, get_logger
from poolhalt.utils.output import OutputFormatter, console

__all__ = [
    "OutputFormatter",
    "configure_logging",
    "console",
    "get_logger",
]

"""Logging configuration for poolhalt.

This module provides console and file logging. The shutdown procedure
usually runs unattended from a UPS or power-event hook, so the file
handler is the record operators read afterwards. Console verbosity is
controlled via CLI flags:
- No flag: WARNING only
- -v: INFO level
- -vv: DEBUG level
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def get_log_level(verbosity: int) -> int:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Logging level constant.
    """
    levels = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
    }
    return levels.get(min(verbosity, 2), logging.WARNING)


def configure_logging(
    verbosity: int = 0,
    log_file: str | Path | None = None,
    log_level: str | None = None,
) -> None:
    """Configure logging for poolhalt.

    Sets up a console (stderr) handler and an optional file handler.
    The console handler respects the verbosity level; the file handler
    logs at ``log_level`` (INFO when not given) so every shutdown step
    is recorded regardless of how the command was invoked.

    Args:
        verbosity: Number of -v flags from CLI.
        log_file: Optional path to log file.
        log_level: Level for the file handler (DEBUG, INFO, WARNING, ERROR).

    Example:
        >>> configure_logging(verbosity=1, log_file="/var/log/poolhalt.log")
    """
    console_level = get_log_level(verbosity)
    file_level = getattr(logging, (log_level or "INFO").upper(), logging.INFO)

    root_logger = logging.getLogger("poolhalt")
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter

    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(min(file_level, console_level))
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Creates child loggers under the 'poolhalt' namespace.

    Args:
        name: Name of the module (e.g., 'poller', 'hosts').

    Returns:
        Logger instance.

    Example:
        >>> logger = get_logger("escalator")
        >>> logger.info("Shutting down VM db-01")
    """
    full_name = f"poolhalt.{name}" if not name.startswith("poolhalt.") else name

    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)

    return _loggers[full_name]

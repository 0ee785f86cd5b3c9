"""Custom exceptions for poolhalt.

This module defines a hierarchy of exceptions used throughout poolhalt
to separate fatal control-plane faults from per-resource failures that
the shutdown procedure logs and tolerates.

Exception Hierarchy:
    PoolhaltError (base)
    ├── ConfigurationError
    │   └── ConfigNotFoundError
    ├── ControlPlaneError
    ├── CommandError
    └── RoleError
"""

from __future__ import annotations

from typing import Any


class PoolhaltError(Exception):
    """Base exception for all poolhalt errors.

    Args:
        message: Human-readable error message.
        details: Optional dictionary with additional error context.

    Attributes:
        message: The error message.
        details: Additional context about the error.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(PoolhaltError):
    """Raised when there is a configuration-related error.

    Examples:
        - Invalid YAML syntax in config file
        - Negative delays or zero timeouts
    """


class ConfigNotFoundError(ConfigurationError):
    """Raised when the configuration file cannot be found.

    Args:
        path: The path where the config was expected.
    """

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Configuration file not found: {path}",
            details={"path": path},
        )
        self.path = path


class ControlPlaneError(PoolhaltError):
    """Raised when a query against the pool management interface fails.

    The procedure cannot make progress without authoritative resource
    state, so the core never recovers from this error; it is logged and
    re-raised to the caller.

    Args:
        command: The management command that failed.
        message: Description of the failure.
    """

    def __init__(self, command: str, message: str) -> None:
        super().__init__(
            f"Control plane query failed: {message}",
            details={"command": command},
        )
        self.command = command


class CommandError(PoolhaltError):
    """Raised when a single imperative action is rejected.

    Args:
        action: The action that failed (e.g. 'vm-shutdown', 'pbd-unplug').
        target: UUID of the resource the action was issued against.
        message: Description of the failure.
    """

    def __init__(self, action: str, target: str, message: str) -> None:
        super().__init__(
            f"Failed to {action} {target}: {message}",
            details={"action": action, "target": target},
        )
        self.action = action
        self.target = target


class RoleError(PoolhaltError):
    """Raised when the local node's role or identity cannot be resolved.

    Args:
        message: Description of what is missing.
        path: Optional path of the local file that was read.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, details={"path": path} if path else None)
        self.path = path

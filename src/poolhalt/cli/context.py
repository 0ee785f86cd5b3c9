"""CLI context for poolhalt.

This module defines the shared context object passed to all CLI commands,
extracted to avoid circular imports.
"""

from __future__ import annotations

from pathlib import Path

import click

from poolhalt.core.config import ConfigManager
from poolhalt.core.role import RoleGate
from poolhalt.core.runner import CommandRunner
from poolhalt.core.xe import XeClient


class Context:
    """CLI context object passed to all commands.

    Attributes:
        config: ConfigManager instance.
        config_path: Config file path given on the command line.
        verbose: Verbosity level (0-2).
        debug: Whether to show debug tracebacks.
    """

    def __init__(self) -> None:
        self.config: ConfigManager | None = None
        self.config_path: Path | None = None
        self.verbose: int = 0
        self.debug: bool = False

    def init_config(self) -> ConfigManager:
        """Initialize configuration manager.

        Returns:
            ConfigManager instance.
        """
        if self.config is None:
            self.config = ConfigManager(self.config_path)
        return self.config

    def init_xe(self) -> XeClient:
        """Create an xe client from configuration."""
        xe_config = self.init_config().config.xe
        return XeClient(
            CommandRunner(default_timeout=xe_config.command_timeout),
            binary=xe_config.binary,
        )

    def init_gate(self) -> RoleGate:
        """Create a role gate from configuration."""
        role_config = self.init_config().config.role
        return RoleGate(role_config.pool_conf, role_config.inventory)


pass_context = click.make_pass_decorator(Context, ensure=True)

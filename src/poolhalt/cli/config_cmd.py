"""Configuration management commands for poolhalt.

This module provides CLI commands for viewing and managing
the poolhalt configuration file.
"""

from __future__ import annotations

import json

import click
import yaml

from poolhalt.cli.context import Context, pass_context
from poolhalt.core.config import ConfigManager, get_default_config_path
from poolhalt.core.exceptions import ConfigurationError
from poolhalt.utils.output import console, print_error, print_info, print_success


@click.group()
def config() -> None:
    """Manage poolhalt configuration.

    Commands for viewing, validating, and initializing the
    configuration file.
    """


@config.command("show")
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    help="Output format.",
)
@pass_context
def config_show(ctx: Context, fmt: str) -> None:
    """Show the effective configuration.

    Displays the configuration after defaults have been applied.

    Examples:

        $ poolhalt config show

        $ poolhalt config show --format json
    """
    config_manager = ctx.init_config()
    data = config_manager.to_dict()

    if fmt == "json":
        console.print_json(json.dumps(data, indent=2, default=str))
    else:
        console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))

    suffix = "" if config_manager.path.exists() else " (not present, using defaults)"
    console.print(f"\n[dim]Config file: {config_manager.path}{suffix}[/dim]")


@config.command("validate")
@pass_context
def config_validate(ctx: Context) -> None:
    """Validate the configuration file.

    Examples:

        $ poolhalt config validate
    """
    config_path = ctx.config_path or get_default_config_path()

    if not config_path.exists():
        print_error(f"Configuration file not found: {config_path}")
        print_info("Run 'poolhalt config init' to create one, or rely on the defaults.")
        raise SystemExit(1)

    try:
        settings = ConfigManager(config_path).config

        print_success(f"Configuration is valid: {config_path}")
        console.print(f"  Deferral tag: {settings.workloads.deferral_tag}")
        console.print(
            "  VM timeouts: "
            f"{settings.workloads.graceful_timeout:g}s / "
            f"{settings.workloads.forceful_timeout:g}s / "
            f"{settings.workloads.power_reset_timeout:g}s"
        )
        console.print(f"  Member host timeout: {settings.hosts.member_timeout:g}s")
        console.print(f"  Storage types: {', '.join(settings.storage.volume_types) or 'none'}")
        console.print(f"  Log file: {settings.logging.file or 'none'}")

    except ConfigurationError as e:
        print_error(f"Invalid configuration: {e}")
        raise SystemExit(1) from e


@config.command("init")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing configuration.",
)
@pass_context
def config_init(ctx: Context, force: bool) -> None:
    """Create a configuration file with the default values.

    Examples:

        $ poolhalt config init

        $ poolhalt --config ./poolhalt.yaml config init --force
    """
    config_path = ctx.config_path or get_default_config_path()

    if config_path.exists() and not force:
        print_error(f"Configuration already exists: {config_path}")
        print_info("Use --force to overwrite.")
        raise SystemExit(1)

    try:
        path = ConfigManager.create_example_config(config_path)
        print_success(f"Created configuration at: {path}")

    except OSError as e:
        print_error(f"Failed to create configuration: {e}")
        raise SystemExit(1) from e


@config.command("path")
@pass_context
def config_path(ctx: Context) -> None:
    """Show the configuration file path.

    Examples:

        $ poolhalt config path
    """
    path = ctx.config_path or get_default_config_path()
    console.print(str(path))

    if path.exists():
        console.print("[dim](file exists)[/dim]")
    else:
        console.print("[dim](file does not exist)[/dim]")

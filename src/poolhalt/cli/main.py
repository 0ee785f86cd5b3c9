"""Main CLI entry point for poolhalt.

This module defines the main CLI group, the global options shared
across all commands, and the ``run`` and ``role`` commands.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click
from rich.console import Console

from poolhalt import __version__
from poolhalt.cli.config_cmd import config
from poolhalt.cli.context import Context, pass_context
from poolhalt.cli.plan import plan
from poolhalt.core.config import get_default_config_path
from poolhalt.core.exceptions import PoolhaltError, RoleError
from poolhalt.core.procedure import ProcedureResult, ShutdownProcedure
from poolhalt.utils.logging import configure_logging
from poolhalt.utils.output import (
    console,
    error_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    Console().print(f"poolhalt version [cyan]{__version__}[/cyan]")
    ctx.exit()


@click.group()
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase console verbosity (-v, -vv).",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Show full error tracebacks.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="POOLHALT_CONFIG",
    help=f"Path to config file (default: {get_default_config_path()}).",
)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@pass_context
def cli(
    ctx: Context,
    verbose: int,
    debug: bool,
    config_path: str | None,
) -> None:
    """poolhalt - Shut down an entire XenServer/XCP-ng pool.

    Stops every VM, unplugs network storage, shuts down member hosts and
    finally the pool coordinator. Install it on every host; it only acts
    on the current coordinator.

    Examples:

        # Preview what a shutdown would touch

        $ poolhalt plan

        # Shut down the pool (typically from a UPS hook)

        $ poolhalt run
    """
    ctx.verbose = verbose
    ctx.debug = debug

    configure_logging(verbosity=verbose)

    if config_path:
        ctx.config_path = Path(config_path)


@cli.command("run")
@pass_context
def run(ctx: Context) -> None:
    """Shut down all VMs, storage and hosts of the pool.

    Exits 0 when the pool shutdown completes or when this host is not
    the coordinator, and 1 when VMs could not be stopped.

    Examples:

        $ poolhalt run

        $ poolhalt -v run
    """
    settings = ctx.init_config().config

    try:
        configure_logging(
            verbosity=ctx.verbose,
            log_file=settings.logging.file,
            log_level=settings.logging.level,
        )
    except OSError as e:
        configure_logging(verbosity=ctx.verbose)
        print_warning(f"Logging to console only, cannot open {settings.logging.file}: {e}")

    with ShutdownProcedure.from_config(settings) as procedure:
        result = procedure.run()

    if result is ProcedureResult.NOT_COORDINATOR:
        print_info("This host is not the pool coordinator, nothing to do")
    elif result is ProcedureResult.COMPLETED:
        print_success("Pool shutdown issued")
    else:
        print_error(f"Pool shutdown aborted: {result.value}")

    raise SystemExit(result.exit_code)


@cli.command("role")
@pass_context
def role(ctx: Context) -> None:
    """Show this host's pool role.

    Examples:

        $ poolhalt role
    """
    gate = ctx.init_gate()
    console.print(f"Role: [cyan]{gate.read_role().value}[/cyan]")

    try:
        console.print(f"Installation UUID: {gate.local_host_uuid()}")
    except RoleError as e:
        print_warning(str(e))


cli.add_command(plan)
cli.add_command(config)


def main() -> None:
    """Main entry point with error handling."""
    try:
        cli(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except PoolhaltError as e:
        print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        error_console.print("\n[dim]Interrupted[/dim]")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("POOLHALT_DEBUG") or "--debug" in sys.argv:
            import traceback

            traceback.print_exc()
        else:
            print_error(f"Unexpected error: {e}")
            error_console.print("[dim]Use --debug for full traceback[/dim]")
        sys.exit(1)


if __name__ == "__main__":
    main()

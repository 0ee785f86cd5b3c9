"""Rich terminal output utilities for poolhalt.

This module provides formatted output using the Rich library,
including tables, spinners, and color-coded status.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

import yaml
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

from poolhalt.models.host import ClusterHost, HostRole
from poolhalt.models.storage import StorageAttachment
from poolhalt.models.vm import Workload

# Global console instance
console = Console()
error_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Supported output formats."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


class OutputFormatter:
    """Handles formatting and outputting pool resources in various formats.

    Args:
        format_type: Output format to use (table, json, yaml).
        output_console: Rich console instance for output.

    Example:
        >>> formatter = OutputFormatter(OutputFormat.TABLE)
        >>> formatter.print_hosts([coordinator, member])
    """

    def __init__(
        self,
        format_type: OutputFormat = OutputFormat.TABLE,
        output_console: Console | None = None,
    ) -> None:
        self.format_type = format_type
        self.console = output_console or console

    def _print_data(self, data: Any) -> bool:
        """Print data as JSON or YAML; return False for table format."""
        if self.format_type == OutputFormat.JSON:
            self.console.print_json(json.dumps(data, indent=2, default=str))
        elif self.format_type == OutputFormat.YAML:
            self.console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
        else:
            return False
        return True

    def print_hosts(self, hosts: list[ClusterHost]) -> None:
        """Print pool hosts in shutdown order."""
        if self._print_data([h.to_dict() for h in hosts]):
            return

        table = Table(title="Hosts (shutdown order)", show_header=True)
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Role")
        table.add_column("Address", style="white")
        table.add_column("UUID", style="dim")

        for host in hosts:
            role = Text(host.role.value)
            role.stylize("bold magenta" if host.role == HostRole.COORDINATOR else "white")
            table.add_row(host.name, role, host.address or "-", host.uuid)

        self.console.print(table)

    def print_workloads(self, workloads: list[Workload], deferral_tag: str) -> None:
        """Print running workloads with the pass that will stop them."""
        if self._print_data(
            [
                {**w.to_dict(), "pass": "final" if w.is_deferred(deferral_tag) else "initial"}
                for w in workloads
            ]
        ):
            return

        table = Table(title="Running VMs", show_header=True)
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Status", justify="center")
        table.add_column("Pass", style="yellow")
        table.add_column("Tags", style="dim")
        table.add_column("UUID", style="dim")

        for workload in workloads:
            status_text = Text(workload.status_display)
            status_text.stylize(workload.power_state.color)
            table.add_row(
                workload.name,
                status_text,
                "final" if workload.is_deferred(deferral_tag) else "initial",
                ", ".join(workload.tags) or "-",
                workload.uuid,
            )

        self.console.print(table)

    def print_attachments(self, attachments: list[StorageAttachment]) -> None:
        """Print the storage attachments that will be unplugged."""
        if self._print_data([a.to_dict() for a in attachments]):
            return

        table = Table(title="Storage Attachments", show_header=True)
        table.add_column("Volume", style="cyan", no_wrap=True)
        table.add_column("Type", style="white")
        table.add_column("Attached", justify="center")
        table.add_column("PBD UUID", style="dim")

        for attachment in attachments:
            table.add_row(
                attachment.name,
                attachment.volume_type,
                "[green]yes[/green]" if attachment.attached else "[dim]no[/dim]",
                attachment.uuid,
            )

        self.console.print(table)

    def print_dict(self, data: dict[str, Any], title: str | None = None) -> None:
        """Print a dictionary in the configured format."""
        if self._print_data(data):
            return

        table = Table(title=title, show_header=True)
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="white")

        for key, value in data.items():
            table.add_row(str(key), str(value))

        self.console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def create_spinner_progress() -> Progress:
    """Create a simple spinner progress for indeterminate operations.

    Returns:
        Progress instance with just spinner and description.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

"""Shutdown preview command for poolhalt.

``poolhalt plan`` queries the pool and shows what ``poolhalt run`` would
act on, in the order it would act, without changing anything.
"""

from __future__ import annotations

import click

from poolhalt.cli.context import Context, pass_context
from poolhalt.core.clock import SystemClock
from poolhalt.core.exceptions import ControlPlaneError, RoleError
from poolhalt.core.hosts import resolve_hosts
from poolhalt.core.storage import StorageDetacher
from poolhalt.utils.output import (
    OutputFormat,
    OutputFormatter,
    console,
    create_spinner_progress,
    print_error,
    print_warning,
)


@click.command("plan")
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    help="Output format.",
)
@pass_context
def plan(ctx: Context, fmt: str) -> None:
    """Preview the pool shutdown without changing anything.

    Lists the network storage attachments that would be unplugged,
    the running VMs and the pass that stops each of them, and the hosts
    in shutdown order.

    Examples:

        $ poolhalt plan

        $ poolhalt plan --format json
    """
    settings = ctx.init_config().config
    gate = ctx.init_gate()
    xe = ctx.init_xe()
    deferral_tag = settings.workloads.deferral_tag

    try:
        coordinator_uuid = gate.local_host_uuid()
    except RoleError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    try:
        progress = create_spinner_progress()
        with progress:
            task = progress.add_task("Querying pool...", total=None)
            attachments = StorageDetacher(
                xe, SystemClock(), volume_types=settings.storage.volume_types
            ).describe()
            workloads = [xe.get_workload(uuid) for uuid in xe.list_vms()]
            hosts = resolve_hosts(xe, coordinator_uuid)
            progress.update(task, completed=True)
    except ControlPlaneError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    # Members first, coordinator last
    hosts.sort(key=lambda h: h.is_coordinator)
    formatter = OutputFormatter(OutputFormat(fmt))

    if formatter.format_type != OutputFormat.TABLE:
        formatter.print_dict(
            {
                "role": gate.read_role().value,
                "attachments": [a.to_dict() for a in attachments],
                "workloads": [
                    {**w.to_dict(), "pass": "final" if w.is_deferred(deferral_tag) else "initial"}
                    for w in workloads
                ],
                "hosts": [h.to_dict() for h in hosts],
            }
        )
        return

    console.print(f"Local role: [cyan]{gate.read_role().value}[/cyan]")
    if not gate.is_coordinator():
        print_warning("'poolhalt run' does nothing on this host")

    formatter.print_attachments(attachments)
    formatter.print_workloads(workloads, deferral_tag)
    formatter.print_hosts(hosts)

"""Pool management interface backed by the xe CLI.

XeClient is the resource enumerator and command dispatcher used by the
shutdown procedure. Queries raise ControlPlaneError on failure, since
nothing can proceed without authoritative state. Actions raise
CommandError, which callers log and tolerate.
"""

from __future__ import annotations

from poolhalt.core.exceptions import CommandError, ControlPlaneError
from poolhalt.core.runner import CommandResult, CommandRunner
from poolhalt.models.resources import ResourceSet
from poolhalt.models.vm import PowerState, Workload
from poolhalt.utils.logging import get_logger

logger = get_logger("xe")


class XeClient:
    """Issues xe commands against the local pool.

    Args:
        runner: Command runner used to execute xe.
        binary: Path or name of the xe executable.

    Example:
        >>> xe = XeClient(CommandRunner())
        >>> running = xe.list_vms()
        >>> for uuid in running:
        ...     print(xe.vm_name(uuid))
    """

    def __init__(self, runner: CommandRunner | None = None, binary: str = "xe") -> None:
        self.runner = runner or CommandRunner()
        self.binary = binary

    def _run_xe(
        self,
        subcommand: str,
        params: dict[str, str] | None = None,
        minimal: bool = False,
    ) -> CommandResult:
        """Run an xe subcommand.

        Args:
            subcommand: xe subcommand (vm-list, host-disable, etc.).
            params: ``key=value`` parameters.
            minimal: Add the --minimal flag.

        Returns:
            CommandResult from the command.
        """
        cmd_parts = [self.binary, subcommand]

        if params:
            cmd_parts.extend(f"{key}={value}" for key, value in params.items())

        if minimal:
            cmd_parts.append("--minimal")

        return self.runner.run(cmd_parts)

    def _query(
        self,
        subcommand: str,
        params: dict[str, str] | None = None,
        minimal: bool = False,
    ) -> str:
        """Run a read-only xe command and return its stdout.

        Raises:
            ControlPlaneError: If the command fails.
        """
        result = self._run_xe(subcommand, params, minimal=minimal)
        if not result.success:
            raise ControlPlaneError(
                result.command, result.stderr or f"exit code {result.exit_code}"
            )
        return result.stdout

    def _act(self, subcommand: str, target: str, params: dict[str, str] | None = None) -> None:
        """Run an xe action against one resource.

        Raises:
            CommandError: If the command fails.
        """
        result = self._run_xe(subcommand, {"uuid": target, **(params or {})})
        if not result.success:
            raise CommandError(subcommand, target, result.stderr or f"exit code {result.exit_code}")
        logger.debug(f"{subcommand} succeeded for {target}")

    def _param(self, kind: str, uuid: str, name: str) -> str:
        return self._query(f"{kind}-param-get", {"uuid": uuid, "param-name": name})

    # Workloads

    def list_vms(self, power_state: str = "running", tag: str | None = None) -> ResourceSet:
        """List non-control-domain VMs in a power state.

        Args:
            power_state: xe power state filter.
            tag: Only list VMs carrying this tag.

        Returns:
            ResourceSet of VM UUIDs.
        """
        params = {"power-state": power_state, "is-control-domain": "false"}
        if tag:
            params["tags:contains"] = tag
        return ResourceSet.from_minimal(self._query("vm-list", params, minimal=True))

    def vm_name(self, uuid: str) -> str:
        """Display name of a VM."""
        return self._param("vm", uuid, "name-label")

    def vm_tags(self, uuid: str) -> list[str]:
        """Tags attached to a VM."""
        raw = self._param("vm", uuid, "tags")
        return [tag.strip() for tag in raw.split(",") if tag.strip()]

    def vm_power_state(self, uuid: str) -> PowerState:
        """Current power state of a VM."""
        return PowerState.parse(self._param("vm", uuid, "power-state"))

    def vm_is_control_domain(self, uuid: str) -> bool:
        """Whether a VM is a host's management domain."""
        return self._param("vm", uuid, "is-control-domain").lower() == "true"

    def get_workload(self, uuid: str) -> Workload:
        """Build a Workload model for a VM."""
        return Workload(
            uuid=uuid,
            name=self.vm_name(uuid),
            power_state=self.vm_power_state(uuid),
            is_control_domain=self.vm_is_control_domain(uuid),
            tags=self.vm_tags(uuid),
        )

    def shutdown_vm(self, uuid: str) -> None:
        """Cleanly shut down a VM."""
        self._act("vm-shutdown", uuid)

    def force_shutdown_vm(self, uuid: str) -> None:
        """Forcefully shut down a VM."""
        self._act("vm-shutdown", uuid, {"force": "true"})

    def reset_vm_power_state(self, uuid: str) -> None:
        """Force the recorded power state of a VM to halted."""
        self._act("vm-reset-powerstate", uuid, {"force": "true"})

    # Hosts

    def list_hosts(self) -> ResourceSet:
        """List all hosts in the pool."""
        return ResourceSet.from_minimal(self._query("host-list", minimal=True))

    def host_name(self, uuid: str) -> str:
        """Display name of a host."""
        return self._param("host", uuid, "name-label")

    def host_address(self, uuid: str) -> str:
        """Management network address of a host."""
        return self._param("host", uuid, "address")

    def disable_host(self, uuid: str) -> None:
        """Stop new VMs from being placed on a host."""
        self._act("host-disable", uuid)

    def shutdown_host(self, uuid: str) -> None:
        """Shut down a host."""
        self._act("host-shutdown", uuid)

    # Storage

    def list_volumes(self, volume_type: str) -> ResourceSet:
        """List storage repositories of a transport type."""
        return ResourceSet.from_minimal(
            self._query("sr-list", {"type": volume_type}, minimal=True)
        )

    def list_attachments(self, volume_uuid: str) -> ResourceSet:
        """List the PBDs bound to a storage repository."""
        return ResourceSet.from_minimal(
            self._query(
                "sr-param-get",
                {"uuid": volume_uuid, "param-name": "PBDs"},
                minimal=True,
            )
        )

    def attachment_name(self, uuid: str) -> str:
        """Display name of the storage repository a PBD belongs to."""
        return self._param("pbd", uuid, "sr-name-label")

    def attachment_attached(self, uuid: str) -> bool:
        """Whether a PBD is currently plugged."""
        return self._param("pbd", uuid, "currently-attached").lower() == "true"

    def unplug_attachment(self, uuid: str) -> None:
        """Unplug a PBD."""
        self._act("pbd-unplug", uuid)

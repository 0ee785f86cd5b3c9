"""Host shutdown sequencing.

Member hosts are disabled and shut down first, then probed until they
stop answering on the network or a shared time budget runs out. The
coordinator is shut down last; once its shutdown is issued the
procedure's own host is going away, so nothing waits afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from poolhalt.core.clock import Deadline, SystemClock
from poolhalt.core.config import HostsConfig
from poolhalt.core.dispatch import Dispatcher
from poolhalt.core.exceptions import CommandError, RoleError
from poolhalt.core.probe import LivenessProber
from poolhalt.models.host import ClusterHost, HostRole, HostState
from poolhalt.utils.logging import get_logger

if TYPE_CHECKING:
    from poolhalt.core.xe import XeClient

logger = get_logger("hosts")


def resolve_hosts(xe: XeClient, coordinator_uuid: str) -> list[ClusterHost]:
    """Enumerate pool hosts and tag each with its role.

    Args:
        xe: Pool management client.
        coordinator_uuid: Installation UUID of the local (coordinator) host.

    Returns:
        Hosts in enumeration order.
    """
    return [
        ClusterHost(
            uuid=uuid,
            name=xe.host_name(uuid),
            address=xe.host_address(uuid),
            role=HostRole.COORDINATOR if uuid == coordinator_uuid else HostRole.MEMBER,
        )
        for uuid in xe.list_hosts()
    ]


@dataclass
class HostShutdownReport:
    """Final state of every host after sequencing.

    Attributes:
        states: Host UUID to final HostState.
        budget_exhausted: True if member probing stopped on the shared timeout.
    """

    states: dict[str, HostState] = field(default_factory=dict)
    budget_exhausted: bool = False

    def hosts_in(self, state: HostState) -> list[str]:
        """UUIDs of hosts that ended in ``state``."""
        return [uuid for uuid, s in self.states.items() if s == state]


class HostShutdownSequencer:
    """Shuts down member hosts, waits for them, then the coordinator.

    Args:
        xe: Pool management client.
        prober: Liveness prober for member hosts.
        dispatcher: Fire-and-forget dispatcher for member shutdowns.
        clock: Clock used for delays and the shared deadline.
        config: Delays and the shared member budget.
    """

    def __init__(
        self,
        xe: XeClient,
        prober: LivenessProber,
        dispatcher: Dispatcher,
        clock: SystemClock,
        config: HostsConfig | None = None,
    ) -> None:
        self.xe = xe
        self.prober = prober
        self.dispatcher = dispatcher
        self.clock = clock
        self.config = config or HostsConfig()

    def run(self, coordinator_uuid: str) -> HostShutdownReport:
        """Shut down the whole pool, ending with the coordinator.

        Args:
            coordinator_uuid: Installation UUID of the local host.

        Returns:
            HostShutdownReport with each host's final state.

        Raises:
            RoleError: If the local host is not part of the pool.
        """
        hosts = resolve_hosts(self.xe, coordinator_uuid)
        coordinator = next((h for h in hosts if h.is_coordinator), None)
        if coordinator is None:
            raise RoleError(f"Local host {coordinator_uuid} is not a member of this pool")
        members = [h for h in hosts if not h.is_coordinator]

        report = HostShutdownReport(states={h.uuid: HostState.ENABLED for h in hosts})

        if members:
            self.dispatcher.start_batch(len(members))
        for member in members:
            self._disable(member, report)
            self.clock.sleep(self.config.host_settle_delay)
            logger.info(f"Shutting down member host {member.display_name}")
            self.dispatcher.spawn(
                self.xe.shutdown_host,
                member.uuid,
                label="host-shutdown",
                stagger=self.config.host_stagger_delay,
            )
            report.states[member.uuid] = HostState.SHUTDOWN_ISSUED

        if members:
            self._await_members(members, report)

        self._shut_down_coordinator(coordinator, report)
        return report

    def _disable(self, host: ClusterHost, report: HostShutdownReport) -> None:
        kind = "coordinator" if host.is_coordinator else "member"
        logger.info(f"Disabling {kind} host {host.display_name}")
        try:
            self.xe.disable_host(host.uuid)
        except CommandError as e:
            logger.warning(f"Could not disable {kind} host {host.name}: {e}")
        report.states[host.uuid] = HostState.DISABLED

    def _await_members(self, members: list[ClusterHost], report: HostShutdownReport) -> None:
        """Probe members in turn until each is unreachable or the budget is spent."""
        deadline = Deadline.after(self.clock, self.config.member_timeout)
        self.clock.sleep(self.config.probe_settle_delay)

        for index, member in enumerate(members):
            if self._wait_until_unreachable(member, deadline):
                report.states[member.uuid] = HostState.UNREACHABLE
                continue

            logger.warning("Member host shutdown timeout, proceeding with coordinator shutdown")
            for host in members[index:]:
                report.states[host.uuid] = HostState.TIMED_OUT_PROCEEDED
            report.budget_exhausted = True
            return

    def _wait_until_unreachable(self, host: ClusterHost, deadline: Deadline) -> bool:
        while not deadline.expired():
            if not self.prober.is_reachable(host.address):
                logger.info(f"Member host {host.display_name} no longer responds")
                self.clock.sleep(self.config.probe_lost_delay)
                return True
            logger.info("Not all member hosts shutdown, continuing to wait...")
            self.clock.sleep(min(self.config.probe_interval, deadline.remaining()))
        return False

    def _shut_down_coordinator(self, host: ClusterHost, report: HostShutdownReport) -> None:
        self._disable(host, report)
        self.clock.sleep(self.config.host_settle_delay)
        logger.info(f"Shutting down coordinator host {host.display_name}")
        try:
            self.xe.shutdown_host(host.uuid)
        except CommandError as e:
            logger.error(f"Coordinator host shutdown failed: {e}")
            return
        report.states[host.uuid] = HostState.SHUTDOWN_ISSUED

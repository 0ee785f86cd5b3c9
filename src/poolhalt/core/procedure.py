"""Pool shutdown procedure.

This module wires the role gate, storage detacher, VM escalator and host
sequencer into the ordered, unattended shutdown of an entire pool:

    role gate → detach storage → initial VM pass → final VM pass → hosts

Only an exhausted VM pass is reported as failure. Degraded host
sequencing is logged and the run still counts as completed.
"""

from __future__ import annotations

from enum import Enum

from poolhalt.core.clock import SystemClock
from poolhalt.core.config import Config
from poolhalt.core.dispatch import Dispatcher
from poolhalt.core.escalator import VMShutdownEscalator, WorkloadScope
from poolhalt.core.exceptions import PoolhaltError
from poolhalt.core.hosts import HostShutdownSequencer
from poolhalt.core.probe import LivenessProber
from poolhalt.core.role import RoleGate
from poolhalt.core.runner import CommandRunner
from poolhalt.core.storage import StorageDetacher
from poolhalt.core.xe import XeClient
from poolhalt.models.host import HostState
from poolhalt.utils.logging import get_logger

logger = get_logger("procedure")

BANNER = "=" * 79


class ProcedureResult(str, Enum):
    """Outcome of a procedure run."""

    NOT_COORDINATOR = "not-coordinator"
    COMPLETED = "completed"
    INITIAL_WORKLOADS_FAILED = "initial-workloads-failed"
    FINAL_WORKLOADS_FAILED = "final-workloads-failed"

    @property
    def exit_code(self) -> int:
        """Process exit code reported to the caller."""
        if self in (ProcedureResult.NOT_COORDINATOR, ProcedureResult.COMPLETED):
            return 0
        return 1


class ShutdownProcedure:
    """Runs the full pool shutdown on the coordinator.

    Args:
        gate: Role gate deciding whether this node acts.
        detacher: Storage detacher.
        escalator: VM shutdown escalator, used for both passes.
        sequencer: Host shutdown sequencer.
        dispatcher: Dispatcher shared by escalator and sequencer, closed
            by ``close()``.

    Example:
        >>> with ShutdownProcedure.from_config(ConfigManager().config) as procedure:
        ...     result = procedure.run()
        >>> sys.exit(result.exit_code)
    """

    def __init__(
        self,
        gate: RoleGate,
        detacher: StorageDetacher,
        escalator: VMShutdownEscalator,
        sequencer: HostShutdownSequencer,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self.gate = gate
        self.detacher = detacher
        self.escalator = escalator
        self.sequencer = sequencer
        self.dispatcher = dispatcher

    @classmethod
    def from_config(
        cls,
        config: Config,
        clock: SystemClock | None = None,
        runner: CommandRunner | None = None,
    ) -> ShutdownProcedure:
        """Build a procedure wired to the local xe CLI.

        Args:
            config: Loaded configuration.
            clock: Clock for all delays (system clock by default).
            runner: Command runner for xe and ping.

        Returns:
            A ready-to-run ShutdownProcedure.
        """
        clock = clock or SystemClock()
        runner = runner or CommandRunner(default_timeout=config.xe.command_timeout)
        xe = XeClient(runner, binary=config.xe.binary)
        dispatcher = Dispatcher(clock)

        return cls(
            gate=RoleGate(config.role.pool_conf, config.role.inventory),
            detacher=StorageDetacher(
                xe,
                clock,
                volume_types=config.storage.volume_types,
                stagger=config.storage.detach_stagger,
            ),
            escalator=VMShutdownEscalator.from_config(xe, clock, dispatcher, config.workloads),
            sequencer=HostShutdownSequencer(
                xe,
                LivenessProber(runner, timeout=config.hosts.probe_timeout),
                dispatcher,
                clock,
                config.hosts,
            ),
            dispatcher=dispatcher,
        )

    def run(self) -> ProcedureResult:
        """Shut down the pool.

        Returns:
            The ProcedureResult; map it to an exit code with ``exit_code``.

        Raises:
            ControlPlaneError: If an enumeration query fails.
            RoleError: If the local host cannot be identified.
        """
        try:
            return self._shut_down_pool()
        except PoolhaltError as e:
            logger.error(f"Shutdown procedure aborted: {e}")
            raise

    def _shut_down_pool(self) -> ProcedureResult:
        if not self.gate.is_coordinator():
            logger.info("This host is not the pool coordinator, nothing to do")
            return ProcedureResult.NOT_COORDINATOR

        coordinator_uuid = self.gate.local_host_uuid()

        logger.info(BANNER)
        logger.info("Received shutdown request, initiating shutdown procedure")
        logger.info(BANNER)

        self.detacher.detach_all()

        if not self.escalator.escalate(WorkloadScope.INITIAL):
            logger.error("Initial shutdown of VMs failed!")
            return ProcedureResult.INITIAL_WORKLOADS_FAILED

        if not self.escalator.escalate(WorkloadScope.ALL):
            logger.error("Final shutdown of VMs failed!")
            return ProcedureResult.FINAL_WORKLOADS_FAILED

        report = self.sequencer.run(coordinator_uuid)
        if report.budget_exhausted:
            logger.warning(
                "Proceeded without confirming shutdown of "
                f"{len(report.hosts_in(HostState.TIMED_OUT_PROCEEDED))} member host(s)"
            )

        logger.info("Shutdown procedure complete")
        return ProcedureResult.COMPLETED

    def close(self) -> None:
        """Release the dispatcher's worker pool."""
        if self.dispatcher is not None:
            self.dispatcher.close()

    def __enter__(self) -> ShutdownProcedure:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

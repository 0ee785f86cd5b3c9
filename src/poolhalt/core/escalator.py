"""Escalating VM shutdown.

Running VMs are pushed through three increasingly forceful phases:
a clean shutdown, a forced shutdown, and finally a power-state reset.
Each phase re-enumerates what is still running, dispatches its action
to every remaining VM, and waits for convergence before deciding
whether to escalate.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from poolhalt.core.clock import SystemClock
from poolhalt.core.dispatch import Dispatcher
from poolhalt.core.poller import ConvergencePoller
from poolhalt.models.resources import ResourceSet
from poolhalt.utils.logging import get_logger

if TYPE_CHECKING:
    from poolhalt.core.config import WorkloadConfig
    from poolhalt.core.xe import XeClient

logger = get_logger("escalator")


class WorkloadScope(str, Enum):
    """Which running VMs a shutdown pass targets."""

    INITIAL = "initial"
    ALL = "all"


@dataclass(frozen=True)
class EscalationPhase:
    """One step of the escalation ladder.

    Args:
        name: Short phase name.
        verb: Log prefix describing the action, e.g. "Shutting down".
        timeout: Convergence budget for the phase in seconds.
        action: Per-VM action, called with the VM UUID.
    """

    name: str
    verb: str
    timeout: float
    action: Callable[[str], None]


def default_phases(xe: XeClient, config: WorkloadConfig) -> tuple[EscalationPhase, ...]:
    """Build the three escalation phases from configuration."""
    return (
        EscalationPhase("graceful", "Shutting down", config.graceful_timeout, xe.shutdown_vm),
        EscalationPhase(
            "forceful", "Forcefully shutting down", config.forceful_timeout, xe.force_shutdown_vm
        ),
        EscalationPhase(
            "power-reset",
            "Resetting power for",
            config.power_reset_timeout,
            xe.reset_vm_power_state,
        ),
    )


class VMShutdownEscalator:
    """Drives a scope of running VMs to halted.

    Args:
        xe: Pool management client.
        poller: Convergence poller used after each phase's dispatches.
        dispatcher: Fire-and-forget dispatcher for per-VM actions.
        phases: Escalation ladder, tried in order.
        deferral_tag: Tag that excludes a VM from the INITIAL scope.
        dispatch_stagger: Delay between dispatches within a phase.
    """

    def __init__(
        self,
        xe: XeClient,
        poller: ConvergencePoller,
        dispatcher: Dispatcher,
        phases: tuple[EscalationPhase, ...],
        deferral_tag: str = "Late-Shutdown",
        dispatch_stagger: float = 1,
    ) -> None:
        self.xe = xe
        self.poller = poller
        self.dispatcher = dispatcher
        self.phases = phases
        self.deferral_tag = deferral_tag
        self.dispatch_stagger = dispatch_stagger

    @classmethod
    def from_config(
        cls,
        xe: XeClient,
        clock: SystemClock,
        dispatcher: Dispatcher,
        config: WorkloadConfig,
    ) -> VMShutdownEscalator:
        """Create an escalator with phases and delays from configuration."""
        poller = ConvergencePoller(
            clock,
            settle_delay=config.settle_delay,
            poll_interval=config.poll_interval,
        )
        return cls(
            xe,
            poller,
            dispatcher,
            default_phases(xe, config),
            deferral_tag=config.deferral_tag,
            dispatch_stagger=config.dispatch_stagger,
        )

    def list_targets(self, scope: WorkloadScope) -> ResourceSet:
        """Query the running VMs in a scope.

        Args:
            scope: INITIAL excludes VMs carrying the deferral tag.

        Returns:
            Fresh ResourceSet of VM UUIDs.
        """
        running = self.xe.list_vms()
        if scope is WorkloadScope.ALL or not running:
            return running
        return running.without(self.xe.list_vms(tag=self.deferral_tag))

    def _lister(self, scope: WorkloadScope) -> Callable[[], ResourceSet]:
        return lambda: self.list_targets(scope)

    def _dispatch(self, phase: EscalationPhase, targets: ResourceSet) -> None:
        self.dispatcher.start_batch(len(targets))
        for uuid in targets:
            name = self.xe.vm_name(uuid)
            logger.info(f"{phase.verb} VM {name} (UUID: {uuid})")
            self.dispatcher.spawn(
                phase.action,
                uuid,
                label=phase.name,
                stagger=self.dispatch_stagger,
            )

    def escalate(self, scope: WorkloadScope) -> bool:
        """Shut down every running VM in ``scope``, escalating as needed.

        Args:
            scope: Which running VMs to target.

        Returns:
            True once a phase converges, False if the last phase times out.
        """
        for phase in self.phases:
            targets = self.list_targets(scope)
            if not targets:
                logger.info(f"No running VMs in {scope.value} scope")
                return True

            logger.info(
                f"Starting {phase.name} phase for {len(targets)} VM(s) "
                f"({scope.value} scope, timeout {phase.timeout:g}s)"
            )
            self._dispatch(phase, targets)

            if self.poller.wait(self._lister(scope), phase.timeout).converged:
                logger.info(f"All {scope.value} VMs shut down during {phase.name} phase")
                return True

            logger.warning(f"{phase.name.capitalize()} phase timed out after {phase.timeout:g}s")

        return False

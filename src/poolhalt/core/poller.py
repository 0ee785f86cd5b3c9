"""Convergence polling.

The poller is the wait primitive behind every escalation phase: after
commands have been dispatched, it re-queries the affected resource set
until it is empty or the phase's deadline passes.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from poolhalt.core.clock import Deadline, SystemClock
from poolhalt.models.resources import ResourceSet
from poolhalt.utils.logging import get_logger

logger = get_logger("poller")

ListingFunc = Callable[[], ResourceSet]


class PollOutcome(str, Enum):
    """States of a single convergence wait."""

    POLLING = "polling"
    CONVERGED = "converged"
    TIMED_OUT = "timed-out"

    @property
    def converged(self) -> bool:
        """True if the resource set emptied before the deadline."""
        return self is PollOutcome.CONVERGED


class ConvergencePoller:
    """Waits for a re-queried resource set to become empty.

    Args:
        clock: Clock used for sleeping and deadlines.
        settle_delay: Delay before the first query, so that state is not
            sampled before the preceding dispatches take effect.
        poll_interval: Delay between queries.
        subject: Noun used in the progress log line.

    Example:
        >>> poller = ConvergencePoller(SystemClock())
        >>> outcome = poller.wait(xe.list_vms, timeout=180)
        >>> outcome.converged
        True
    """

    def __init__(
        self,
        clock: SystemClock,
        settle_delay: float = 10,
        poll_interval: float = 10,
        subject: str = "VMs",
    ) -> None:
        self.clock = clock
        self.settle_delay = settle_delay
        self.poll_interval = poll_interval
        self.subject = subject

    def wait(self, list_resources: ListingFunc, timeout: float) -> PollOutcome:
        """Poll until ``list_resources`` returns nothing or ``timeout`` elapses.

        The timeout is measured from the call, so the settling delay
        counts against it. Errors raised by ``list_resources`` propagate.

        Args:
            list_resources: Zero-argument function returning the outstanding set.
            timeout: Budget in seconds.

        Returns:
            CONVERGED or TIMED_OUT.
        """
        deadline = Deadline.after(self.clock, timeout)
        state = PollOutcome.POLLING
        self.clock.sleep(self.settle_delay)

        while state is PollOutcome.POLLING:
            if deadline.expired():
                state = PollOutcome.TIMED_OUT
                continue

            outstanding = list_resources()
            if not outstanding:
                state = PollOutcome.CONVERGED
                continue

            logger.info(
                f"Not all {self.subject} shutdown ({len(outstanding)} remaining), "
                "continuing to wait..."
            )
            self.clock.sleep(min(self.poll_interval, deadline.remaining()))

        logger.debug(f"Convergence wait finished: {state.value}")
        return state

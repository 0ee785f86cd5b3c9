"""Clock and deadline primitives.

Every wait in the shutdown procedure goes through a Clock so that tests
can substitute a fake one and exercise timeout boundaries without real
sleeping. Deadlines are absolute wake times on that clock and are passed
explicitly to whatever loop needs them.
"""

from __future__ import annotations

import time
from dataclasses import dataclass


class SystemClock:
    """Monotonic wall clock backed by the time module."""

    def monotonic(self) -> float:
        """Current monotonic time in seconds."""
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        if seconds > 0:
            time.sleep(seconds)


@dataclass(frozen=True)
class Deadline:
    """An absolute expiry time on a clock.

    Args:
        clock: Clock the deadline is measured against.
        expires_at: Monotonic time at which the deadline expires.

    Example:
        >>> deadline = Deadline.after(SystemClock(), 180)
        >>> while not deadline.expired():
        ...     ...
    """

    clock: SystemClock
    expires_at: float

    @classmethod
    def after(cls, clock: SystemClock, seconds: float) -> Deadline:
        """Create a deadline that expires ``seconds`` from now."""
        return cls(clock=clock, expires_at=clock.monotonic() + seconds)

    def remaining(self) -> float:
        """Seconds left before expiry, never negative."""
        return max(0.0, self.expires_at - self.clock.monotonic())

    def expired(self) -> bool:
        """True once the elapsed time has reached the budget."""
        return self.clock.monotonic() >= self.expires_at

"""Network liveness probing for hosts that are shutting down."""

from __future__ import annotations

from poolhalt.core.runner import CommandRunner
from poolhalt.utils.logging import get_logger

logger = get_logger("probe")


class LivenessProber:
    """Sends a single ICMP echo request to check whether a host answers.

    Any failure to get a reply counts as unreachable: a missing ping
    binary, a DNS failure or an OS error are never taken as a sign
    that the host is still up.

    Args:
        runner: Command runner used to execute ping.
        timeout: Seconds to wait for the echo reply.
    """

    def __init__(self, runner: CommandRunner | None = None, timeout: int = 1) -> None:
        self.runner = runner or CommandRunner()
        self.timeout = timeout

    def is_reachable(self, address: str) -> bool:
        """Probe an address once.

        Args:
            address: IP address or hostname.

        Returns:
            True only if an echo reply was received.
        """
        if not address:
            return False

        result = self.runner.run(
            ["ping", "-c", "1", "-W", str(self.timeout), address],
            timeout=self.timeout + 5,
        )
        logger.debug(f"Probe of {address}: exit code {result.exit_code}")
        return result.success

"""Local command execution.

poolhalt runs on the pool coordinator itself, so management commands and
liveness probes are plain local processes. This module wraps subprocess
with a uniform result type and timeout handling.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass

from poolhalt.utils.logging import get_logger

logger = get_logger("runner")

# Exit code reported when the executable cannot be started at all
EXIT_NOT_STARTED = 127
# Exit code reported when a command exceeds its timeout
EXIT_TIMED_OUT = 124


@dataclass
class CommandResult:
    """Result from a local command execution.

    Args:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        exit_code: Exit code of the command.
        command: The command line that was executed.

    Attributes:
        success: True if exit code is 0.
    """

    stdout: str
    stderr: str
    exit_code: int
    command: str

    @property
    def success(self) -> bool:
        """Check if command succeeded (exit code 0)."""
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr output."""
        parts = []
        if self.stdout:
            parts.append(self.stdout)
        if self.stderr:
            parts.append(self.stderr)
        return "\n".join(parts)


class CommandRunner:
    """Runs local commands and captures their output.

    Failures to start the process and timeouts are folded into the
    returned CommandResult rather than raised, so callers decide whether
    a failure is fatal.

    Args:
        default_timeout: Default timeout for commands in seconds.

    Example:
        >>> runner = CommandRunner()
        >>> result = runner.run(["xe", "host-list", "--minimal"])
        >>> result.success
        True
    """

    def __init__(self, default_timeout: float = 120) -> None:
        self.default_timeout = default_timeout

    def run(self, args: list[str], timeout: float | None = None) -> CommandResult:
        """Execute a command.

        Args:
            args: Command and arguments.
            timeout: Execution timeout, defaults to ``default_timeout``.

        Returns:
            CommandResult with output and exit code.
        """
        command = shlex.join(args)
        exec_timeout = timeout or self.default_timeout
        logger.debug(f"Executing: {command}")

        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=exec_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Command timed out after {exec_timeout}s: {command}")
            return CommandResult(
                stdout="",
                stderr=f"timed out after {exec_timeout}s",
                exit_code=EXIT_TIMED_OUT,
                command=command,
            )
        except OSError as e:
            logger.warning(f"Could not execute {command}: {e}")
            return CommandResult(
                stdout="",
                stderr=str(e),
                exit_code=EXIT_NOT_STARTED,
                command=command,
            )

        result = CommandResult(
            stdout=completed.stdout.strip(),
            stderr=completed.stderr.strip(),
            exit_code=completed.returncode,
            command=command,
        )
        if not result.success:
            logger.debug(f"Command exited with {result.exit_code}: {command}")
        return result

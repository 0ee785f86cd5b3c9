"""Tests for local command execution."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

from poolhalt.core.runner import EXIT_NOT_STARTED, EXIT_TIMED_OUT, CommandResult, CommandRunner


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success_property(self) -> None:
        """Test success property."""
        success = CommandResult(stdout="ok", stderr="", exit_code=0, command="test")
        failure = CommandResult(stdout="", stderr="error", exit_code=1, command="test")

        assert success.success is True
        assert failure.success is False

    def test_output_property(self) -> None:
        """Test combined output property."""
        result = CommandResult(stdout="out", stderr="err", exit_code=0, command="test")
        assert result.output == "out\nerr"

    def test_output_stdout_only(self) -> None:
        """Test output with only stdout."""
        result = CommandResult(stdout="out", stderr="", exit_code=0, command="test")
        assert result.output == "out"


class TestCommandRunner:
    """Tests for CommandRunner class."""

    @patch("poolhalt.core.runner.subprocess.run")
    def test_run_success(self, mock_run: MagicMock) -> None:
        """Test output is captured and stripped."""
        mock_run.return_value = subprocess.CompletedProcess(
            args=["xe", "host-list"], returncode=0, stdout="h1,h2\n", stderr=""
        )

        result = CommandRunner().run(["xe", "host-list", "--minimal"])

        assert result.success is True
        assert result.stdout == "h1,h2"
        assert result.command == "xe host-list --minimal"

    @patch("poolhalt.core.runner.subprocess.run")
    def test_run_failure_is_returned(self, mock_run: MagicMock) -> None:
        """Test a non-zero exit is reported, not raised."""
        mock_run.return_value = subprocess.CompletedProcess(
            args=["xe"], returncode=1, stdout="", stderr="UUID_INVALID\n"
        )

        result = CommandRunner().run(["xe", "vm-shutdown", "uuid=x"])

        assert result.exit_code == 1
        assert result.stderr == "UUID_INVALID"

    @patch("poolhalt.core.runner.subprocess.run")
    def test_default_timeout(self, mock_run: MagicMock) -> None:
        """Test the default timeout is passed to subprocess."""
        mock_run.return_value = subprocess.CompletedProcess(
            args=["xe"], returncode=0, stdout="", stderr=""
        )

        CommandRunner(default_timeout=30).run(["xe", "host-list"])

        assert mock_run.call_args.kwargs["timeout"] == 30
        assert mock_run.call_args.kwargs["check"] is False

    @patch("poolhalt.core.runner.subprocess.run")
    def test_explicit_timeout(self, mock_run: MagicMock) -> None:
        """Test a per-call timeout overrides the default."""
        mock_run.return_value = subprocess.CompletedProcess(
            args=["ping"], returncode=0, stdout="", stderr=""
        )

        CommandRunner(default_timeout=30).run(["ping", "-c", "1", "h"], timeout=6)

        assert mock_run.call_args.kwargs["timeout"] == 6

    @patch("poolhalt.core.runner.subprocess.run")
    def test_timeout_folded_into_result(self, mock_run: MagicMock) -> None:
        """Test a timeout becomes a failed result."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="xe", timeout=120)

        result = CommandRunner().run(["xe", "host-list"])

        assert result.success is False
        assert result.exit_code == EXIT_TIMED_OUT
        assert "timed out" in result.stderr

    @patch("poolhalt.core.runner.subprocess.run")
    def test_missing_binary_folded_into_result(self, mock_run: MagicMock) -> None:
        """Test an executable that cannot start becomes a failed result."""
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory", "xe")

        result = CommandRunner().run(["xe", "host-list"])

        assert result.success is False
        assert result.exit_code == EXIT_NOT_STARTED

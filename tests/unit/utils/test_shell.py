"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

from scsync.utils.shell import CommandResult, command_exists, run_interactive, run_query


class TestRunQuery:
    """Tests for run_query function."""

    @patch("scsync.utils.shell.subprocess.run")
    def test_captures_stdout(self, mock_run: MagicMock) -> None:
        """run_query returns stdout and the exit code."""
        mock_run.return_value = MagicMock(stdout="vim\n", returncode=0)

        result = run_query(["pacman", "-Qnq"])

        assert result == CommandResult(stdout="vim\n", returncode=0)
        assert result.success

    @patch("scsync.utils.shell.subprocess.run")
    def test_closes_stdin_and_keeps_stderr(self, mock_run: MagicMock) -> None:
        """stdin is closed, stdout piped and stderr inherited."""
        mock_run.return_value = MagicMock(stdout="", returncode=0)

        run_query(["pacman", "-Qnq"])

        kwargs = mock_run.call_args.kwargs
        assert kwargs["stdin"] is subprocess.DEVNULL
        assert kwargs["stdout"] is subprocess.PIPE
        assert "stderr" not in kwargs
        assert kwargs["check"] is False
        assert "timeout" not in kwargs

    @patch("scsync.utils.shell.subprocess.run")
    def test_nonzero_is_not_success(self, mock_run: MagicMock) -> None:
        """A non-zero exit code is reported, not raised."""
        mock_run.return_value = MagicMock(stdout="", returncode=1)

        assert not run_query(["pacman", "-Qnqdt"]).success


class TestRunInteractive:
    """Tests for run_interactive function."""

    @patch("scsync.utils.shell.subprocess.run")
    def test_returns_exit_code(self, mock_run: MagicMock) -> None:
        """run_interactive returns the subprocess exit code."""
        mock_run.return_value = MagicMock(returncode=1)

        assert run_interactive(["false"]) == 1

    @patch("scsync.utils.shell.subprocess.run")
    def test_does_not_capture_output(self, mock_run: MagicMock) -> None:
        """run_interactive inherits the terminal so prompts reach the user."""
        mock_run.return_value = MagicMock(returncode=0)

        run_interactive(["sudo", "pacman", "-S", "vim"])

        mock_run.assert_called_once_with(["sudo", "pacman", "-S", "vim"], check=False)
        kwargs = mock_run.call_args.kwargs
        assert "capture_output" not in kwargs
        assert "stdout" not in kwargs
        assert "stdin" not in kwargs


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("scsync.utils.shell.shutil.which", return_value="/usr/bin/pacman")
    def test_found(self, _mock_which: MagicMock) -> None:
        """A command in PATH exists."""
        assert command_exists("pacman")

    @patch("scsync.utils.shell.shutil.which", return_value=None)
    def test_missing(self, _mock_which: MagicMock) -> None:
        """A command not in PATH does not exist."""
        assert not command_exists("pacman")

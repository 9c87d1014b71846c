"""Unit tests for runners module.

The subprocess layer is mocked; no command is ever spawned.
"""

from unittest.mock import patch

import pytest
from scsync.core.errors import CommandFailureError, QueryCommandError
from scsync.core.package_set import PackageSet
from scsync.core.runners import (
    SubprocessCommandRunner,
    SubprocessQueryRunner,
    parse_package_lines,
)
from scsync.utils.shell import CommandResult


class TestParsePackageLines:
    """Tests for parse_package_lines function."""

    def test_trims_and_skips_blank_lines(self) -> None:
        """Whitespace is trimmed and blank lines dropped."""
        assert parse_package_lines("  vim \n\ngit\n   \n") == PackageSet(("git", "vim"))

    def test_empty_output(self) -> None:
        """Empty output is an empty set."""
        assert parse_package_lines("") == PackageSet()


class TestSubprocessCommandRunner:
    """Tests for SubprocessCommandRunner class."""

    def test_empty_command_is_noop(self) -> None:
        """Nothing is spawned for an empty command."""
        with patch("scsync.core.runners.run_interactive") as mock_run:
            SubprocessCommandRunner().run([])

        mock_run.assert_not_called()

    def test_success(self) -> None:
        """Exit code 0 succeeds."""
        with patch("scsync.core.runners.run_interactive", return_value=0) as mock_run:
            SubprocessCommandRunner().run(["sudo", "pacman", "-S", "vim"])

        mock_run.assert_called_once_with(["sudo", "pacman", "-S", "vim"])

    def test_nonzero_exit(self) -> None:
        """A non-zero exit raises with the exit code."""
        with (
            patch("scsync.core.runners.run_interactive", return_value=1),
            pytest.raises(CommandFailureError, match=r"exit code 1\): sudo pacman -S vim"),
        ):
            SubprocessCommandRunner().run(["sudo", "pacman", "-S", "vim"])

    def test_spawn_failure(self) -> None:
        """A missing program is reported as a command failure."""
        with (
            patch("scsync.core.runners.run_interactive", side_effect=FileNotFoundError),
            pytest.raises(CommandFailureError, match="Could not spawn 'doas'"),
        ):
            SubprocessCommandRunner().run(["doas", "pacman", "-Syu"])


class TestSubprocessQueryRunner:
    """Tests for SubprocessQueryRunner class."""

    def test_parses_stdout(self) -> None:
        """Output lines become a sorted PackageSet."""
        result = CommandResult(stdout="vim\ngit\n", returncode=0)
        with patch("scsync.core.runners.run_query", return_value=result):
            packages = SubprocessQueryRunner().query(["pacman", "-Qnqe"])

        assert packages == PackageSet(("git", "vim"))

    def test_empty_command(self) -> None:
        """An empty command yields an empty set without spawning."""
        with patch("scsync.core.runners.run_query") as mock_run:
            assert SubprocessQueryRunner().query([]) == PackageSet()

        mock_run.assert_not_called()

    def test_no_match_exit_code(self) -> None:
        """pacman's exit code 1 without output means no match."""
        result = CommandResult(stdout="", returncode=1)
        with patch("scsync.core.runners.run_query", return_value=result):
            assert SubprocessQueryRunner().query(["pacman", "-Qnqdt"]) == PackageSet()

    def test_exit_code_one_with_output_fails(self) -> None:
        """Exit code 1 with output is still a failure."""
        result = CommandResult(stdout="garbage\n", returncode=1)
        with (
            patch("scsync.core.runners.run_query", return_value=result),
            pytest.raises(QueryCommandError),
        ):
            SubprocessQueryRunner().query(["pacman", "-Qnqdt"])

    def test_strict_exit_codes(self) -> None:
        """Without accepted codes every non-zero exit fails."""
        result = CommandResult(stdout="", returncode=1)
        with (
            patch("scsync.core.runners.run_query", return_value=result),
            pytest.raises(QueryCommandError, match="exit code 1"),
        ):
            SubprocessQueryRunner(empty_result_codes=()).query(["pacman", "-Qnq"])

    def test_spawn_failure(self) -> None:
        """A missing program is reported as a query failure."""
        with (
            patch("scsync.core.runners.run_query", side_effect=FileNotFoundError),
            pytest.raises(QueryCommandError, match="Could not spawn 'pacman'"),
        ):
            SubprocessQueryRunner().query(["pacman", "-Qnq"])

    def test_undecodable_output(self) -> None:
        """Output that is not valid text is reported as a query failure."""
        error = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        with (
            patch("scsync.core.runners.run_query", side_effect=error),
            pytest.raises(QueryCommandError, match="not valid UTF-8"),
        ):
            SubprocessQueryRunner().query(["pacman", "-Qnq"])

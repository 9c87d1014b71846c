"""Unit tests for sync command.

The subprocess runners are replaced by the in-memory fakes from conftest.
"""

from unittest.mock import patch

import pytest
from scsync.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()

CONFIG = """
[pacman]
packages = ["vim", "git"]
"""


@pytest.fixture
def fakes(system, command_runner):
    """Patch the sync command to use fake runners on a small system."""
    query_runner = system(
        installed=["git", "nano", "glibc"],
        dependency=["glibc"],
        explicit=["git", "nano"],
        unrequired=["git", "nano"],
    )
    with (
        patch("scsync.cli.commands.sync.SubprocessQueryRunner", return_value=query_runner),
        patch("scsync.cli.commands.sync.SubprocessCommandRunner", return_value=command_runner),
        patch("scsync.cli.types.command_exists", return_value=True),
    ):
        yield query_runner, command_runner


class TestSyncHelp:
    """Tests for sync command help."""

    def test_sync_help_shows_flags(self) -> None:
        """Sync help lists its options."""
        result = runner.invoke(app, ["sync", "--help"])

        assert result.exit_code == 0
        assert "--dry-run" in result.output
        assert "--order" in result.output
        assert "--config" in result.output


class TestSyncDryRun:
    """Tests for dry-run behavior."""

    def test_dry_mode_from_config(self, fakes, config_file) -> None:
        """dry_mode defaults to true: commands are printed, none executed."""
        _, command_runner = fakes

        result = runner.invoke(app, ["sync", "--config", str(config_file(CONFIG))])

        assert result.exit_code == 0, result.output
        assert command_runner.calls == []
        assert "> sudo pacman -Syu" in result.output
        assert "> sudo pacman -S vim" in result.output
        assert "> sudo pacman -Rs nano" in result.output
        assert "Dry-run mode: No changes were made." in result.output

    def test_dry_run_flag_overrides_config(self, fakes, config_file) -> None:
        """--dry-run wins over dry_mode = false."""
        _, command_runner = fakes
        path = config_file("dry_mode = false\n" + CONFIG)

        result = runner.invoke(app, ["sync", "--dry-run", "--config", str(path)])

        assert result.exit_code == 0, result.output
        assert command_runner.calls == []


class TestSyncLive:
    """Tests for sync with changes applied."""

    def test_no_dry_run_executes(self, fakes, config_file) -> None:
        """--no-dry-run runs the commands in phase order."""
        _, command_runner = fakes

        result = runner.invoke(app, ["sync", "--no-dry-run", "--config", str(config_file(CONFIG))])

        assert result.exit_code == 0, result.output
        assert command_runner.calls == [
            ["sudo", "pacman", "-Syu"],
            ["sudo", "pacman", "-S", "vim"],
            ["sudo", "pacman", "-Rs", "nano"],
        ]
        assert "Dry-run" not in result.output

    def test_order_up(self, fakes, config_file) -> None:
        """--order up skips down-sync."""
        _, command_runner = fakes
        path = str(config_file(CONFIG))

        result = runner.invoke(app, ["sync", "--no-dry-run", "--order", "up", "--config", path])

        assert result.exit_code == 0, result.output
        assert ["sudo", "pacman", "-Rs", "nano"] not in command_runner.calls

    def test_in_sync(self, fakes, config_file) -> None:
        """A matching system reports that it is in sync."""
        path = config_file('[pacman]\npackages = ["git", "nano"]\n')

        result = runner.invoke(app, ["sync", "--no-dry-run", "--config", str(path)])

        assert result.exit_code == 0, result.output
        assert "already in sync" in result.output

    def test_command_failure_exits_1(self, fakes, config_file) -> None:
        """A failing command aborts with exit code 1."""
        _, command_runner = fakes
        command_runner.fail_on = "-S"

        result = runner.invoke(app, ["sync", "--no-dry-run", "--config", str(config_file(CONFIG))])

        assert result.exit_code == 1
        assert "Error synchronizing" in result.output
        assert ["sudo", "pacman", "-Rs", "nano"] not in command_runner.calls


class TestSyncErrors:
    """Tests for configuration errors."""

    def test_missing_config(self, tmp_path) -> None:
        """A missing config file exits with code 1 and a hint."""
        result = runner.invoke(app, ["sync", "--config", str(tmp_path / "nope.toml")])

        assert result.exit_code == 1
        assert "Config not found" in result.output

    def test_blacklist_conflict(self, fakes, config_file) -> None:
        """Blacklisted literal packages fail before anything runs."""
        query_runner, command_runner = fakes
        path = config_file('[pacman]\npackages = ["vim"]\nblacklist = ["vim"]\n')

        result = runner.invoke(app, ["sync", "--no-dry-run", "--config", str(path)])

        assert result.exit_code == 1
        assert "blacklisted: vim" in result.output
        assert query_runner.calls == []
        assert command_runner.calls == []

    def test_unknown_key(self, fakes, config_file) -> None:
        """Unknown keys are configuration errors."""
        path = config_file("colour = true\n" + CONFIG)

        result = runner.invoke(app, ["sync", "--config", str(path)])

        assert result.exit_code == 1
        assert "Usage of unknown keys is not allowed." in result.output

    def test_package_manager_missing(self, config_file) -> None:
        """Sync refuses to run without the package manager."""
        with patch("scsync.cli.types.command_exists", return_value=False):
            result = runner.invoke(app, ["sync", "--config", str(config_file(CONFIG))])

        assert result.exit_code == 1
        assert "'pacman' is not available" in result.output

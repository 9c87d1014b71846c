"""Pytest configuration and shared fixtures.

This module contains in-memory runners used across all test modules, so
no test ever spawns the real package manager.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from scsync.core.commands import CommandTable, pacman_command_table
from scsync.core.config import Settings, parse_settings
from scsync.core.errors import CommandFailureError, QueryCommandError
from scsync.core.package_set import PackageSet
from scsync.core.runners import CommandRunner, QueryRunner


class FakeQueryRunner(QueryRunner):
    """Query runner answering from a dict keyed by command tuple.

    Unknown commands return an empty set; commands listed in ``failing``
    raise QueryCommandError.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, ...], PackageSet] = {}
        self.failing: set[tuple[str, ...]] = set()
        self.calls: list[list[str]] = []

    def respond(self, command: tuple[str, ...], names: list[str]) -> None:
        self.responses[command] = PackageSet.from_iterable(names)

    def query(self, command: list[str]) -> PackageSet:
        self.calls.append(list(command))
        key = tuple(command)
        if key in self.failing:
            raise QueryCommandError(f"Command did not succeed (exit code 1): {' '.join(command)}")
        return self.responses.get(key, PackageSet())


class RecordingCommandRunner(CommandRunner):
    """Command runner recording every command it receives.

    A command whose program arguments contain ``fail_on`` raises
    CommandFailureError after being recorded.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[list[str]] = []
        self.fail_on = fail_on

    def run(self, command: list[str]) -> None:
        if not command:
            return
        self.calls.append(list(command))
        if self.fail_on is not None and self.fail_on in command:
            raise CommandFailureError(f"Command did not succeed (exit code 1): {' '.join(command)}")


@pytest.fixture
def commands() -> CommandTable:
    """Default pacman command table."""
    return pacman_command_table()


@pytest.fixture
def query_runner() -> FakeQueryRunner:
    """Empty fake query runner."""
    return FakeQueryRunner()


@pytest.fixture
def command_runner() -> RecordingCommandRunner:
    """Recording command runner that never fails."""
    return RecordingCommandRunner()


@pytest.fixture
def system(query_runner: FakeQueryRunner, commands: CommandTable) -> Callable[..., FakeQueryRunner]:
    """Configure the fake query runner with a system state.

    Example:
        >>> system(installed=["a", "b"], dependency=["b"], explicit=["a"], unrequired=["a"])
    """

    def _configure(
        installed: list[str] | None = None,
        dependency: list[str] | None = None,
        explicit: list[str] | None = None,
        unrequired: list[str] | None = None,
        orphans: list[str] | None = None,
        groups: dict[str, list[str]] | None = None,
    ) -> FakeQueryRunner:
        query_runner.respond(commands.installed_packages_cmd, installed or [])
        query_runner.respond(commands.dependency_packages_cmd, dependency or [])
        query_runner.respond(commands.explicitly_installed_cmd, explicit or [])
        query_runner.respond(commands.explicitly_unrequired_cmd, unrequired or [])
        query_runner.respond(commands.get_orphans_cmd, orphans or [])
        for name, members in (groups or {}).items():
            query_runner.respond((*commands.get_group_packages_cmd, name), members)
        return query_runner

    return _configure


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Build Settings from keyword arguments for the ``[pacman]`` table.

    Global keys are passed through ``global_keys``.
    """

    def _make(global_keys: dict[str, Any] | None = None, **pacman: Any) -> Settings:
        data: dict[str, Any] = {**(global_keys or {}), "pacman": pacman}
        return parse_settings(data, base_dir=tmp_path)

    return _make


@pytest.fixture
def config_file(tmp_path: Path) -> Callable[[str], Path]:
    """Write a config.toml into tmp_path and return its path."""

    def _write(content: str) -> Path:
        path = tmp_path / "config.toml"
        path.write_text(content)
        return path

    return _write

"""Sync execution: reporting and applying diffs.

A run goes through four phases in a fixed order: pre-sync (system update),
up-sync, down-sync and post-sync (orphan removal). Within each diff the
re-flagging command runs before the install/remove command. The first
failing command aborts the run; commands already executed stay applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from scsync.core.commands import CommandTable, ReportMessages, build_command
from scsync.core.config import GlobalSettings
from scsync.core.diff import DownDiff, UpDiff
from scsync.core.runners import CommandRunner, QueryRunner
from scsync.utils.formatting import print_command, print_report

logger = logging.getLogger(__name__)


class SyncOrder(str, Enum):
    """Order in which the up and down phases run."""

    UP_DOWN = "up-down"
    DOWN_UP = "down-up"
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True, slots=True)
class ExecutionOptions:
    """Output and dry-run switches for a run.

    Attributes:
        dry_run: Echo commands but never run them.
        show_cmds: Echo every command before running it.
        show_cmds_in_dry_mode: Echo commands in dry mode even if show_cmds is off.
        show_reports: Print the diff fields before applying them.
    """

    dry_run: bool = True
    show_cmds: bool = True
    show_cmds_in_dry_mode: bool = True
    show_reports: bool = True

    @classmethod
    def from_settings(
        cls, settings: GlobalSettings, dry_run: bool | None = None
    ) -> ExecutionOptions:
        """Build options from the global settings.

        Args:
            settings: Global settings.
            dry_run: Overrides ``dry_mode`` when not None.
        """
        return cls(
            dry_run=settings.dry_mode if dry_run is None else dry_run,
            show_cmds=settings.show_cmds,
            show_cmds_in_dry_mode=settings.show_cmds_in_dry_mode,
            show_reports=settings.show_reports,
        )

    @property
    def echo_commands(self) -> bool:
        """Check if commands are echoed before (not) running them."""
        return self.show_cmds or (self.dry_run and self.show_cmds_in_dry_mode)


class ConsoleCommandRunner(CommandRunner):
    """Echoes commands and honours dry-run before delegating to a runner.

    In dry-run mode the wrapped runner is never invoked.
    """

    def __init__(self, runner: CommandRunner, options: ExecutionOptions) -> None:
        self._runner = runner
        self._options = options

    def run(self, command: list[str]) -> None:
        if not command:
            return
        if self._options.echo_commands:
            print_command(command)
        if self._options.dry_run:
            logger.debug("Dry run, not executing: %s", " ".join(command))
            return
        self._runner.run(command)


def up_commands(diff: UpDiff, commands: CommandTable) -> list[list[str]]:
    """Commands applying an up diff: mark explicit first, then install.

    Empty diff fields produce no command.
    """
    cmds = [
        build_command(commands.as_explicit_cmd, diff.to_mark_explicit.names),
        build_command(commands.install_cmd, diff.to_install.names),
    ]
    return [cmd for cmd in cmds if cmd]


def down_commands(diff: DownDiff, commands: CommandTable) -> list[list[str]]:
    """Commands applying a down diff: mark as dependency first, then remove.

    Empty diff fields produce no command.
    """
    cmds = [
        build_command(commands.as_dependency_cmd, diff.to_mark_dependency.names),
        build_command(commands.remove_cmd, diff.to_remove.names),
    ]
    return [cmd for cmd in cmds if cmd]


def apply_up_diff(diff: UpDiff, runner: CommandRunner, commands: CommandTable) -> None:
    """Run the commands of an up diff, stopping at the first failure.

    Raises:
        CommandFailureError: If a command fails.
    """
    for cmd in up_commands(diff, commands):
        runner.run(cmd)


def apply_down_diff(diff: DownDiff, runner: CommandRunner, commands: CommandTable) -> None:
    """Run the commands of a down diff, stopping at the first failure.

    Raises:
        CommandFailureError: If a command fails.
    """
    for cmd in down_commands(diff, commands):
        runner.run(cmd)


class SyncExecutor:
    """Reports and applies diffs in the fixed phase order.

    Example:
        >>> executor = SyncExecutor(commands, SubprocessCommandRunner(), SubprocessQueryRunner())
        >>> executor.run(up_diff, down_diff)
    """

    def __init__(
        self,
        commands: CommandTable,
        command_runner: CommandRunner,
        query_runner: QueryRunner,
        options: ExecutionOptions | None = None,
        messages: ReportMessages | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            commands: Command templates.
            command_runner: Runner for mutating commands. Never invoked in dry-run mode.
            query_runner: Runner for the orphan query.
            options: Output and dry-run switches.
            messages: Report prefixes.
        """
        self.commands = commands
        self.options = options or ExecutionOptions()
        self.messages = messages or ReportMessages()
        self._runner = ConsoleCommandRunner(command_runner, self.options)
        self._query_runner = query_runner

    def pre_sync(self) -> None:
        """Refresh package databases and upgrade the system."""
        self._runner.run(list(self.commands.update_cmd))

    def report_up(self, diff: UpDiff) -> None:
        """Print the non-empty fields of an up diff."""
        if not self.options.show_reports:
            return
        print_report(self.messages.to_install, diff.to_install.to_list())
        print_report(self.messages.to_mark_explicit, diff.to_mark_explicit.to_list())

    def report_down(self, diff: DownDiff) -> None:
        """Print the non-empty fields of a down diff."""
        if not self.options.show_reports:
            return
        print_report(self.messages.to_remove, diff.to_remove.to_list())
        print_report(self.messages.to_mark_dependency, diff.to_mark_dependency.to_list())

    def sync_up(self, diff: UpDiff) -> None:
        """Report and apply an up diff."""
        self.report_up(diff)
        apply_up_diff(diff, self._runner, self.commands)

    def sync_down(self, diff: DownDiff) -> None:
        """Report and apply a down diff."""
        self.report_down(diff)
        apply_down_diff(diff, self._runner, self.commands)

    def post_sync(self) -> None:
        """Remove dependency packages that nothing requires anymore.

        Orphans are queried after the other phases ran, so packages demoted
        or freed during this run are included.
        """
        orphans = self._query_runner.query(list(self.commands.get_orphans_cmd))
        if orphans:
            logger.info("Removing %d orphaned package(s)", len(orphans))
        self._runner.run(build_command(self.commands.remove_cmd, orphans.names))

    def run(self, up: UpDiff, down: DownDiff, order: SyncOrder = SyncOrder.UP_DOWN) -> None:
        """Run all phases.

        Args:
            up: Up diff to apply.
            down: Down diff to apply.
            order: Which of the up/down phases run, and in which order.

        Raises:
            CommandFailureError: If any command fails; later phases are skipped.
            QueryCommandError: If the orphan query fails.
        """
        self.pre_sync()
        if order in (SyncOrder.UP_DOWN, SyncOrder.UP):
            self.sync_up(up)
        if order in (SyncOrder.UP_DOWN, SyncOrder.DOWN_UP, SyncOrder.DOWN):
            self.sync_down(down)
        if order == SyncOrder.DOWN_UP:
            self.sync_up(up)
        self.post_sync()

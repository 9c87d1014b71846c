"""Command and query runners.

The reconciliation engine talks to the package manager only through these
two interfaces: a command runner for mutations and a query runner for
package listings. Subprocess-backed implementations are provided; tests
substitute in-memory fakes.
"""

import logging
from abc import ABC, abstractmethod

from scsync.core.errors import CommandFailureError, QueryCommandError
from scsync.core.package_set import PackageSet
from scsync.utils.shell import run_interactive, run_query

logger = logging.getLogger(__name__)


class CommandRunner(ABC):
    """Executes mutating package manager commands.

    Example:
        >>> runner = SubprocessCommandRunner()
        >>> runner.run(["sudo", "pacman", "-S", "htop"])
    """

    @abstractmethod
    def run(self, command: list[str]) -> None:
        """Execute a command vector.

        An empty vector is a no-op and always succeeds.

        Args:
            command: Program name followed by its arguments.

        Raises:
            CommandFailureError: If the command exits non-zero or cannot be spawned.
        """


class QueryRunner(ABC):
    """Executes package listing commands."""

    @abstractmethod
    def query(self, command: list[str]) -> PackageSet:
        """Execute a command vector and collect package names from its output.

        An empty vector yields an empty set without spawning anything.

        Args:
            command: Program name followed by its arguments.

        Returns:
            Sorted, deduplicated package names, one per non-empty output line.

        Raises:
            QueryCommandError: If the command exits non-zero or cannot be spawned.
        """


def parse_package_lines(output: str) -> PackageSet:
    """Turn line-oriented command output into a PackageSet.

    Each non-empty line, after trimming, is one package name.
    """
    names = (line.strip() for line in output.splitlines())
    return PackageSet.from_iterable((n for n in names if n), warn_on_duplicates=False)


class SubprocessCommandRunner(CommandRunner):
    """Runs commands as child processes attached to the current terminal."""

    def run(self, command: list[str]) -> None:
        if not command:
            return

        logger.debug("Running command: %s", " ".join(command))
        try:
            returncode = run_interactive(command)
        except OSError as e:
            msg = f"Could not spawn '{command[0]}'"
            raise CommandFailureError(msg) from e

        if returncode != 0:
            msg = f"Command did not succeed (exit code {returncode}): {' '.join(command)}"
            raise CommandFailureError(msg)


class SubprocessQueryRunner(QueryRunner):
    """Runs query commands as child processes and parses their stdout.

    pacman exits with status 1 and prints nothing when a filtered query
    matches no package (e.g. ``pacman -Qdtq`` on a system without orphans).
    Exit codes listed in ``empty_result_codes`` are therefore accepted as an
    empty result, but only when stdout is empty.

    Attributes:
        empty_result_codes: Non-zero exit codes meaning "no match".
    """

    def __init__(self, empty_result_codes: tuple[int, ...] = (1,)) -> None:
        self.empty_result_codes = empty_result_codes

    def query(self, command: list[str]) -> PackageSet:
        if not command:
            return PackageSet()

        logger.debug("Running query: %s", " ".join(command))
        try:
            result = run_query(command)
        except OSError as e:
            msg = f"Could not spawn '{command[0]}'"
            raise QueryCommandError(msg) from e
        except UnicodeDecodeError as e:
            msg = f"Output of '{' '.join(command)}' is not valid UTF-8"
            raise QueryCommandError(msg) from e

        if result.returncode in self.empty_result_codes and not result.stdout.strip():
            logger.debug("Query matched nothing (exit code %d)", result.returncode)
            return PackageSet()

        if not result.success:
            msg = f"Command did not succeed (exit code {result.returncode}): {' '.join(command)}"
            raise QueryCommandError(msg)

        packages = parse_package_lines(result.stdout)
        logger.debug("Query returned %d package(s)", len(packages))
        return packages

"""Shell execution utilities.

Provides subprocess execution for package queries (stdout captured) and
package mutations (terminal inherited so the package manager can prompt).
"""

import shutil
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command. Empty if not captured.
        returncode: Exit code of the command.
    """

    stdout: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def run_query(args: list[str]) -> CommandResult:
    """Execute a command and capture its standard output.

    Standard input is closed and standard error is passed through to the
    operator. There is no timeout: a hung package manager hangs the caller.

    Args:
        args: Command and arguments to execute.

    Returns:
        CommandResult with stdout and returncode.

    Raises:
        FileNotFoundError: If command executable is not found.
        OSError: If the command cannot be executed.
        UnicodeDecodeError: If stdout is not valid text in the locale encoding.
    """
    result = subprocess.run(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        text=True,
        check=False,
    )
    return CommandResult(stdout=result.stdout, returncode=result.returncode)


def run_interactive(args: list[str]) -> int:
    """Execute a command interactively, inheriting the terminal.

    Nothing is captured, so confirmation prompts of the package manager
    reach the user directly.

    Args:
        args: Command and arguments to execute.

    Returns:
        Exit code of the command.

    Raises:
        FileNotFoundError: If command executable is not found.
        OSError: If command cannot be executed.
    """
    result = subprocess.run(args, check=False)
    return result.returncode


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None

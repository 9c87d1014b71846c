"""Command templates for the package manager.

The reconciliation algorithm is the same for every three-state package
manager (installed / dependency / explicit); only the command vectors
differ. A CommandTable holds all of them, defaulting to pacman.
"""

from dataclasses import dataclass


def build_command(base: tuple[str, ...], packages: tuple[str, ...]) -> list[str]:
    """Append package names to a command template.

    Returns an empty vector (a no-op) when either the template or the
    package list is empty, so no command without operands is ever emitted.

    Args:
        base: Command template, e.g. ``("sudo", "pacman", "-S")``.
        packages: Package names to append.

    Returns:
        The full command vector, or an empty list.
    """
    if not base or not packages:
        return []
    return [*base, *packages]


@dataclass(frozen=True, slots=True)
class CommandTable:
    """Command vectors used to query and mutate the package database.

    Attributes:
        installed_packages_cmd: Lists every installed package.
        dependency_packages_cmd: Lists packages installed as dependencies.
        explicitly_installed_cmd: Lists explicitly installed packages.
        explicitly_unrequired_cmd: Lists explicit packages nothing depends on.
        as_explicit_cmd: Marks packages as explicitly installed.
        install_cmd: Installs packages.
        as_dependency_cmd: Marks packages as dependencies.
        remove_cmd: Removes packages.
        update_cmd: Refreshes databases and upgrades the system.
        get_orphans_cmd: Lists unrequired dependency packages.
        get_group_packages_cmd: Lists members of the group appended to it.
    """

    installed_packages_cmd: tuple[str, ...]
    dependency_packages_cmd: tuple[str, ...]
    explicitly_installed_cmd: tuple[str, ...]
    explicitly_unrequired_cmd: tuple[str, ...]
    as_explicit_cmd: tuple[str, ...]
    install_cmd: tuple[str, ...]
    as_dependency_cmd: tuple[str, ...]
    remove_cmd: tuple[str, ...]
    update_cmd: tuple[str, ...]
    get_orphans_cmd: tuple[str, ...]
    get_group_packages_cmd: tuple[str, ...]


def pacman_command_table(sudo_cmd: str = "sudo") -> CommandTable:
    """Default command table for pacman.

    Args:
        sudo_cmd: Privilege escalation prefix for mutating commands.
            An empty string runs them without a prefix.

    Returns:
        CommandTable with pacman defaults.
    """
    sudo = (sudo_cmd,) if sudo_cmd else ()
    return CommandTable(
        installed_packages_cmd=("pacman", "-Qnq"),
        dependency_packages_cmd=("pacman", "-Qnqd"),
        explicitly_installed_cmd=("pacman", "-Qnqe"),
        explicitly_unrequired_cmd=("pacman", "-Qnqet"),
        as_explicit_cmd=(*sudo, "pacman", "-D", "--asexplicit"),
        install_cmd=(*sudo, "pacman", "-S"),
        as_dependency_cmd=(*sudo, "pacman", "-D", "--asdeps"),
        remove_cmd=(*sudo, "pacman", "-Rs"),
        update_cmd=(*sudo, "pacman", "-Syu"),
        get_orphans_cmd=("pacman", "-Qnqdt"),
        get_group_packages_cmd=("pacman", "-Sqg"),
    )


@dataclass(frozen=True, slots=True)
class ReportMessages:
    """Prefixes printed before each non-empty diff field."""

    to_install: str = "Packages to install:"
    to_mark_explicit: str = "Packages to mark as explicit:"
    to_remove: str = "Packages to remove:"
    to_mark_dependency: str = "Packages to mark as dependencies:"


DEFAULT_REPORT_MESSAGES = ReportMessages()

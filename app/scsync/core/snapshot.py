"""Point-in-time capture of the package database.

A snapshot is taken once per run, before any command executes. Up and
down diffs are both computed from it; nothing is re-queried mid-run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scsync.core.commands import CommandTable
from scsync.core.package_set import PackageSet
from scsync.core.runners import QueryRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SystemSnapshot:
    """Package sets reported by the package manager.

    Attributes:
        installed: Every installed package.
        dependency_installed: Packages installed as dependencies.
        explicitly_installed: Packages installed explicitly.
        explicitly_unrequired: Explicit packages no other package requires.
    """

    installed: PackageSet = PackageSet()
    dependency_installed: PackageSet = PackageSet()
    explicitly_installed: PackageSet = PackageSet()
    explicitly_unrequired: PackageSet = PackageSet()


def capture_snapshot(query_runner: QueryRunner, commands: CommandTable) -> SystemSnapshot:
    """Query the package manager for the four package sets.

    The queries are independent of each other. Any failure aborts the
    capture.

    Args:
        query_runner: Runner executing the query commands.
        commands: Command table providing the query vectors.

    Returns:
        The captured snapshot.

    Raises:
        QueryCommandError: If any query fails.
    """
    snapshot = SystemSnapshot(
        installed=query_runner.query(list(commands.installed_packages_cmd)),
        dependency_installed=query_runner.query(list(commands.dependency_packages_cmd)),
        explicitly_installed=query_runner.query(list(commands.explicitly_installed_cmd)),
        explicitly_unrequired=query_runner.query(list(commands.explicitly_unrequired_cmd)),
    )
    logger.debug(
        "Snapshot: %d installed, %d dependencies, %d explicit, %d explicit unrequired",
        len(snapshot.installed),
        len(snapshot.dependency_installed),
        len(snapshot.explicitly_installed),
        len(snapshot.explicitly_unrequired),
    )
    return snapshot

"""Package group expansion.

A group is a package-manager-defined bundle of packages. Groups are
expanded on demand through the query runner, optionally minus a list of
excluded members.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from scsync.core.errors import GroupQueryError, QueryCommandError
from scsync.core.package_set import PackageSet, compare_lists_only_in_first
from scsync.core.runners import QueryRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GroupReference:
    """A reference to a package group in the declared state.

    Attributes:
        name: Group name as known to the package manager.
        exclude: Members to leave out of the expansion.
    """

    name: str
    exclude: tuple[str, ...] = ()


class GroupResolver:
    """Expands group names into their member packages.

    Example:
        >>> resolver = GroupResolver(SubprocessQueryRunner(), ("pacman", "-Sqg"))
        >>> resolver.expand("base-devel", exclude="gcc")
    """

    def __init__(self, query_runner: QueryRunner, group_cmd: tuple[str, ...]) -> None:
        """Initialize the resolver.

        Args:
            query_runner: Runner used to list group members.
            group_cmd: Command template; the group name is appended to it.
        """
        self._query_runner = query_runner
        self._group_cmd = group_cmd

    def expand(self, name: str, exclude: str | Iterable[str] | None = None) -> PackageSet:
        """List the members of a group.

        Args:
            name: Group name.
            exclude: A single package name or several names to filter out.

        Returns:
            Sorted member packages minus the excluded ones.

        Raises:
            GroupQueryError: If no group command is configured, the query fails
                or the group has no members.
        """
        if not self._group_cmd:
            msg = f"No command configured to list packages of group '{name}'."
            raise GroupQueryError(msg)

        try:
            members = self._query_runner.query([*self._group_cmd, name])
        except QueryCommandError as e:
            msg = f"Packages in group '{name}' could not be found."
            raise GroupQueryError(msg) from e

        if not members:
            msg = f"Packages in group '{name}' could not be found."
            raise GroupQueryError(msg)

        if exclude is None:
            return members

        excluded = sorted([exclude] if isinstance(exclude, str) else exclude)
        logger.debug("Excluding %s from group %s", ", ".join(excluded), name)
        return PackageSet(tuple(compare_lists_only_in_first(members, excluded)))

    def resolve(self, group: GroupReference) -> PackageSet:
        """Expand a GroupReference."""
        return self.expand(group.name, group.exclude or None)

"""Declared state resolution.

Merges the literal package list, expanded groups and the blacklist into
the final set of packages that should be explicitly installed.

Literal packages are a promise made by the user, so a literal package that
is also blacklisted is a hard error. Group members are incidental, so the
blacklist silently removes them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scsync.core.config import Settings
from scsync.core.errors import BlacklistConflictError
from scsync.core.groups import GroupReference, GroupResolver
from scsync.core.package_file import load_package_file
from scsync.core.package_set import (
    PackageSet,
    cleanup_package_list,
    compare_lists_only_in_first,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DeclaredConfig:
    """What the configuration declares, before any group is expanded.

    Attributes:
        packages: Literal package names.
        groups: Groups whose members should be installed.
        blacklist: Names that must never end up in the declared state.
    """

    packages: tuple[str, ...] = ()
    groups: tuple[GroupReference, ...] = ()
    blacklist: tuple[str, ...] = ()


def load_declared_config(settings: Settings) -> DeclaredConfig:
    """Collect the declared configuration from the settings and package file.

    The ``[pacman]`` lists and the optional package file are concatenated;
    the blacklist only comes from the settings.

    Raises:
        ConfigError: If the package file cannot be read.
        TemplateRenderError: If a group() macro is malformed.
    """
    packages = list(settings.pacman.packages)
    groups = [GroupReference(name=name) for name in settings.pacman.groups]

    package_file = settings.package_file
    if package_file is not None:
        parsed = load_package_file(package_file, settings.global_settings.comment_string)
        logger.debug(
            "Read %d package(s) and %d group(s) from %s",
            len(parsed.packages),
            len(parsed.groups),
            package_file,
        )
        packages.extend(parsed.packages)
        groups.extend(parsed.groups)

    return DeclaredConfig(
        packages=tuple(packages),
        groups=tuple(groups),
        blacklist=settings.pacman.blacklist,
    )


def find_blacklist_conflicts(
    packages: tuple[str, ...], blacklist: tuple[str, ...]
) -> tuple[str, ...]:
    """Return the sorted names present in both lists."""
    return tuple(sorted(set(packages) & set(blacklist)))


class ConfigStateResolver:
    """Resolves a DeclaredConfig into the declared PackageSet."""

    def __init__(self, group_resolver: GroupResolver, warn_on_duplicates: bool = True) -> None:
        """Initialize the resolver.

        Args:
            group_resolver: Used to expand group references.
            warn_on_duplicates: Warn about names declared more than once.
        """
        self._group_resolver = group_resolver
        self._warn_on_duplicates = warn_on_duplicates

    def resolve(self, config: DeclaredConfig) -> PackageSet:
        """Compute the declared state.

        The blacklist conflict check runs before any group is expanded, so
        a conflicting configuration fails without querying anything.

        Args:
            config: The declared configuration.

        Returns:
            Sorted, deduplicated declared packages.

        Raises:
            BlacklistConflictError: If literal packages are blacklisted.
            GroupQueryError: If a group cannot be expanded.
        """
        conflicts = find_blacklist_conflicts(config.packages, config.blacklist)
        if conflicts:
            raise BlacklistConflictError(conflicts)

        working = list(config.packages)

        if config.groups:
            for group in config.groups:
                members = self._group_resolver.resolve(group)
                logger.debug("Group %s expanded to %d package(s)", group.name, len(members))
                working.extend(members)
            working = compare_lists_only_in_first(working, sorted(config.blacklist))

        return PackageSet(tuple(cleanup_package_list(working, self._warn_on_duplicates)))

"""Diff engine for comparing the declared state with a system snapshot.

Both functions are pure. The up diff brings declared packages in; the down
diff takes undeclared explicit packages out, demoting instead of removing
those that other packages still require.
"""

from __future__ import annotations

from dataclasses import dataclass

from scsync.core.package_set import PackageSet
from scsync.core.snapshot import SystemSnapshot


@dataclass(frozen=True, slots=True)
class UpDiff:
    """Changes that add declared packages.

    Attributes:
        to_install: Declared packages that are not installed at all.
        to_mark_explicit: Declared packages installed only as dependencies.
    """

    to_install: PackageSet = PackageSet()
    to_mark_explicit: PackageSet = PackageSet()

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to do."""
        return not (self.to_install or self.to_mark_explicit)

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to dictionary for JSON serialization."""
        return {
            "to_install": self.to_install.to_list(),
            "to_mark_explicit": self.to_mark_explicit.to_list(),
        }


@dataclass(frozen=True, slots=True)
class DownDiff:
    """Changes that take undeclared packages out.

    Attributes:
        to_remove: Undeclared explicit packages nothing depends on.
        to_mark_dependency: Undeclared explicit packages something still needs.
    """

    to_remove: PackageSet = PackageSet()
    to_mark_dependency: PackageSet = PackageSet()

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to do."""
        return not (self.to_remove or self.to_mark_dependency)

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to dictionary for JSON serialization."""
        return {
            "to_remove": self.to_remove.to_list(),
            "to_mark_dependency": self.to_mark_dependency.to_list(),
        }


def compute_up_diff(declared: PackageSet, snapshot: SystemSnapshot) -> UpDiff:
    """Compute which declared packages must be installed or promoted.

    Args:
        declared: The resolved declared state.
        snapshot: The system snapshot.

    Returns:
        The up diff.
    """
    return UpDiff(
        to_install=declared.difference(snapshot.installed),
        to_mark_explicit=declared.intersection(snapshot.dependency_installed),
    )


def compute_down_diff(declared: PackageSet, snapshot: SystemSnapshot) -> DownDiff:
    """Compute which undeclared explicit packages must be removed or demoted.

    Explicit packages that another package still requires are demoted to
    dependencies rather than removed.

    Args:
        declared: The resolved declared state.
        snapshot: The system snapshot.

    Returns:
        The down diff.
    """
    explicitly_required = snapshot.explicitly_installed.difference(snapshot.explicitly_unrequired)
    return DownDiff(
        to_remove=snapshot.explicitly_unrequired.difference(declared),
        to_mark_dependency=explicitly_required.difference(declared),
    )

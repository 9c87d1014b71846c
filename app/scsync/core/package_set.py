"""Sorted, duplicate-free package name sets.

Package names are opaque, case-sensitive strings. A PackageSet keeps them
sorted by code point (which matches byte-wise UTF-8 order) so membership
tests and set operations can use binary search.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def _contains_sorted(items: Sequence[str], name: str) -> bool:
    """Binary search for name in a sorted sequence."""
    idx = bisect_left(items, name)
    return idx < len(items) and items[idx] == name


def compare_lists_only_in_first(first: Iterable[str], second: Sequence[str]) -> list[str]:
    """Return the items of first that are not in second.

    Args:
        first: Items to filter; their order is preserved.
        second: Sorted sequence to search in.

    Returns:
        Items present only in first.
    """
    return [item for item in first if not _contains_sorted(second, item)]


def compare_lists_in_both(first: Iterable[str], second: Sequence[str]) -> list[str]:
    """Return the items of first that are also in second.

    Args:
        first: Items to filter; their order is preserved.
        second: Sorted sequence to search in.

    Returns:
        Items present in both.
    """
    return [item for item in first if _contains_sorted(second, item)]


def cleanup_package_list(items: Iterable[str], warn_on_duplicates: bool = True) -> list[str]:
    """Sort items and remove duplicates, reporting each duplicated name once.

    Duplicates are not an error: they are dropped and, if enabled, a single
    warning with the repeat count is logged per name.

    Args:
        items: Package names in any order.
        warn_on_duplicates: Log a warning for every duplicated name.

    Returns:
        Sorted list without duplicates.
    """
    ordered = sorted(items)
    result: list[str] = []
    i = 0
    while i < len(ordered):
        name = ordered[i]
        count = 1
        while i + count < len(ordered) and ordered[i + count] == name:
            count += 1
        if count > 1 and warn_on_duplicates:
            logger.warning("Duplicate element detected: %s (x%d)", name, count)
        result.append(name)
        i += count
    return result


@dataclass(frozen=True, slots=True)
class PackageSet:
    """Immutable, sorted, duplicate-free sequence of package names.

    Use :meth:`from_iterable` to build one from arbitrary input; the plain
    constructor only accepts names that already satisfy the invariant.

    Example:
        >>> declared = PackageSet.from_iterable(["vim", "git", "vim"])
        >>> declared.names
        ('git', 'vim')
        >>> "git" in declared
        True
    """

    names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate that names are strictly increasing."""
        for prev, cur in zip(self.names, self.names[1:]):
            if not prev < cur:
                msg = f"PackageSet names must be sorted and unique (got {prev!r} before {cur!r})"
                raise ValueError(msg)

    @classmethod
    def from_iterable(cls, items: Iterable[str], warn_on_duplicates: bool = True) -> PackageSet:
        """Build a PackageSet from names in any order."""
        return cls(tuple(cleanup_package_list(items, warn_on_duplicates)))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _contains_sorted(self.names, name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __bool__(self) -> bool:
        return bool(self.names)

    def difference(self, other: PackageSet) -> PackageSet:
        """Names in this set but not in other."""
        return PackageSet(tuple(compare_lists_only_in_first(self.names, other.names)))

    def intersection(self, other: PackageSet) -> PackageSet:
        """Names in both sets."""
        return PackageSet(tuple(compare_lists_in_both(self.names, other.names)))

    def union(self, other: PackageSet) -> PackageSet:
        """Names in either set."""
        return PackageSet.from_iterable([*self.names, *other.names], warn_on_duplicates=False)

    def to_list(self) -> list[str]:
        """Return the names as a new list."""
        return list(self.names)

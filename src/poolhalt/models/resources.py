"""Resource identifier sets returned by enumeration queries."""

from __future__ import annotations

import re
from collections.abc import Iterable

_SEPARATORS = re.compile(r"[,;\s]+")


class ResourceSet(tuple[str, ...]):
    """Ordered, de-duplicated, immutable collection of resource UUIDs.

    A ResourceSet is captured for one query and never updated; callers
    re-query to observe new state.

    Example:
        >>> ResourceSet(["a", "b", "a", ""])
        ('a', 'b')
        >>> ResourceSet.from_minimal("a,b,c")
        ('a', 'b', 'c')
    """

    def __new__(cls, ids: Iterable[str] = ()) -> ResourceSet:
        return super().__new__(cls, dict.fromkeys(i for i in ids if i))

    @classmethod
    def from_minimal(cls, output: str) -> ResourceSet:
        """Parse the comma-separated output of an ``xe ... --minimal`` call.

        Args:
            output: Raw stdout from xe.

        Returns:
            ResourceSet of the listed UUIDs, empty for blank output.
        """
        return cls(part.strip() for part in _SEPARATORS.split(output.strip()))

    def without(self, other: Iterable[str]) -> ResourceSet:
        """Return a new set with the given identifiers removed, order kept."""
        excluded = set(other)
        return ResourceSet(i for i in self if i not in excluded)

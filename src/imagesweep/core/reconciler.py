"""Set difference between the disk inventory and the referenced paths."""

from __future__ import annotations

from collections.abc import Iterable


def reconcile(disk: Iterable[str], referenced: Iterable[str]) -> list[str]:
    """Return the inventoried paths nothing references, sorted and de-duplicated.

    Comparison is exact and case-sensitive; both sides must already be normalized.
    """

    return sorted(set(disk).difference(referenced))

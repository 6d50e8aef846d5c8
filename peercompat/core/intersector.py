"""Intersection of per-consumer compatible-version sets."""

from __future__ import annotations

from typing import List, Sequence

__all__ = ["intersect_versions"]


def intersect_versions(version_sets: Sequence[Sequence[str]]) -> List[str]:
    """Intersect compatible-version sets, skipping sets that would empty it.

    The sets are folded left, starting from the first one.  At each step
    the running result keeps only versions also present in the current
    set (exact string match).  When a step would leave nothing, that set
    is ignored and the previous result carries on, so one consumer that
    disagrees with everyone cannot veto the whole answer.

    The order of the first set is preserved.  An empty ``version_sets``
    yields an empty list.

    Examples:
        >>> intersect_versions([["1.0.0", "2.0.0"], ["2.0.0", "3.0.0"]])
        ['2.0.0']
        >>> intersect_versions([["1.0.0", "2.0.0"], [], ["2.0.0"]])
        ['2.0.0']
        >>> intersect_versions([["1.0.0"], ["3.0.0"]])
        ['1.0.0']
    """
    if not version_sets:
        return []

    result = list(version_sets[0])
    for current in version_sets[1:]:
        members = set(current)
        narrowed = [version for version in result if version in members]
        if narrowed:
            result = narrowed

    return result

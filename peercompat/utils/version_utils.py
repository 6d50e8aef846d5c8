"""
Version ordering utilities for peercompat.

Versions returned by the compatibility service are npm-style semantic
versions (``1.2.3``, ``2.0.0-rc.1``, ``19.0.0-canary-e1ad4aa36-20240131``).
They are ordered by semantic-version precedence with
:mod:`semantic_version`: a pre-release ranks below its release, pre-release
identifiers compare dot by dot (numeric below alphanumeric, shorter list
first) and build metadata is ignored.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple, Union

from semantic_version import Version

SortKey = Tuple[int, Union[Version, str]]


def parse_version(value: str) -> Optional[Version]:
    """Parse a semantic version, returning ``None`` if it is not one.

    A leading ``v`` or ``=`` (as npm tolerates) is ignored, and so is
    build metadata after ``+``.

    Examples:
        >>> parse_version("1.2.3")
        Version('1.2.3')
        >>> parse_version("1.0.0+build.5")
        Version('1.0.0')
        >>> parse_version("latest") is None
        True
    """
    candidate = value.strip().lstrip("=").lstrip("vV")
    candidate = candidate.split("+", 1)[0]
    try:
        return Version(candidate)
    except ValueError:
        return None


def version_sort_key(value: str) -> SortKey:
    """Return a key ordering versions by semantic-version precedence.

    Unparseable strings sort below every valid version and are ordered
    lexically among themselves, so sorting never fails.
    """
    parsed = parse_version(value)
    if parsed is None:
        return (0, value)
    return (1, parsed)


def sort_versions(versions: Iterable[str], *, reverse: bool = False) -> List[str]:
    """Return a sorted copy of ``versions``.

    Examples:
        >>> sort_versions(["1.0.0", "1.2.0", "1.1.5"])
        ['1.0.0', '1.1.5', '1.2.0']
        >>> sort_versions(["1.0.0", "1.0.0-0"])
        ['1.0.0-0', '1.0.0']
    """
    return sorted(versions, key=version_sort_key, reverse=reverse)

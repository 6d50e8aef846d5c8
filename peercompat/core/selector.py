"""Selection of the oldest/latest bounds of a compatible-version set."""

from __future__ import annotations

from typing import Sequence

from peercompat.models import CompatibleRange
from peercompat.utils.version_utils import sort_versions

__all__ = ["select_range", "adopted_specifier"]


def select_range(versions: Sequence[str]) -> CompatibleRange:
    """Return the lowest and highest of ``versions`` by semver precedence.

    Raises:
        ValueError: ``versions`` is empty.

    Example:
        >>> select_range(["1.0.0", "1.2.0", "1.1.5"])
        CompatibleRange(oldest='1.0.0', latest='1.2.0')
    """
    if not versions:
        raise ValueError("Cannot select a range from an empty version set")

    ordered = sort_versions(versions)
    return CompatibleRange(oldest=ordered[0], latest=ordered[-1])


def adopted_specifier(compatible: CompatibleRange) -> str:
    """Return the tilde specifier a resolved target is adopted with."""
    return compatible.adopted_specifier

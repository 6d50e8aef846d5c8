"""
Unified data model exports for peercompat.

Example:
    >>> from peercompat.models import Package, CompatibleRange, ResolvedTarget
"""

from __future__ import annotations

from peercompat.models.package import Package, packages_from_mapping
from peercompat.models.compatibility import CompatibleRange, ResolvedTarget

__all__ = [
    "Package",
    "packages_from_mapping",
    "CompatibleRange",
    "ResolvedTarget",
]

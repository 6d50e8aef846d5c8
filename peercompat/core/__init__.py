"""
Core functionality exports for peercompat.

    from peercompat.core import BatchResolver, CompatibilityClient
"""

from __future__ import annotations

from peercompat.core.selector import select_range
from peercompat.core.intersector import intersect_versions
from peercompat.core.client import CompatibilityClient, parse_versions
from peercompat.core.manifest import read_manifest, write_resolved
from peercompat.core.resolver import BatchResolver, ResolutionReport, resolve_all
from peercompat.core.cache import DEFAULT_CACHE, CompatibilityCache, make_key

__all__ = [
    "CompatibilityCache",
    "DEFAULT_CACHE",
    "make_key",
    "CompatibilityClient",
    "parse_versions",
    "intersect_versions",
    "select_range",
    "BatchResolver",
    "ResolutionReport",
    "resolve_all",
    "read_manifest",
    "write_resolved",
]

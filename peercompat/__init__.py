"""
peercompat: find package versions compatible with what you already declare.

Given the packages a project declares and a list of packages to add,
peercompat asks a peer-compatibility service which versions of each new
package work with every declared one, intersects the answers and reports
the compatible version range.

Example::

    import asyncio
    from peercompat import BatchResolver, CompatibilityClient, HTTPClient

    async def main():
        async with HTTPClient() as http:
            resolver = BatchResolver(CompatibilityClient(http))
            return await resolver.resolve_all({"react": "18.2.0"}, ["sass"])

    asyncio.run(main())
"""

from __future__ import annotations

from peercompat.__version__ import __version__
from peercompat.utils.http import HTTPClient
from peercompat.core import (
    BatchResolver,
    CompatibilityCache,
    CompatibilityClient,
    ResolutionReport,
    intersect_versions,
    select_range,
)
from peercompat.models import CompatibleRange, Package, ResolvedTarget

__author__ = "peercompat Contributors"
__license__ = "Apache-2.0"
__description__ = "Find package versions compatible with your declared dependencies."

__all__ = [
    "__version__",
    "HTTPClient",
    "BatchResolver",
    "CompatibilityCache",
    "CompatibilityClient",
    "ResolutionReport",
    "intersect_versions",
    "select_range",
    "Package",
    "CompatibleRange",
    "ResolvedTarget",
]

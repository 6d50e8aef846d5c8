"""In-memory cache of compatibility lookups.

Keys have the form ``"<consumer>@<specifier>--<target>"`` (see
:meth:`Package.cache_key_for`) and values are the version lists the
compatibility service returned for that pair.  Entries never expire and
are never persisted; the cache lives for one process run.

Values are stored as tuples and handed out as fresh lists, so a caller
mutating a returned list cannot alter what later callers read.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from peercompat.models import Package
from peercompat.utils.logger import get_logger

logger = get_logger("cache")

__all__ = ["CompatibilityCache", "DEFAULT_CACHE", "make_key"]


def make_key(consumer: Package, target_name: str) -> str:
    """Return the cache key for a (consumer, target) lookup."""
    return consumer.cache_key_for(target_name)


class CompatibilityCache:
    """Unbounded mapping from lookup key to compatible versions.

    Reads and writes are synchronous, so under asyncio they never
    interleave with each other.  Writing an existing key replaces it
    (last write wins); the service answers deterministically for a given
    key, so a repeated write stores the same value.

    Example::

        cache = CompatibilityCache()
        cache.set("react@18.2.0--sass", ["1.69.5", "1.70.0"])
        cache.has("react@18.2.0--sass")   # True
        cache.get("react@18.2.0--sass")   # ['1.69.5', '1.70.0']
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[str, ...]] = {}

    def has(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[List[str]]:
        """Return a copy of the cached versions, or ``None`` on a miss."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return list(entry)

    def set(self, key: str, value: Sequence[str]) -> None:
        if key in self._entries:
            logger.debug("Overwriting cache entry %s", key)
        self._entries[key] = tuple(value)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"CompatibilityCache(entries={len(self._entries)})"


#: Process-wide cache shared by clients that are not given their own.
DEFAULT_CACHE = CompatibilityCache()

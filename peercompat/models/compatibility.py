"""
Resolution result models for peercompat.

:class:`CompatibleRange` is derived from an intersected set of compatible
versions; :class:`ResolvedTarget` pairs it with the target package name.
Targets without compatible versions never get a ``ResolvedTarget``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from peercompat.constants import ADOPTED_VERSION_PREFIX


@dataclass(frozen=True)
class CompatibleRange:
    """Oldest and latest compatible versions of a target package.

    Attributes:
        oldest: Lowest compatible version by semantic-version precedence.
        latest: Highest compatible version by semantic-version precedence.
    """

    oldest: str
    latest: str

    @property
    def adopted_specifier(self) -> str:
        """Specifier recorded when the target is adopted, e.g. ``~1.69.5``."""
        return f"{ADOPTED_VERSION_PREFIX}{self.latest}"

    def to_json(self) -> Dict[str, str]:
        return {"oldest": self.oldest, "latest": self.latest}

    def __str__(self) -> str:
        return f"{self.oldest} - {self.latest}"


@dataclass(frozen=True)
class ResolvedTarget:
    """Outcome for one target package that has compatible versions."""

    name: str
    version: CompatibleRange

    @property
    def adopted_version(self) -> str:
        return self.version.adopted_specifier

    def to_json(self) -> Dict[str, Any]:
        """Return ``{"name": ..., "version": {"oldest": ..., "latest": ...}}``."""
        return {"name": self.name, "version": self.version.to_json()}

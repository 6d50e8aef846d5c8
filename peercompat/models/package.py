"""
Declared package model for peercompat.

A :class:`Package` is one entry of a project's manifest: a name and the
version specifier it is declared with. The specifier is passed to the
compatibility service verbatim and may be a range (``^7.1.7``) rather
than an exact version.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping

from peercompat.constants import CACHE_KEY_SEPARATOR


@dataclass(frozen=True)
class Package:
    """A declared dependency and its version specifier.

    Attributes:
        name: Package name as it appears in the manifest (``@scope/name``
            is allowed).
        version: Version specifier, e.g. ``"18.2.0"`` or ``"^4.4.3"``.
    """

    name: str
    version: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "version", self.version.strip())

    def cache_key_for(self, target_name: str) -> str:
        """Return the lookup cache key for this package and ``target_name``.

        Example:
            >>> Package("react", "18.2.0").cache_key_for("sass")
            'react@18.2.0--sass'
        """
        return f"{self.name}@{self.version}{CACHE_KEY_SEPARATOR}{target_name}"

    def to_json(self) -> Dict[str, str]:
        return {"name": self.name, "version": self.version}

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


def packages_from_mapping(mapping: Mapping[str, str]) -> List[Package]:
    """Convert a ``{name: specifier}`` mapping into packages, keeping order.

    Example:
        >>> packages_from_mapping({"react": "18.2.0", "zustand": "^4.4.3"})
        [Package(name='react', version='18.2.0'), Package(name='zustand', version='^4.4.3')]
    """
    return [Package(name=name, version=version) for name, version in mapping.items()]

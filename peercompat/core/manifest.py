"""Reading declared packages from, and writing adoptions to, ``package.json``.

Declared packages are merged from ``peerDependencies``,
``devDependencies`` and ``dependencies``; when a name appears in more
than one section, ``dependencies`` wins over ``devDependencies``, which
wins over ``peerDependencies``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from peercompat.models import ResolvedTarget
from peercompat.exceptions import ManifestError
from peercompat.utils.logger import get_logger
from peercompat.utils.filesystem import safe_read_file, safe_write_file
from peercompat.constants import MANIFEST_DEV_SECTION, MANIFEST_SECTIONS

logger = get_logger("manifest")

__all__ = ["read_manifest", "write_resolved"]

PathLike = Union[str, Path]


def _load(path: Path) -> Dict[str, Any]:
    text = safe_read_file(path)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(
            f"Invalid JSON in {path.name}: {exc.msg} (line {exc.lineno})",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc

    if not isinstance(data, dict):
        raise ManifestError(
            f"{path.name} must contain a JSON object",
            file_path=str(path),
            operation="read",
        )
    return data


def read_manifest(path: PathLike, *, include_dev: bool = True) -> Dict[str, str]:
    """Return the declared packages of a ``package.json`` as ``{name: specifier}``.

    Args:
        path: Manifest file.
        include_dev: Include ``devDependencies``.

    Raises:
        ManifestError: The file is not JSON, or a dependency section is not
            an object of strings.
        FileOperationError: The file cannot be read.
    """
    manifest_path = Path(path)
    data = _load(manifest_path)

    declared: Dict[str, str] = {}
    for section in MANIFEST_SECTIONS:
        if section == MANIFEST_DEV_SECTION and not include_dev:
            continue

        entries = data.get(section)
        if entries is None:
            continue
        if not isinstance(entries, dict):
            raise ManifestError(
                f"'{section}' in {manifest_path.name} must be an object",
                file_path=str(manifest_path),
                operation="read",
            )

        for name, specifier in entries.items():
            if not isinstance(specifier, str):
                raise ManifestError(
                    f"Version of '{name}' in '{section}' must be a string",
                    file_path=str(manifest_path),
                    operation="read",
                )
            declared[name] = specifier

    logger.debug("Read %d declared package(s) from %s", len(declared), manifest_path)
    return declared


def write_resolved(
    path: PathLike,
    resolved: Iterable[ResolvedTarget],
    *,
    section: str = "dependencies",
    backup: bool = True,
) -> Optional[Path]:
    """Add each resolved target to ``section`` as ``~<latest>``.

    Existing keys, their order and all other content are kept.  Entries
    already present in ``section`` are left unchanged.

    Returns:
        Path of the backup copy, if one was made.
    """
    manifest_path = Path(path)
    data = _load(manifest_path)

    entries = data.setdefault(section, {})
    if not isinstance(entries, dict):
        raise ManifestError(
            f"'{section}' in {manifest_path.name} must be an object",
            file_path=str(manifest_path),
            operation="write",
        )

    added = 0
    for target in resolved:
        if target.name in entries:
            logger.debug("%s already present in %s, leaving it", target.name, section)
            continue
        entries[target.name] = target.adopted_version
        added += 1

    logger.info("Writing %d package(s) to %s", added, manifest_path)
    return safe_write_file(
        manifest_path,
        json.dumps(data, indent=2, ensure_ascii=False) + "\n",
        backup=backup,
    )

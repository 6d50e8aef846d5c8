"""Configuration file loader for peercompat.

Supports two formats:

- ``peercompat.toml``: settings under the ``[peercompat]`` table
- ``pyproject.toml``: settings under the ``[tool.peercompat]`` table

Discovery order:

1. Explicit path from ``--config`` or ``PEERCOMPAT_CONFIG``
2. ``peercompat.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.peercompat]`` section

Configuration precedence: defaults < config file < CLI args.

Example (``peercompat.toml``)::

    [peercompat]
    endpoint = "https://www.npmpeer.dev/find"
    timeout = 20
    max_concurrency = 5
    include_dev = false
    sequential = true
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from peercompat.exceptions import ConfigError
from peercompat.utils.logger import get_logger
from peercompat.constants import (
    COMPATIBILITY_API,
    DEFAULT_INCLUDE_DEV,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_SEQUENTIAL,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")

CONFIG_FILE_NAME = "peercompat.toml"
SECTION_NAME = "peercompat"


@dataclass
class PeerCompatConfig:
    """Parsed and validated peercompat configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        endpoint: URL of the compatibility service ``find`` endpoint.
        timeout: Per-request timeout in seconds.
        max_concurrency: Maximum number of lookups in flight at once.
        include_dev: Treat ``devDependencies`` as declared packages.
        sequential: Resolve targets one at a time.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    endpoint: str = COMPATIBILITY_API
    timeout: float = DEFAULT_TIMEOUT
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    include_dev: bool = DEFAULT_INCLUDE_DEV
    sequential: bool = DEFAULT_SEQUENTIAL

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration options (without metadata) for debug logging."""
        return {
            "endpoint": self.endpoint,
            "timeout": self.timeout,
            "max_concurrency": self.max_concurrency,
            "include_dev": self.include_dev,
            "sequential": self.sequential,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    own_file = cwd / CONFIG_FILE_NAME
    if own_file.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, own_file)
        return own_file

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.%s] in pyproject.toml", SECTION_NAME)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Return True if ``path`` has a ``[tool.peercompat]`` table.

    Unreadable or invalid files count as not having one.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return SECTION_NAME in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> PeerCompatConfig:
    """Load and validate peercompat configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`PeerCompatConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return PeerCompatConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(SECTION_NAME, {})
    else:
        section = raw.get(SECTION_NAME, {})

    if not section:
        logger.debug("Config file found but no peercompat section, using defaults")
        return PeerCompatConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _require_bool(section: Dict[str, Any], key: str, config_path: str) -> bool:
    val = section[key]
    if not isinstance(val, bool):
        raise ConfigError(
            f"{key} must be a boolean, got {type(val).__name__}",
            config_path=config_path,
            option=key,
        )
    return val


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> PeerCompatConfig:
    """Validate a ``[peercompat]`` table and build the config from it.

    Raises:
        ConfigError: Unknown keys or values of the wrong type or range.
    """
    config = PeerCompatConfig()

    known = {"endpoint", "timeout", "max_concurrency", "include_dev", "sequential"}
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "endpoint" in section:
        val = section["endpoint"]
        if not isinstance(val, str) or not val.startswith(("http://", "https://")):
            raise ConfigError(
                "endpoint must be an http(s) URL",
                config_path=config_path,
                option="endpoint",
            )
        config.endpoint = val

    if "timeout" in section:
        val = section["timeout"]
        if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
            raise ConfigError(
                f"timeout must be a positive number, got {val!r}",
                config_path=config_path,
                option="timeout",
            )
        config.timeout = float(val)

    if "max_concurrency" in section:
        val = section["max_concurrency"]
        if isinstance(val, bool) or not isinstance(val, int) or val < 1:
            raise ConfigError(
                f"max_concurrency must be a positive integer, got {val!r}",
                config_path=config_path,
                option="max_concurrency",
            )
        config.max_concurrency = val

    if "include_dev" in section:
        config.include_dev = _require_bool(section, "include_dev", config_path)

    if "sequential" in section:
        config.sequential = _require_bool(section, "sequential", config_path)

    return config

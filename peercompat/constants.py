"""
Centralized constants for peercompat.

This module defines immutable configuration values used across peercompat,
including the compatibility service endpoint, network settings, manifest
sections, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "peercompat/{version} (https://github.com/peercompat/peercompat)"
)

# ---------------------------------------------------------------------------
# Compatibility service
# ---------------------------------------------------------------------------

#: Lookup endpoint of the peer-compatibility service.
COMPATIBILITY_API: Final[str] = "https://www.npmpeer.dev/find"

#: Separator between the consumer and the target in cache keys.
CACHE_KEY_SEPARATOR: Final[str] = "--"

#: Prefix applied to the latest compatible version when it is adopted.
ADOPTED_VERSION_PREFIX: Final[str] = "~"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[float] = 30.0

#: Maximum number of lookups in flight at once.
DEFAULT_MAX_CONCURRENCY: Final[int] = 10

# ---------------------------------------------------------------------------
# Resolver defaults
# ---------------------------------------------------------------------------

#: Include ``devDependencies`` when reading a manifest.
DEFAULT_INCLUDE_DEV: Final[bool] = True

#: Resolve targets one after the other instead of concurrently.
DEFAULT_SEQUENTIAL: Final[bool] = False

# ---------------------------------------------------------------------------
# Manifest (package.json)
# ---------------------------------------------------------------------------

#: Default manifest file name.
MANIFEST_FILE_NAME: Final[str] = "package.json"

#: Manifest sections read as declared packages, lowest precedence first.
MANIFEST_SECTIONS: Final[Sequence[str]] = (
    "peerDependencies",
    "devDependencies",
    "dependencies",
)

#: Section that only applies when dev dependencies are included.
MANIFEST_DEV_SECTION: Final[str] = "devDependencies"

#: Maximum allowed manifest size in bytes.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

"""
Utility helpers for peercompat.

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client
- Version ordering helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

from peercompat.utils.filesystem import (
    create_backup,
    safe_read_file,
    safe_write_file,
)
from peercompat.utils.logger import (
    get_logger,
    is_logging_configured,
    setup_logging,
)
from peercompat.utils.console import (
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)
from peercompat.utils.http import HTTPClient
from peercompat.utils.version_utils import (
    parse_version,
    sort_versions,
    version_sort_key,
)

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "is_logging_configured",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "create_backup",
    # HTTP
    "HTTPClient",
    # Versions
    "parse_version",
    "sort_versions",
    "version_sort_key",
]

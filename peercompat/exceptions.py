"""
Custom exception hierarchy for peercompat.

All exceptions inherit from :class:`PeerCompatError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

An empty compatible-version set is a normal outcome and has no exception
type; it is reported by omitting the target from the results.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class PeerCompatError(Exception):
    """Base exception for all peercompat errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class InvalidInputError(PeerCompatError):
    """Raised when the resolver is called without packages or targets.

    Args:
        message: Error description.
        argument: Name of the missing argument.
    """

    __slots__ = ("argument",)

    def __init__(self, message: str, *, argument: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "argument", argument)
        super().__init__(message, details)
        self.argument = argument


class ConfigError(PeerCompatError):
    """Raised when a configuration file is missing, unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file.
        option: Offending option name, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)
        super().__init__(message, details)
        self.config_path = config_path
        self.option = option


class NetworkError(PeerCompatError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class RemoteLookupError(NetworkError):
    """Raised when one compatibility lookup cannot be completed.

    Covers non-2xx responses, transport failures and bodies that do not
    have the ``content[].version`` shape.

    Args:
        message: Error description.
        package_name: Name of the consumer package.
        package_version: Version specifier of the consumer package.
        target_name: Name of the target package being looked up.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("package_name", "package_version", "target_name")

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        package_version: Optional[str] = None,
        target_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.package_name = package_name
        self.package_version = package_version
        self.target_name = target_name
        _add_if(self.details, "package", package_name)
        _add_if(self.details, "version", package_version)
        _add_if(self.details, "dep", target_name)


class FileOperationError(PeerCompatError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/backup).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ManifestError(FileOperationError):
    """Raised when a ``package.json`` manifest cannot be interpreted."""

    __slots__ = ()

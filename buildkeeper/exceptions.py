"""
Custom exception hierarchy for buildkeeper.

This module defines structured exception types used across buildkeeper.
All exceptions inherit from :class:`BuildKeeperError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class BuildKeeperError(Exception):
    """Base exception for all buildkeeper errors.

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


class InvalidInputError(BuildKeeperError):
    """Raised when a build input (version, branch, package id) is unusable.

    Args:
        message: Error description.
        field: Name of the offending input.
        value: The rejected value, as received.
    """

    __slots__ = ("field", "value")

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "field", field)
        _add_if(details, "value", repr(value) if value is not None else None)

        super().__init__(message, details)

        self.field = field
        self.value = value


class ConfigError(BuildKeeperError):
    """Raised when the configuration file cannot be loaded or validated.

    Args:
        message: Error description.
        config_path: Path to the configuration file involved.
        option: Name of the offending option, if any.
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


class NetworkError(BuildKeeperError):
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


class FeedError(NetworkError):
    """Raised for failures related to a NuGet package feed.

    Args:
        message: Error description.
        package_id: Identifier of the package involved.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("package_id",)

    def __init__(
        self,
        message: str,
        *,
        package_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.package_id = package_id
        if package_id is not None:
            self.details["package"] = package_id

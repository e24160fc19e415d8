"""
Utility helpers for buildkeeper.

This package provides reusable utilities used across buildkeeper:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Async HTTP client

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from buildkeeper.utils.logger import (
    get_logger,
    is_logging_configured,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from buildkeeper.utils.console import (
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from buildkeeper.utils.http import HTTPClient

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "is_logging_configured",
    # HTTP
    "HTTPClient",
]

"""
Logging utilities for buildkeeper.

Centralizes logger configuration and retrieval under the ``buildkeeper``
namespace. Output goes to stderr so that commands can print derived
versions on stdout for CI scripts to capture.

The AppVeyor build console renders ANSI colors even though it is not a
TTY, so colored level names stay on there; other CI systems get plain
text.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from buildkeeper.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

_logging_configured: bool = False
_lock = threading.Lock()


def _on_appveyor() -> bool:
    return os.environ.get("APPVEYOR", "").lower() == "true"


class ColoredFormatter(logging.Formatter):
    """Logging formatter with optional ANSI color support."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not (self.use_color and self._should_use_color()):
            return super().format(record)

        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)

        # Color a copy so other handlers see the plain level name
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original

    @staticmethod
    def _should_use_color() -> bool:
        """Determine whether ANSI colors should be emitted."""
        if os.environ.get("NO_COLOR"):
            return False
        if _on_appveyor():
            return True
        if os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


def setup_logging(
    *,
    level: int = logging.WARNING,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure logging for buildkeeper.

    Safe to call more than once; the previous handler is replaced. The
    verbose format (timestamps and logger names) is used at DEBUG level.

    Args:
        level: Logging level (e.g. ``logging.INFO``).
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger("buildkeeper")
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)

        fmt = LOG_VERBOSE_FORMAT if level <= logging.DEBUG else LOG_DEFAULT_FORMAT
        handler.setFormatter(
            ColoredFormatter(
                fmt,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the buildkeeper namespace.

    Args:
        name: Short name (``"semver"``) or a dotted ``buildkeeper.*`` name.
    """
    if not name or name == "buildkeeper":
        logger = logging.getLogger("buildkeeper")
    elif name.startswith("buildkeeper."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"buildkeeper.{name}")

    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True if buildkeeper logging has been configured."""
    return _logging_configured

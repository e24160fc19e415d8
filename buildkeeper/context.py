"""
Shared context object for buildkeeper CLI commands.

This module defines the global Click context used to share configuration
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from buildkeeper.config import BuildKeeperConfig


class BuildKeeperContext:
    """Global context object for buildkeeper CLI commands.

    Attributes:
        config_path: Path to the configuration file, if one was loaded.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration, or ``None`` before the group runs.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: Optional[BuildKeeperConfig] = None

    def get_config(self) -> BuildKeeperConfig:
        """Return the loaded configuration, or defaults if none was loaded."""
        return self.config if self.config is not None else BuildKeeperConfig()


#: Click decorator for injecting :class:`BuildKeeperContext` into commands.
pass_context = click.make_pass_decorator(BuildKeeperContext, ensure=True)

"""Configuration file loader for buildkeeper.

Supports two formats:

- ``buildkeeper.toml``: settings under ``[buildkeeper]`` table
- ``pyproject.toml``: settings under ``[tool.buildkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``BUILDKEEPER_CONFIG``
2. ``buildkeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.buildkeeper]`` section

Configuration precedence: defaults < config file < environment < CLI args.

Example (``buildkeeper.toml``)::

    [buildkeeper]
    include_build_metadata = false
    feed_url = "https://nuget.example.com/v3/index.json"
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from buildkeeper.exceptions import ConfigError
from buildkeeper.utils.logger import get_logger
from buildkeeper.constants import DEFAULT_INCLUDE_BUILD_METADATA, NUGET_V3_INDEX

logger = get_logger("config")


@dataclass
class BuildKeeperConfig:
    """Parsed and validated buildkeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        include_build_metadata: Append ``+build.N`` to derived versions.
        feed_url: NuGet v3 service index queried by ``package-exists``.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    include_build_metadata: bool = DEFAULT_INCLUDE_BUILD_METADATA
    feed_url: str = NUGET_V3_INDEX

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration options (without ``source_path``) for logging."""
        return {
            "include_build_metadata": self.include_build_metadata,
            "feed_url": self.feed_url,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

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

    buildkeeper_toml = cwd / "buildkeeper.toml"
    if buildkeeper_toml.is_file():
        logger.debug("Found buildkeeper.toml: %s", buildkeeper_toml)
        return buildkeeper_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_buildkeeper_section(pyproject_toml):
        logger.debug("Found [tool.buildkeeper] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_buildkeeper_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.buildkeeper] section.

    An unreadable pyproject.toml is treated as having no section; it
    belongs to the project, not to buildkeeper.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return False
    return "buildkeeper" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> BuildKeeperConfig:
    """Load and validate buildkeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`BuildKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        return BuildKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("buildkeeper", {})
    else:
        section = raw.get("buildkeeper", {})

    if not section:
        logger.debug("Config file found but no buildkeeper section, using defaults")
        return BuildKeeperConfig(source_path=resolved)

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


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> BuildKeeperConfig:
    """Validate a ``[buildkeeper]`` / ``[tool.buildkeeper]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = BuildKeeperConfig()

    known_top = {"include_build_metadata", "feed_url"}

    unknown_top = set(section.keys()) - known_top
    if unknown_top:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown_top))}",
            config_path=config_path,
        )

    if "include_build_metadata" in section:
        val = section["include_build_metadata"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"include_build_metadata must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="include_build_metadata",
            )
        config.include_build_metadata = val

    if "feed_url" in section:
        val = section["feed_url"]
        if not isinstance(val, str) or not val.strip():
            raise ConfigError(
                "feed_url must be a non-empty string",
                config_path=config_path,
                option="feed_url",
            )
        config.feed_url = val.strip()

    return config

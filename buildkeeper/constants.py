"""
Centralized constants for buildkeeper.

This module defines immutable values used across buildkeeper, including
branch names recognised by the version deriver, AppVeyor environment
variable names, package feed endpoints, network settings, and logging
formats. All values are intended to be treated as read-only.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "buildkeeper/{version}"

# ---------------------------------------------------------------------------
# Version derivation
# ---------------------------------------------------------------------------

#: Branch producing stable releases (no pre-release stage).
BRANCH_MASTER: Final[str] = "master"

#: Branch producing ``test.N`` pre-releases.
BRANCH_TEST: Final[str] = "test"

#: Branch producing ``pre.N`` pre-releases.
BRANCH_DEV: Final[str] = "dev"

#: Stage label for the test branch.
STAGE_TEST: Final[str] = "test"

#: Stage label for the dev branch.
STAGE_PRE: Final[str] = "pre"

#: Stage label prefix for every other branch.
STAGE_FEATURE: Final[str] = "dev"

#: Prefix of the build metadata identifier.
BUILD_METADATA_PREFIX: Final[str] = "build"

#: Default for appending ``+build.N`` to derived versions.
DEFAULT_INCLUDE_BUILD_METADATA: Final[bool] = True

# ---------------------------------------------------------------------------
# AppVeyor environment
# ---------------------------------------------------------------------------

#: Build version assigned by AppVeyor (``MAJOR.MINOR.PATCH.BUILD``).
ENV_BUILD_VERSION: Final[str] = "APPVEYOR_BUILD_VERSION"

#: Branch being built.
ENV_REPO_BRANCH: Final[str] = "APPVEYOR_REPO_BRANCH"

#: Base URL of the build worker API.
ENV_API_URL: Final[str] = "APPVEYOR_API_URL"

#: Build worker API path used to update the build's details.
APPVEYOR_BUILD_ENDPOINT: Final[str] = "api/build"

# ---------------------------------------------------------------------------
# NuGet endpoints
# ---------------------------------------------------------------------------

#: Service index of the public NuGet v3 feed.
NUGET_V3_INDEX: Final[str] = "https://api.nuget.org/v3/index.json"

#: Resource type listing package versions in a v3 service index.
NUGET_PACKAGE_BASE_ADDRESS_TYPE: Final[str] = "PackageBaseAddress/3.0.0"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

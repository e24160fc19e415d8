"""
buildkeeper: CI build helpers for AppVeyor-hosted .NET/NuGet projects

Derives SemVer 2.0.0 versions from the CI build version and branch,
publishes them as the build's display version, and checks whether a
package version already exists on a NuGet feed.
"""

from __future__ import annotations

from buildkeeper.__version__ import __version__
from buildkeeper.exceptions import BuildKeeperError, InvalidInputError
from buildkeeper.core.semver import derive_package_version, derive_semver

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__license__ = "Apache-2.0"
__description__ = "Semantic versioning and NuGet feed helpers for CI builds."

__all__ = [
    "__version__",
    "BuildKeeperError",
    "InvalidInputError",
    "derive_semver",
    "derive_package_version",
]

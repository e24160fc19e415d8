"""Core build-automation logic for buildkeeper."""

from buildkeeper.core.semver import (
    BranchKind,
    RawVersion,
    classify_branch,
    derive_package_version,
    derive_semver,
    resolve_stage,
    sanitize_identifier,
)
from buildkeeper.core.nuget import NuGetFeed, package_exists
from buildkeeper.core.appveyor import build_endpoint, publish_build_version

__all__ = [
    "BranchKind",
    "NuGetFeed",
    "RawVersion",
    "build_endpoint",
    "classify_branch",
    "derive_package_version",
    "derive_semver",
    "package_exists",
    "publish_build_version",
    "resolve_stage",
    "sanitize_identifier",
]

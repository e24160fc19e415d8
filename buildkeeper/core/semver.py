"""Semantic version derivation for CI builds.

Maps the 4-part build version assigned by the CI server
(``MAJOR.MINOR.PATCH.BUILD``) and the branch being built to a
SemVer 2.0.0 string. The branch decides the pre-release stage:

=========================  ==================================
Branch                     Result for ``4.0.1.12``
=========================  ==================================
``master``                 ``4.0.1+build.12``
``test``                   ``4.0.1-test.12+build.12``
``dev``                    ``4.0.1-pre.12+build.12``
``feature/ABC-1-Thing``    ``4.0.1-dev.abc-1-thing.12+build.12``
=========================  ==================================

Every function here is pure. Defaults normally read from the
environment (``APPVEYOR_BUILD_VERSION``, ``APPVEYOR_REPO_BRANCH``) are
resolved by the caller.

Typical usage::

    >>> derive_semver("3.0.0.11", "dev")
    '3.0.0-pre.11+build.11'
    >>> derive_package_version("3.0.0.11", "dev")
    '3.0.0-pre.11'
"""

from __future__ import annotations

import re
from enum import Enum
from dataclasses import dataclass
from typing import Optional

from buildkeeper.exceptions import InvalidInputError
from buildkeeper.utils.logger import get_logger
from buildkeeper.constants import (
    BRANCH_DEV,
    BRANCH_MASTER,
    BRANCH_TEST,
    BUILD_METADATA_PREFIX,
    STAGE_FEATURE,
    STAGE_PRE,
    STAGE_TEST,
)

logger = get_logger("semver")

__all__ = [
    "BranchKind",
    "RawVersion",
    "classify_branch",
    "derive_package_version",
    "derive_semver",
    "resolve_stage",
    "sanitize_identifier",
]

_RAW_VERSION_PATTERN = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)\.([0-9]+)")

# Anything outside the allowed identifier alphabet collapses to a single "-"
_UNSAFE_RUN = re.compile(r"[^A-Za-z0-9\-_.]+")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


class BranchKind(Enum):
    """Branch categories understood by the deriver."""

    MASTER = "master"
    TEST = "test"
    DEV = "dev"
    OTHER = "other"


_KNOWN_BRANCHES = {
    BRANCH_MASTER: BranchKind.MASTER,
    BRANCH_TEST: BranchKind.TEST,
    BRANCH_DEV: BranchKind.DEV,
}


@dataclass(frozen=True)
class RawVersion:
    """A parsed ``MAJOR.MINOR.PATCH.BUILD`` build version.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        build: Fourth component, used as the build number.
    """

    major: int
    minor: int
    patch: int
    build: int

    @classmethod
    def parse(cls, value: Optional[str]) -> "RawVersion":
        """Parse a 4-part dotted version string.

        Surrounding whitespace is ignored. Exactly four non-negative
        integer components are required; ``1.2`` or ``1.2.3`` are rejected.

        Args:
            value: Version string such as ``"2.0.0.10"``.

        Returns:
            The parsed :class:`RawVersion`.

        Raises:
            InvalidInputError: ``value`` is missing, empty or malformed.
        """
        if value is None or not value.strip():
            raise InvalidInputError(
                "Build version is required",
                field="raw_version",
                value=value,
            )

        match = _RAW_VERSION_PATTERN.fullmatch(value.strip())
        if match is None:
            raise InvalidInputError(
                f"Invalid build version '{value}': expected MAJOR.MINOR.PATCH.BUILD",
                field="raw_version",
                value=value,
            )

        major, minor, patch, build = (int(part) for part in match.groups())
        return cls(major=major, minor=minor, patch=patch, build=build)

    @property
    def core(self) -> str:
        """Return the ``MAJOR.MINOR.PATCH`` part."""
        return f"{self.major}.{self.minor}.{self.patch}"


# ---------------------------------------------------------------------------
# Branch handling
# ---------------------------------------------------------------------------


def _normalize_branch(branch: Optional[str]) -> str:
    if branch is None or not branch.strip():
        raise InvalidInputError(
            "Branch name is required",
            field="branch",
            value=branch,
        )
    return branch.strip().lower()


def classify_branch(branch: str) -> BranchKind:
    """Return the :class:`BranchKind` of a branch name (case-insensitive).

    Raises:
        InvalidInputError: ``branch`` is missing or blank.
    """
    return _KNOWN_BRANCHES.get(_normalize_branch(branch), BranchKind.OTHER)


def _branch_tail(normalized: str) -> str:
    """Return the last non-empty ``/`` segment, or the whole branch."""
    segments = normalized.split("/")
    if len(segments) <= 1:
        return normalized

    for segment in reversed(segments):
        if segment:
            return segment

    # Nothing but slashes
    return normalized


def sanitize_identifier(text: str) -> str:
    """Replace each run of characters outside ``[A-Za-z0-9-_.]`` with ``-``.

    Examples:
        >>> sanitize_identifier("dev.my branch!.3")
        'dev.my-branch-.3'
    """
    return _UNSAFE_RUN.sub("-", text)


def resolve_stage(branch: str, build: int) -> str:
    """Compute the sanitized pre-release stage for a branch.

    Args:
        branch: Branch name as reported by the CI server.
        build: Build number embedded in the stage.

    Returns:
        The stage identifier, or an empty string for ``master``.

    Raises:
        InvalidInputError: ``branch`` is missing or blank.
    """
    kind = classify_branch(branch)

    if kind is BranchKind.MASTER:
        stage = ""
    elif kind is BranchKind.TEST:
        stage = f"{STAGE_TEST}.{build}"
    elif kind is BranchKind.DEV:
        stage = f"{STAGE_PRE}.{build}"
    else:
        stage = f"{STAGE_FEATURE}.{_branch_tail(_normalize_branch(branch))}.{build}"

    return sanitize_identifier(stage)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def derive_semver(
    raw_version: Optional[str],
    branch: Optional[str],
    include_build_metadata: bool = True,
    *,
    build_number: Optional[int] = None,
) -> str:
    """Derive a SemVer 2.0.0 version string from a build version and branch.

    Args:
        raw_version: 4-part build version, e.g. ``"4.0.1.12"``.
        branch: Branch being built, e.g. ``"feature/ABC-123"``.
        include_build_metadata: Append ``+build.N`` when ``True``.
        build_number: Overrides the fourth component of ``raw_version``
            when given. Negative values count as ``0``.

    Returns:
        The derived version, e.g. ``"4.0.1-dev.abc-123.12+build.12"``.

    Raises:
        InvalidInputError: ``raw_version`` or ``branch`` is missing,
            empty, or ``raw_version`` is malformed.

    Examples:
        >>> derive_semver("2.0.0.10", "master")
        '2.0.0+build.10'
        >>> derive_semver("2.0.0.10", "master", False)
        '2.0.0'
    """
    parsed = RawVersion.parse(raw_version)
    build = parsed.build if build_number is None else max(build_number, 0)

    stage = resolve_stage(branch, build)  # type: ignore[arg-type]

    semver = parsed.core
    if stage:
        semver += f"-{stage}"
    if include_build_metadata:
        semver += f"+{BUILD_METADATA_PREFIX}.{build}"

    logger.debug("Derived %s from %s on branch %r", semver, raw_version, branch)
    return semver


def derive_package_version(
    raw_version: Optional[str],
    branch: Optional[str],
    *,
    build_number: Optional[int] = None,
) -> str:
    """Derive the feed-comparable version (no build metadata).

    Package feeds ignore ``+build`` metadata, so this is the form to
    compare against published package versions.
    """
    return derive_semver(
        raw_version,
        branch,
        include_build_metadata=False,
        build_number=build_number,
    )

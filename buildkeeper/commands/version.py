"""Version command implementation for buildkeeper.

Derives the semantic version of the current build from the CI build
version and branch, prints it on stdout, and optionally publishes it as
the AppVeyor build's display version.

Typical usage::

    # Inside an AppVeyor build (reads APPVEYOR_BUILD_VERSION / APPVEYOR_REPO_BRANCH)
    $ buildkeeper version --publish

    # Explicit inputs
    $ buildkeeper version --raw-version 4.0.1.12 --branch feature/ABC-1-Thing
    4.0.1-dev.abc-1-thing.12+build.12

    # Feed-comparable form
    $ buildkeeper version --no-build-metadata
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from typing import Optional

from buildkeeper.exceptions import BuildKeeperError
from buildkeeper.context import pass_context, BuildKeeperContext
from buildkeeper.core import derive_package_version, derive_semver, publish_build_version
from buildkeeper.constants import ENV_API_URL, ENV_BUILD_VERSION, ENV_REPO_BRANCH
from buildkeeper.utils import (
    HTTPClient,
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.version")


@click.command()
@click.option(
    "--raw-version",
    envvar=ENV_BUILD_VERSION,
    help=f"Build version MAJOR.MINOR.PATCH.BUILD [env: {ENV_BUILD_VERSION}].",
)
@click.option(
    "--branch",
    envvar=ENV_REPO_BRANCH,
    help=f"Branch being built [env: {ENV_REPO_BRANCH}].",
)
@click.option(
    "--build-number",
    type=int,
    default=None,
    help="Override the build number taken from the build version.",
)
@click.option(
    "--build-metadata/--no-build-metadata",
    default=None,
    help="Append +build.N (default from configuration, else on).",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["simple", "json", "table"], case_sensitive=False),
    default="simple",
    help="Output format.",
)
@click.option(
    "--publish",
    is_flag=True,
    help="Set the derived version as the AppVeyor build version.",
)
@click.option(
    "--api-url",
    envvar=ENV_API_URL,
    help=f"AppVeyor build worker API URL [env: {ENV_API_URL}].",
)
@pass_context
def version(
    ctx: BuildKeeperContext,
    raw_version: Optional[str],
    branch: Optional[str],
    build_number: Optional[int],
    build_metadata: Optional[bool],
    format: str,
    publish: bool,
    api_url: Optional[str],
) -> None:
    """Derive the semantic version of this build.

    \b
    master          2.0.0+build.10
    test            2.0.0-test.10+build.10
    dev             2.0.0-pre.10+build.10
    feature/ABC-1   2.0.0-dev.abc-1.10+build.10

    Exits 0 on success (even if publishing fails), 1 on invalid input.
    """
    include_metadata = (
        build_metadata
        if build_metadata is not None
        else ctx.get_config().include_build_metadata
    )

    try:
        semver = derive_semver(
            raw_version,
            branch,
            include_metadata,
            build_number=build_number,
        )
    except BuildKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    _display(format, semver, raw_version or "", branch or "", build_number)

    if publish:
        published = asyncio.run(_publish(semver, api_url))
        if published:
            print_success(f"Build version set to {semver}")
        else:
            print_warning("Build version was not published")


async def _publish(semver: str, api_url: Optional[str]) -> bool:
    async with HTTPClient() as client:
        return await publish_build_version(semver, api_url=api_url, client=client)


def _display(
    format: str,
    semver: str,
    raw_version: str,
    branch: str,
    build_number: Optional[int],
) -> None:
    """Print the derived version in the requested format."""
    if format == "simple":
        click.echo(semver)
        return

    package_version = derive_package_version(
        raw_version, branch, build_number=build_number
    )

    if format == "json":
        click.echo(
            json.dumps(
                {
                    "raw_version": raw_version.strip(),
                    "branch": branch.strip(),
                    "version": semver,
                    "package_version": package_version,
                },
                indent=2,
            )
        )
        return

    print_table(
        [
            {"Field": "Build version", "Value": raw_version.strip()},
            {"Field": "Branch", "Value": branch.strip()},
            {"Field": "Version", "Value": semver},
            {"Field": "Package version", "Value": package_version},
        ],
        title="Derived Version",
        column_styles={"Field": {"style": "bold cyan", "no_wrap": True}},
    )

"""Package-exists command implementation for buildkeeper.

Derives the feed-comparable version of the current build (no build
metadata) and asks a NuGet v3 feed whether that version of the package
has already been published. Used to skip or fail a deploy step that would
otherwise push a duplicate.

Typical usage::

    $ buildkeeper package-exists My.Package
    $ buildkeeper package-exists My.Package --feed https://nuget.example.com/v3/index.json
    $ buildkeeper package-exists My.Package --format json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from typing import Optional

from buildkeeper.exceptions import BuildKeeperError
from buildkeeper.context import pass_context, BuildKeeperContext
from buildkeeper.core import nuget, derive_package_version
from buildkeeper.constants import ENV_BUILD_VERSION, ENV_REPO_BRANCH
from buildkeeper.utils import (
    HTTPClient,
    get_logger,
    print_error,
    print_success,
    print_warning,
)

logger = get_logger("commands.package_exists")


@click.command("package-exists")
@click.argument("package_id")
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
    "--feed",
    "feed_url",
    default=None,
    help="NuGet v3 service index URL (default from configuration, else nuget.org).",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["simple", "json"], case_sensitive=False),
    default="simple",
    help="Output format.",
)
@pass_context
def package_exists(
    ctx: BuildKeeperContext,
    package_id: str,
    raw_version: Optional[str],
    branch: Optional[str],
    build_number: Optional[int],
    feed_url: Optional[str],
    format: str,
) -> None:
    """Check whether this build's package version is already on a feed.

    Exits 0 if the version is not yet published, 1 if it already exists
    or an error occurred.
    """
    feed_url = feed_url or ctx.get_config().feed_url

    try:
        package_version = derive_package_version(
            raw_version, branch, build_number=build_number
        )
        exists = asyncio.run(
            _check_async(package_id, raw_version, branch, build_number, feed_url)
        )
    except BuildKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    if format == "json":
        click.echo(
            json.dumps(
                {
                    "package_id": package_id,
                    "version": package_version,
                    "feed": feed_url,
                    "exists": exists,
                },
                indent=2,
            )
        )
    elif exists:
        print_warning(f"{package_id} {package_version} already exists on {feed_url}")
    else:
        print_success(f"{package_id} {package_version} is not on {feed_url}")

    sys.exit(1 if exists else 0)


async def _check_async(
    package_id: str,
    raw_version: Optional[str],
    branch: Optional[str],
    build_number: Optional[int],
    feed_url: str,
) -> bool:
    logger.info("Checking %s on %s", package_id, feed_url)
    async with HTTPClient() as client:
        return await nuget.package_exists(
            package_id,
            raw_version,
            branch,
            feed_url=feed_url,
            client=client,
            build_number=build_number,
        )

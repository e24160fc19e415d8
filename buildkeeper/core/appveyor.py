"""AppVeyor build worker API publisher.

Records a derived version as the build's display version by calling the
build worker API (``PUT {APPVEYOR_API_URL}api/build``), the same call
``Update-AppveyorBuild -Version`` makes.

Publishing is fire-and-forget: failures are logged and reported through
the return value, never raised.
"""

from __future__ import annotations

from typing import Optional

from buildkeeper.exceptions import NetworkError
from buildkeeper.utils.http import HTTPClient
from buildkeeper.utils.logger import get_logger
from buildkeeper.constants import APPVEYOR_BUILD_ENDPOINT

logger = get_logger("appveyor")

__all__ = ["build_endpoint", "publish_build_version"]


def build_endpoint(api_url: str) -> str:
    """Return the ``api/build`` URL under the worker API base URL."""
    return f"{api_url.strip().rstrip('/')}/{APPVEYOR_BUILD_ENDPOINT}"


async def publish_build_version(
    version: str,
    *,
    api_url: Optional[str],
    client: HTTPClient,
) -> bool:
    """Set the display version of the running AppVeyor build.

    Args:
        version: Version string to show for the build.
        api_url: Build worker API base URL (``APPVEYOR_API_URL``). Empty
            or ``None`` means the build is not running on AppVeyor.
        client: Shared :class:`HTTPClient`.

    Returns:
        ``True`` if the worker accepted the update, ``False`` otherwise.
    """
    if not api_url or not api_url.strip():
        logger.info("No AppVeyor API URL; skipping build version update")
        return False

    url = build_endpoint(api_url)
    try:
        await client.put(url, json={"version": version})
    except NetworkError as exc:
        logger.warning("Could not update AppVeyor build version: %s", exc)
        return False

    logger.info("AppVeyor build version set to %s", version)
    return True

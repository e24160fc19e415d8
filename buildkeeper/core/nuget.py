"""NuGet v3 feed queries for buildkeeper.

Answers a single question before a package is pushed: does the feed
already contain ``(packageId, version)``? The lookup uses two documents of
the NuGet v3 protocol:

1. The **service index** (e.g. ``https://api.nuget.org/v3/index.json``),
   which lists the feed's resources. The ``PackageBaseAddress/3.0.0``
   resource is the flat container holding package contents.
2. The flat container's **version list**,
   ``{base}/{id-lower}/index.json``, which holds every published version
   in normalized, lower-cased form.

Versions compared against the feed never carry ``+build`` metadata, since
NuGet drops it on push. :func:`package_exists` therefore derives the
version with :func:`~buildkeeper.core.semver.derive_package_version`.

Typical usage::

    async with HTTPClient() as client:
        exists = await package_exists(
            "My.Package", "4.0.1.12", "dev", feed_url=NUGET_V3_INDEX, client=client
        )
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from buildkeeper.exceptions import FeedError, InvalidInputError, NetworkError
from buildkeeper.utils.http import HTTPClient
from buildkeeper.utils.logger import get_logger
from buildkeeper.core.semver import derive_package_version
from buildkeeper.constants import NUGET_PACKAGE_BASE_ADDRESS_TYPE, NUGET_V3_INDEX

logger = get_logger("nuget")

__all__ = ["NuGetFeed", "package_exists"]


def _strip_metadata(version: str) -> str:
    return version.split("+", 1)[0].strip().lower()


class NuGetFeed:
    """Read-only view of a NuGet v3 feed.

    Args:
        client: Shared :class:`HTTPClient` used for all requests.
        feed_url: URL of the feed's v3 service index.
    """

    def __init__(self, client: HTTPClient, feed_url: str = NUGET_V3_INDEX) -> None:
        self.client = client
        self.feed_url = feed_url
        self._base_address: Optional[str] = None

    async def _get_json(self, url: str) -> Dict[str, Any]:
        """Fetch a feed document, reporting failures as :class:`FeedError`."""
        try:
            return await self.client.get_json(url)
        except FeedError:
            raise
        except NetworkError as exc:
            raise FeedError(
                exc.message,
                url=exc.url or url,
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc

    async def get_package_base_address(self) -> str:
        """Return the flat container URL advertised by the service index.

        The result is cached for the lifetime of this instance.

        Raises:
            FeedError: The index could not be fetched or has no
                ``PackageBaseAddress/3.0.0`` resource.
        """
        if self._base_address is not None:
            return self._base_address

        index = await self._get_json(self.feed_url)
        resources: List[Dict[str, Any]] = index.get("resources") or []

        for resource in resources:
            if resource.get("@type") == NUGET_PACKAGE_BASE_ADDRESS_TYPE:
                address = str(resource.get("@id", "")).strip()
                if address:
                    self._base_address = address.rstrip("/") + "/"
                    logger.debug("Package base address: %s", self._base_address)
                    return self._base_address

        raise FeedError(
            f"Feed does not advertise a {NUGET_PACKAGE_BASE_ADDRESS_TYPE} resource",
            url=self.feed_url,
        )

    async def list_versions(self, package_id: str) -> List[str]:
        """Return every published version of ``package_id``, lower-cased.

        A package the feed has never seen yields an empty list.
        """
        base = await self.get_package_base_address()
        url = f"{base}{package_id.lower()}/index.json"

        try:
            data = await self._get_json(url)
        except FeedError as exc:
            if exc.status_code == 404:
                logger.info("Package %s not found on feed", package_id)
                return []
            raise

        versions = data.get("versions") or []
        return [str(v).lower() for v in versions]

    async def package_version_exists(self, package_id: str, version: str) -> bool:
        """Return ``True`` if ``version`` of ``package_id`` is on the feed.

        Matching is case-insensitive and ignores build metadata.
        """
        if not package_id or not package_id.strip():
            raise InvalidInputError(
                "Package id is required",
                field="package_id",
                value=package_id,
            )

        package_id = package_id.strip()
        wanted = _strip_metadata(version)

        try:
            versions = await self.list_versions(package_id)
        except FeedError as exc:
            if exc.package_id is None:
                exc.package_id = package_id
                exc.details["package"] = package_id
            raise

        found = wanted in versions
        logger.info(
            "%s %s %s on %s",
            package_id,
            wanted,
            "exists" if found else "does not exist",
            self.feed_url,
        )
        return found


async def package_exists(
    package_id: str,
    raw_version: str,
    branch: str,
    *,
    feed_url: str = NUGET_V3_INDEX,
    client: HTTPClient,
    build_number: Optional[int] = None,
) -> bool:
    """Check whether the version derived for this build is already published.

    Args:
        package_id: NuGet package identifier.
        raw_version: 4-part build version, e.g. ``"4.0.1.12"``.
        branch: Branch being built.
        feed_url: URL of the feed's v3 service index.
        client: Shared :class:`HTTPClient`.
        build_number: Optional override of the build number.

    Returns:
        ``True`` if the feed already has the derived version.

    Raises:
        InvalidInputError: Bad package id, version or branch.
        FeedError: The feed could not be reached or is unusable.
    """
    version = derive_package_version(raw_version, branch, build_number=build_number)
    feed = NuGetFeed(client, feed_url)
    return await feed.package_version_exists(package_id, version)

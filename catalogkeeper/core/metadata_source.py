"""Maven metadata candidate source.

Every Maven-layout repository publishes, next to each artifact, a
``maven-metadata.xml`` file listing the versions available::

    <metadata>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <versioning>
        <latest>4.13.2</latest>
        <release>4.13.2</release>
        <versions>
          <version>4.12</version>
          <version>4.13.2</version>
        </versions>
      </versioning>
    </metadata>

:class:`MavenMetadataSource` downloads and caches these files through the
shared :class:`~catalogkeeper.utils.http.HTTPClient` and exposes the raw
version strings to the update selector. A repository which does not host
the artifact, or answers with garbage, simply contributes no candidates.
"""

from __future__ import annotations

import asyncio
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from catalogkeeper.constants import DEFAULT_CONCURRENCY, MAVEN_METADATA_FILE
from catalogkeeper.exceptions import NetworkError, RepositoryError
from catalogkeeper.models.dependency import Dependency
from catalogkeeper.models.repository import Repository
from catalogkeeper.utils.http import HTTPClient
from catalogkeeper.utils.logger import get_logger

logger = get_logger("metadata")


@dataclass(frozen=True)
class MavenMetadata:
    """The ``<versioning>`` block of a ``maven-metadata.xml`` file."""

    latest: Optional[str] = None
    release: Optional[str] = None
    versions: Tuple[str, ...] = field(default_factory=tuple)

    def all_versions(self) -> List[str]:
        """Every version mentioned, without duplicates, in document order."""
        seen: Dict[str, None] = {}
        for version in (self.release, self.latest, *self.versions):
            if version:
                seen.setdefault(version, None)
        return list(seen)


def parse_maven_metadata(text: str) -> MavenMetadata:
    """Parse the content of a ``maven-metadata.xml`` file.

    Raises:
        ET.ParseError: If *text* is not well-formed XML.
    """
    root = ET.fromstring(text)
    versioning = root.find("versioning")
    if versioning is None:
        return MavenMetadata()

    def _text(tag: str) -> Optional[str]:
        element = versioning.find(tag)
        if element is None or not element.text:
            return None
        return element.text.strip() or None

    versions: List[str] = []
    versions_elem = versioning.find("versions")
    if versions_elem is not None:
        for version_elem in versions_elem.findall("version"):
            if version_elem.text and version_elem.text.strip():
                versions.append(version_elem.text.strip())

    return MavenMetadata(
        latest=_text("latest"),
        release=_text("release"),
        versions=tuple(versions),
    )


def metadata_url(dependency: Dependency, repository: Repository) -> str:
    """URL of the metadata file of *dependency* in *repository*."""
    group_path = dependency.repository_group.replace(".", "/")
    return (
        f"{repository.url}/{group_path}/"
        f"{dependency.repository_name}/{MAVEN_METADATA_FILE}"
    )


class MavenMetadataSource:
    """Async-safe, per-process cache of Maven repository metadata.

    Each (repository, group, artifact) triple triggers at most one HTTP
    request. Coroutines asking for an artifact whose download is already in
    flight await that same download. A semaphore limits concurrent fetches.

    Args:
        http_client: A pre-configured :class:`HTTPClient`.
        concurrent_limit: Maximum number of metadata fetches in flight.

    Example::

        async with HTTPClient() as client:
            source = MavenMetadataSource(client)
            versions = await source.fetch_versions(
                Library("junit", "junit"), Repository(MAVEN_CENTRAL_URL)
            )
    """

    def __init__(
        self,
        http_client: HTTPClient,
        concurrent_limit: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.http_client = http_client
        self._semaphore = asyncio.Semaphore(concurrent_limit)
        self._cache: Dict[Tuple[str, str, str], MavenMetadata] = {}
        self._pending: Dict[Tuple[str, str, str], "asyncio.Task[MavenMetadata]"] = {}

    async def fetch_versions(
        self, dependency: Dependency, repository: Repository
    ) -> List[str]:
        """Return every version of *dependency* published in *repository*.

        Failures are logged and yield an empty list.
        """
        metadata = await self.get_metadata(dependency, repository)
        return metadata.all_versions()

    async def get_metadata(
        self, dependency: Dependency, repository: Repository
    ) -> MavenMetadata:
        key = (repository.url, dependency.repository_group, dependency.repository_name)

        if key in self._cache:
            return self._cache[key]

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key, dependency, repository))
            self._pending[key] = task
        # A cancelled caller must not cancel the download shared with others
        return await asyncio.shield(task)

    async def _fetch(
        self,
        key: Tuple[str, str, str],
        dependency: Dependency,
        repository: Repository,
    ) -> MavenMetadata:
        try:
            async with self._semaphore:
                metadata = await self._download(dependency, repository)
            self._cache[key] = metadata
            return metadata
        finally:
            del self._pending[key]

    def get_cached_metadata(
        self, dependency: Dependency, repository: Repository
    ) -> Optional[MavenMetadata]:
        """Return cached metadata without fetching, or ``None``."""
        key = (repository.url, dependency.repository_group, dependency.repository_name)
        return self._cache.get(key)

    async def _download(
        self, dependency: Dependency, repository: Repository
    ) -> MavenMetadata:
        url = metadata_url(dependency, repository)
        try:
            text = await self.http_client.get_text(url, auth=repository.auth)
        except RepositoryError:
            logger.debug("%s not found in %s", dependency.module_id, repository)
            return MavenMetadata()
        except NetworkError as exc:
            logger.warning(
                "Unable to fetch %s from %s: %s", dependency.module_id, repository, exc
            )
            return MavenMetadata()

        try:
            metadata = parse_maven_metadata(text)
        except ET.ParseError as exc:
            logger.warning("Invalid metadata at %s: %s", url, exc)
            return MavenMetadata()

        logger.debug(
            "Found %d version(s) of %s in %s",
            len(metadata.versions),
            dependency.module_id,
            repository,
        )
        return metadata

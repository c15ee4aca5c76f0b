from __future__ import annotations

import asyncio
import xml.etree.ElementTree as ET
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalogkeeper.constants import GRADLE_PLUGIN_PORTAL_URL, MAVEN_CENTRAL_URL
from catalogkeeper.core.metadata_source import (
    MavenMetadata,
    MavenMetadataSource,
    metadata_url,
    parse_maven_metadata,
)
from catalogkeeper.exceptions import NetworkError, RepositoryError
from catalogkeeper.models.dependency import Library, Plugin
from catalogkeeper.models.repository import Repository

JUNIT_METADATA = """\
<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>junit</groupId>
  <artifactId>junit</artifactId>
  <versioning>
    <latest>4.13.2</latest>
    <release>4.13.2</release>
    <versions>
      <version>4.12</version>
      <version>4.13-beta-1</version>
      <version>4.13.2</version>
    </versions>
    <lastUpdated>20210213164433</lastUpdated>
  </versioning>
</metadata>
"""


def _client(text: str = JUNIT_METADATA) -> MagicMock:
    client = MagicMock()
    client.get_text = AsyncMock(return_value=text)
    return client


@pytest.mark.unit
class TestParseMavenMetadata:
    """maven-metadata.xml decoding."""

    def test_versions(self) -> None:
        metadata = parse_maven_metadata(JUNIT_METADATA)

        assert metadata.latest == "4.13.2"
        assert metadata.release == "4.13.2"
        assert metadata.versions == ("4.12", "4.13-beta-1", "4.13.2")

    def test_all_versions_deduplicates(self) -> None:
        metadata = parse_maven_metadata(JUNIT_METADATA)

        assert metadata.all_versions() == ["4.13.2", "4.12", "4.13-beta-1"]

    def test_no_versioning(self) -> None:
        assert parse_maven_metadata("<metadata/>") == MavenMetadata()

    def test_blank_entries_are_skipped(self) -> None:
        metadata = parse_maven_metadata(
            "<metadata><versioning><release> </release>"
            "<versions><version>1.0</version><version/></versions>"
            "</versioning></metadata>"
        )

        assert metadata.release is None
        assert metadata.versions == ("1.0",)

    def test_malformed(self) -> None:
        with pytest.raises(ET.ParseError):
            parse_maven_metadata("<metadata>")


@pytest.mark.unit
class TestMetadataUrl:
    """Location of metadata files."""

    def test_library(self) -> None:
        url = metadata_url(Library("org.jetbrains.kotlin", "kotlin-stdlib"), Repository(MAVEN_CENTRAL_URL))

        assert url == (
            f"{MAVEN_CENTRAL_URL}/org/jetbrains/kotlin/kotlin-stdlib/maven-metadata.xml"
        )

    def test_plugin_marker(self) -> None:
        url = metadata_url(Plugin("org.jetbrains.dokka"), Repository(GRADLE_PLUGIN_PORTAL_URL))

        assert url == (
            f"{GRADLE_PLUGIN_PORTAL_URL}/org/jetbrains/dokka/"
            "org.jetbrains.dokka.gradle.plugin/maven-metadata.xml"
        )


@pytest.mark.unit
class TestMavenMetadataSource:
    """Fetching and caching of repository metadata."""

    @pytest.mark.asyncio
    async def test_fetch_versions(self) -> None:
        client = _client()
        source = MavenMetadataSource(client)

        versions = await source.fetch_versions(
            Library("junit", "junit"), Repository(MAVEN_CENTRAL_URL)
        )

        assert "4.12" in versions
        client.get_text.assert_awaited_once_with(
            f"{MAVEN_CENTRAL_URL}/junit/junit/maven-metadata.xml", auth=None
        )

    @pytest.mark.asyncio
    async def test_credentials_are_forwarded(self) -> None:
        client = _client()
        source = MavenMetadataSource(client)

        await source.fetch_versions(
            Library("junit", "junit"), Repository("https://private.example.com", "me", "pw")
        )

        assert client.get_text.await_args.kwargs["auth"] == ("me", "pw")

    @pytest.mark.asyncio
    async def test_results_are_cached(self) -> None:
        client = _client()
        source = MavenMetadataSource(client)
        library = Library("junit", "junit")
        repository = Repository(MAVEN_CENTRAL_URL)

        await source.fetch_versions(library, repository)
        await source.fetch_versions(library, repository)

        assert client.get_text.await_count == 1
        assert source.get_cached_metadata(library, repository) is not None

    @pytest.mark.asyncio
    async def test_concurrent_requests_fetch_once(self) -> None:
        client = _client()
        source = MavenMetadataSource(client, concurrent_limit=1)
        library = Library("junit", "junit")
        repository = Repository(MAVEN_CENTRAL_URL)

        await asyncio.gather(*(source.fetch_versions(library, repository) for _ in range(5)))

        assert client.get_text.await_count == 1

    @pytest.mark.asyncio
    async def test_in_flight_download_is_shared(self) -> None:
        release = asyncio.Event()

        async def get_text(url: str, auth=None) -> str:
            await release.wait()
            return JUNIT_METADATA

        client = MagicMock()
        client.get_text = AsyncMock(side_effect=get_text)
        source = MavenMetadataSource(client)
        library = Library("junit", "junit")
        repository = Repository(MAVEN_CENTRAL_URL)

        pending = asyncio.gather(
            source.fetch_versions(library, repository),
            source.fetch_versions(library, repository),
        )
        await asyncio.sleep(0)
        release.set()
        first, second = await pending

        assert first == second
        assert "4.13.2" in first
        assert client.get_text.await_count == 1
        assert source.get_cached_metadata(library, repository) is not None

    @pytest.mark.asyncio
    async def test_repositories_are_cached_separately(self) -> None:
        client = _client()
        source = MavenMetadataSource(client)
        library = Library("junit", "junit")

        await source.fetch_versions(library, Repository(MAVEN_CENTRAL_URL))
        await source.fetch_versions(library, Repository("https://other.example.com"))

        assert client.get_text.await_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            RepositoryError("Resource not found", status_code=404),
            NetworkError("HTTP 403 error", status_code=403),
        ],
    )
    async def test_http_failures_yield_no_versions(self, error: Exception) -> None:
        client = MagicMock()
        client.get_text = AsyncMock(side_effect=error)
        source = MavenMetadataSource(client)

        versions = await source.fetch_versions(
            Library("junit", "junit"), Repository(MAVEN_CENTRAL_URL)
        )

        assert versions == []

    @pytest.mark.asyncio
    async def test_invalid_xml_yields_no_versions(self) -> None:
        source = MavenMetadataSource(_client("<html>oops"))

        versions = await source.fetch_versions(
            Library("junit", "junit"), Repository(MAVEN_CENTRAL_URL)
        )

        assert versions == []

    def test_uncached_lookup(self) -> None:
        source = MavenMetadataSource(_client())

        assert (
            source.get_cached_metadata(Library("a", "b"), Repository(MAVEN_CENTRAL_URL))
            is None
        )

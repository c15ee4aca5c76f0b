"""
Centralized constants for catalogkeeper.

This module defines immutable configuration values used across
catalogkeeper, including network settings, default repositories, catalog
conventions, and logging formats. All values are intended to be treated
as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "catalogkeeper/{version} (https://github.com/catalogkeeper/catalogkeeper)"
)

# ---------------------------------------------------------------------------
# Maven repositories
# ---------------------------------------------------------------------------

#: Maven Central.
MAVEN_CENTRAL_URL: Final[str] = "https://repo.maven.apache.org/maven2"

#: Google Maven repository.
GOOGLE_MAVEN_URL: Final[str] = "https://dl.google.com/dl/android/maven2"

#: Gradle Plugin Portal (Maven layout).
GRADLE_PLUGIN_PORTAL_URL: Final[str] = "https://plugins.gradle.org/m2"

#: Repositories queried for libraries, in priority order.
DEFAULT_LIBRARY_REPOSITORIES: Final[Sequence[str]] = (
    MAVEN_CENTRAL_URL,
    GOOGLE_MAVEN_URL,
)

#: Repositories queried for plugins, in priority order.
DEFAULT_PLUGIN_REPOSITORIES: Final[Sequence[str]] = (
    GRADLE_PLUGIN_PORTAL_URL,
    MAVEN_CENTRAL_URL,
    GOOGLE_MAVEN_URL,
)

#: Name of the metadata file listing published versions of an artifact.
MAVEN_METADATA_FILE: Final[str] = "maven-metadata.xml"

#: Suffix of the marker artifact published for every Gradle plugin.
PLUGIN_MARKER_SUFFIX: Final[str] = ".gradle.plugin"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

#: Maximum number of concurrent metadata fetches.
DEFAULT_CONCURRENCY: Final[int] = 10

# ---------------------------------------------------------------------------
# Version catalog conventions
# ---------------------------------------------------------------------------

#: Default location of the version catalog, relative to the project root.
DEFAULT_VERSION_CATALOG_PATH: Final[str] = "gradle/libs.versions.toml"

#: Comment marker excluding the key on the same line from update checks.
IGNORE_UPDATES_MARKER: Final[str] = "#ignoreUpdates"

#: Catalog table holding shared version declarations.
VERSIONS_TABLE: Final[str] = "versions"

#: Catalog table holding library declarations.
LIBRARIES_TABLE: Final[str] = "libraries"

#: Catalog table holding plugin declarations.
PLUGINS_TABLE: Final[str] = "plugins"

#: Catalog table holding bundles (read and ignored).
BUNDLES_TABLE: Final[str] = "bundles"

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Skip dependencies whose current version is not a single static version.
DEFAULT_ONLY_CHECK_STATIC_VERSIONS: Final[bool] = True

#: Policy applied when none is configured (``None`` means no extra filtering).
DEFAULT_POLICY: Final[None] = None

#: Entry-point group scanned for third-party policies.
POLICY_ENTRY_POINT_GROUP: Final[str] = "catalogkeeper.policies"

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading catalog files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

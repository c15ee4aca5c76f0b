"""
Core functionality exports for catalogkeeper.

This module provides convenient access to the core subsystems of
catalogkeeper. Importing from here keeps user-facing imports clean and
stable:

    from catalogkeeper.core import CatalogParser, CatalogRewriter
"""

from __future__ import annotations

from catalogkeeper.core.catalog_parser import CatalogParser
from catalogkeeper.core.rewriter import CatalogRewriter, Replacement
from catalogkeeper.core.selector import CandidateSource, UpdateResult, UpdateSelector
from catalogkeeper.core.metadata_source import (
    MavenMetadata,
    MavenMetadataSource,
    parse_maven_metadata,
)
from catalogkeeper.core.checker import (
    CatalogUpdateResult,
    DependencyUpdate,
    DependencyUpdateChecker,
)

__all__ = [
    "CatalogParser",
    "CatalogRewriter",
    "Replacement",
    "CandidateSource",
    "UpdateResult",
    "UpdateSelector",
    "MavenMetadata",
    "MavenMetadataSource",
    "parse_maven_metadata",
    "CatalogUpdateResult",
    "DependencyUpdate",
    "DependencyUpdateChecker",
]

"""
Unified data model exports for catalogkeeper.

This module re-exports the core data models to provide a stable and
convenient public API. Users can import models directly from
``catalogkeeper.models`` instead of individual submodules.

Example:
    >>> from catalogkeeper.models import parse_version, Library, Repository
"""

from __future__ import annotations

from catalogkeeper.models.version import (
    Exact,
    GradleVersion,
    Latest,
    Prefix,
    Range,
    Snapshot,
    StaticVersion,
    Unknown,
    VersionKind,
    is_static,
    parse_version,
)
from catalogkeeper.models.declared import (
    DeclaredVersion,
    Reference,
    ResolvedVersion,
    Rich,
    Simple,
)
from catalogkeeper.models.dependency import Dependency, Library, Plugin
from catalogkeeper.models.repository import ComponentFilter, PackageSpec, Repository
from catalogkeeper.models.catalog import (
    CatalogInfo,
    CatalogSection,
    Ignores,
    ParsedCatalog,
    Point,
    Positions,
    VersionCatalog,
    VersionPosition,
)

__all__ = [
    "GradleVersion",
    "VersionKind",
    "Exact",
    "Snapshot",
    "Range",
    "Prefix",
    "Latest",
    "Unknown",
    "StaticVersion",
    "parse_version",
    "is_static",
    "DeclaredVersion",
    "ResolvedVersion",
    "Simple",
    "Rich",
    "Reference",
    "Dependency",
    "Library",
    "Plugin",
    "Repository",
    "ComponentFilter",
    "PackageSpec",
    "VersionCatalog",
    "CatalogInfo",
    "CatalogSection",
    "ParsedCatalog",
    "Positions",
    "Ignores",
    "Point",
    "VersionPosition",
]

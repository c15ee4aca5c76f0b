"""
Version catalog data model for catalogkeeper.

This module holds the parsed content of a ``libs.versions.toml`` file
(:class:`VersionCatalog`) together with the source information needed to
rewrite it in place (:class:`CatalogInfo`): the position of each version
literal and the keys excluded with an ``#ignoreUpdates`` comment.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, Mapping, Optional, Tuple

from catalogkeeper.models.declared import ResolvedVersion
from catalogkeeper.models.dependency import Dependency, Library, Plugin


class CatalogSection(str, Enum):
    """Tables of a version catalog that carry versions."""

    VERSIONS = "versions"
    LIBRARIES = "libraries"
    PLUGINS = "plugins"


@dataclass(frozen=True, order=True)
class Point:
    """A 0-based ``(line, column)`` location in the catalog text."""

    line: int
    column: int


@dataclass(frozen=True)
class VersionPosition:
    """
    Location of a version literal in the catalog text.

    Attributes:
        start: Position of the opening quote.
        end: Position just after the closing quote (exclusive).
        value_text: The literal exactly as written, quotes included.
    """

    start: Point
    end: Point
    value_text: str

    @property
    def nb_lines(self) -> int:
        return self.end.line - self.start.line + 1


@dataclass(frozen=True)
class Positions:
    """Version literal positions per catalog table."""

    versions: Mapping[str, VersionPosition] = field(default_factory=dict)
    libraries: Mapping[str, VersionPosition] = field(default_factory=dict)
    plugins: Mapping[str, VersionPosition] = field(default_factory=dict)

    def get(self, section: CatalogSection, key: str) -> Optional[VersionPosition]:
        return getattr(self, section.value).get(key)


@dataclass(frozen=True)
class Ignores:
    """Keys marked with an ``#ignoreUpdates`` comment."""

    versions: FrozenSet[str] = frozenset()
    libraries: FrozenSet[str] = frozenset()
    plugins: FrozenSet[str] = frozenset()

    def is_excluded(self, key: str, dependency: Dependency) -> bool:
        """
        Return whether *dependency* declared under *key* must be skipped.

        A dependency is skipped when its own key is marked, or when it
        references a marked ``[versions]`` entry.
        """
        keys = self.plugins if isinstance(dependency, Plugin) else self.libraries
        if key in keys:
            return True
        ref = getattr(dependency.version, "ref", None)
        return ref is not None and ref in self.versions


@dataclass(frozen=True)
class VersionCatalog:
    """
    Parsed content of a version catalog.

    Attributes:
        versions: ``[versions]`` entries by name.
        libraries: ``[libraries]`` entries by key.
        plugins: ``[plugins]`` entries by key.
    """

    versions: Dict[str, ResolvedVersion] = field(default_factory=dict)
    libraries: Dict[str, Library] = field(default_factory=dict)
    plugins: Dict[str, Plugin] = field(default_factory=dict)

    def dependencies(self) -> Iterator[Tuple[str, Dependency]]:
        """Iterate ``(key, dependency)`` over libraries then plugins."""
        yield from self.libraries.items()
        yield from self.plugins.items()

    def __len__(self) -> int:
        return len(self.libraries) + len(self.plugins)


@dataclass(frozen=True)
class CatalogInfo:
    """Source information captured while parsing the catalog."""

    positions: Positions = field(default_factory=Positions)
    ignores: Ignores = field(default_factory=Ignores)


@dataclass(frozen=True)
class ParsedCatalog:
    """A catalog file together with its source information."""

    catalog: VersionCatalog
    info: CatalogInfo

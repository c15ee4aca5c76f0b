"""Gradle version catalog parser.

Reads a ``libs.versions.toml`` file in two passes:

1. **Semantic pass**: the document is decoded with ``tomli`` and turned into
   a :class:`~catalogkeeper.models.catalog.VersionCatalog`: shared versions,
   libraries and plugins with their declared versions.
2. **Source pass**: a lightweight scanner walks the raw text to record where
   each version literal sits (:class:`~catalogkeeper.models.catalog.VersionPosition`)
   and which keys carry an ``#ignoreUpdates`` comment. The rewriter later uses
   these positions to edit the file in place without re-serializing it.

Supported notations::

    [versions]
    kotlin = "2.1.20"                                   # simple
    okhttp = { strictly = "[4.0,5.0[", prefer = "4.12.0" }  # rich

    [libraries]
    junit = "junit:junit:4.13.2"                        # string notation
    okhttp = { module = "com.squareup.okhttp3:okhttp", version.ref = "okhttp" }
    guava = { group = "com.google.guava", name = "guava", version = "33.0-jre" }

    [plugins]
    dokka = "org.jetbrains.dokka:2.0.0"
    kotlin = { id = "org.jetbrains.kotlin.jvm", version.ref = "kotlin" }

Typical usage::

    from catalogkeeper.core.catalog_parser import CatalogParser

    parsed = CatalogParser().parse_file("gradle/libs.versions.toml")
    for key, dependency in parsed.catalog.dependencies():
        print(key, dependency.module_id, dependency.version)
"""

from __future__ import annotations

import bisect
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

import tomli

from catalogkeeper.constants import (
    BUNDLES_TABLE,
    IGNORE_UPDATES_MARKER,
    LIBRARIES_TABLE,
    PLUGINS_TABLE,
    VERSIONS_TABLE,
)
from catalogkeeper.exceptions import ParseError
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
from catalogkeeper.models.declared import (
    DeclaredVersion,
    Reference,
    ResolvedVersion,
    Rich,
    Simple,
)
from catalogkeeper.models.dependency import Library, Plugin
from catalogkeeper.models.version import parse_version
from catalogkeeper.utils import get_logger, safe_read_file

logger = get_logger("parser")

_RICH_KEYS = {"require", "strictly", "prefer", "reject", "rejectAll"}
_BARE_KEY_CHARS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-"
)
_VALUE_TERMINATORS = frozenset(",}]#\r\n")


class CatalogParser:
    """Parser for Gradle version catalogs.

    Example::

        >>> parser = CatalogParser()
        >>> parsed = parser.parse_string('[versions]\\nkotlin = "2.1.20"\\n')
        >>> parsed.catalog.versions["kotlin"]
        Simple(version=Exact(text='2.1.20'))
        >>> parsed.info.positions.versions["kotlin"].value_text
        '"2.1.20"'
    """

    def __init__(self) -> None:
        self.logger = logger

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse_file(self, file_path: Union[str, Path]) -> ParsedCatalog:
        """Parse a catalog file from disk.

        Args:
            file_path: Path of the ``.versions.toml`` file.

        Returns:
            The catalog and its source information.

        Raises:
            FileOperationError: If the file cannot be read.
            ParseError: If the file is not a valid catalog.
        """
        path = Path(file_path)
        self.logger.debug("Parsing version catalog %s", path)
        content = safe_read_file(path)
        return self.parse_string(content, source_file_path=str(path))

    def parse_string(
        self, content: str, source_file_path: Optional[str] = None
    ) -> ParsedCatalog:
        """Parse catalog text.

        Args:
            content: Raw TOML text.
            source_file_path: Used in error messages only.

        Returns:
            The catalog and its source information.

        Raises:
            ParseError: If the text is not valid TOML or not a valid catalog.
        """
        try:
            document = tomli.loads(content)
        except tomli.TOMLDecodeError as exc:
            raise ParseError(
                f"Invalid TOML: {exc}",
                line_number=getattr(exc, "lineno", None),
                file_path=source_file_path,
            ) from exc

        catalog = self._build_catalog(document, source_file_path)
        info = _SourceScanner(content, source_file_path).scan()

        self.logger.debug(
            "Parsed %d version(s), %d librarie(s), %d plugin(s)",
            len(catalog.versions),
            len(catalog.libraries),
            len(catalog.plugins),
        )
        return ParsedCatalog(catalog=catalog, info=info)

    # ------------------------------------------------------------------
    # Semantic pass
    # ------------------------------------------------------------------

    def _build_catalog(
        self, document: Mapping[str, Any], source: Optional[str]
    ) -> VersionCatalog:
        versions: Dict[str, ResolvedVersion] = {}
        for name, value in self._table(document, VERSIONS_TABLE, source).items():
            declared = self._parse_declared(value, f"{VERSIONS_TABLE}.{name}", source)
            if isinstance(declared, Reference) or declared is None:
                raise ParseError(
                    f"Version '{name}' must be a string or a rich version",
                    file_path=source,
                )
            versions[name] = declared

        libraries: Dict[str, Library] = {}
        for key, value in self._table(document, LIBRARIES_TABLE, source).items():
            libraries[key] = self._parse_library(key, value, source)

        plugins: Dict[str, Plugin] = {}
        for key, value in self._table(document, PLUGINS_TABLE, source).items():
            plugins[key] = self._parse_plugin(key, value, source)

        # Bundles only group library keys, there is nothing to update
        self._table(document, BUNDLES_TABLE, source)

        return VersionCatalog(versions=versions, libraries=libraries, plugins=plugins)

    def _table(
        self, document: Mapping[str, Any], name: str, source: Optional[str]
    ) -> Mapping[str, Any]:
        table = document.get(name, {})
        if not isinstance(table, dict):
            raise ParseError(f"[{name}] must be a table", file_path=source)
        return table

    def _parse_library(self, key: str, value: Any, source: Optional[str]) -> Library:
        if isinstance(value, str):
            parts = value.split(":")
            if len(parts) not in (2, 3) or not all(parts[:2]):
                raise ParseError(
                    f"Invalid library notation for '{key}': {value}",
                    file_path=source,
                )
            version = Simple(parse_version(parts[2])) if len(parts) == 3 else None
            return Library(group=parts[0], name=parts[1], version=version)

        if not isinstance(value, dict):
            raise ParseError(f"Invalid library '{key}'", file_path=source)

        if "module" in value:
            group, sep, name = str(value["module"]).partition(":")
            if not sep or not group or not name:
                raise ParseError(
                    f"Invalid module for library '{key}': {value['module']}",
                    file_path=source,
                )
        elif "group" in value and "name" in value:
            group, name = str(value["group"]), str(value["name"])
        else:
            raise ParseError(
                f"Library '{key}' needs 'module' or 'group' and 'name'",
                file_path=source,
            )

        version = self._parse_declared(
            value.get("version"), f"{LIBRARIES_TABLE}.{key}", source
        )
        return Library(group=group, name=name, version=version)

    def _parse_plugin(self, key: str, value: Any, source: Optional[str]) -> Plugin:
        if isinstance(value, str):
            plugin_id, sep, raw_version = value.partition(":")
            if not plugin_id:
                raise ParseError(
                    f"Invalid plugin notation for '{key}': {value}", file_path=source
                )
            version = Simple(parse_version(raw_version)) if sep else None
            return Plugin(id=plugin_id, version=version)

        if not isinstance(value, dict) or "id" not in value:
            raise ParseError(f"Plugin '{key}' needs an 'id'", file_path=source)

        version = self._parse_declared(
            value.get("version"), f"{PLUGINS_TABLE}.{key}", source
        )
        return Plugin(id=str(value["id"]), version=version)

    def _parse_declared(
        self, value: Any, where: str, source: Optional[str]
    ) -> Optional[DeclaredVersion]:
        if value is None:
            return None
        if isinstance(value, str):
            return Simple(parse_version(value))
        if not isinstance(value, dict):
            raise ParseError(f"Invalid version for {where}: {value!r}", file_path=source)

        if "ref" in value:
            return Reference(str(value["ref"]))

        unknown = set(value) - _RICH_KEYS
        if unknown:
            raise ParseError(
                f"Unknown rich version key(s) for {where}: {', '.join(sorted(unknown))}",
                file_path=source,
            )

        def constraint(name: str):
            raw = value.get(name)
            if raw is None:
                return None
            if not isinstance(raw, str):
                raise ParseError(
                    f"'{name}' of {where} must be a string", file_path=source
                )
            return parse_version(raw)

        reject_all = value.get("rejectAll", False)
        if not isinstance(reject_all, bool):
            raise ParseError(
                f"'rejectAll' of {where} must be a boolean", file_path=source
            )

        return Rich(
            require=constraint("require"),
            strictly=constraint("strictly"),
            prefer=constraint("prefer"),
            reject=constraint("reject"),
            reject_all=reject_all,
        )


class _SourceScanner:
    """Single forward pass over catalog text recording version literal spans.

    Only the subset of TOML needed to find string values and comments is
    understood; the text has already been validated by ``tomli``.
    """

    _SECTIONS = {section.value: section for section in CatalogSection}

    def __init__(self, text: str, source: Optional[str] = None) -> None:
        self.text = text
        self.source = source
        self.pos = 0
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)

        self._section: Optional[CatalogSection] = None
        self._key: Optional[str] = None
        self._key_line = -1

        self._positions: Dict[CatalogSection, Dict[str, VersionPosition]] = {
            section: {} for section in CatalogSection
        }
        self._ignored: Dict[CatalogSection, Set[str]] = {
            section: set() for section in CatalogSection
        }

    def scan(self) -> CatalogInfo:
        while not self._eof():
            self._skip_spaces()
            if self._eof():
                break
            char = self.text[self.pos]
            if char in "\r\n":
                self.pos += 1
            elif char == "#":
                self._comment()
            elif char == "[":
                self._table_header()
            else:
                self._key_value()

        return CatalogInfo(
            positions=Positions(
                versions=self._positions[CatalogSection.VERSIONS],
                libraries=self._positions[CatalogSection.LIBRARIES],
                plugins=self._positions[CatalogSection.PLUGINS],
            ),
            ignores=Ignores(
                versions=frozenset(self._ignored[CatalogSection.VERSIONS]),
                libraries=frozenset(self._ignored[CatalogSection.LIBRARIES]),
                plugins=frozenset(self._ignored[CatalogSection.PLUGINS]),
            ),
        )

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _table_header(self) -> None:
        self.pos += 1
        array_table = self._peek() == "["
        if array_table:
            self.pos += 1
        self._skip_spaces()
        name = self._key_text()
        self._skip_spaces()
        self._expect("]")
        if array_table:
            self._expect("]")

        self._section = None if array_table else self._SECTIONS.get(name)
        self._key = None
        self._key_line = -1

    def _key_value(self) -> None:
        key_line = self._point(self.pos).line
        key = self._key_text()
        self._skip_spaces()
        self._expect("=")
        self._skip_spaces()

        self._key = key
        self._key_line = key_line

        kind, start, end = self._value(top_level=True)
        if kind == "string" and self._section is not None:
            self._record(self._section, key, start, end)

    def _record(self, section: CatalogSection, key: str, start: int, end: int) -> None:
        self._positions[section][key] = VersionPosition(
            start=self._point(start),
            end=self._point(end),
            value_text=self.text[start:end],
        )

    def _comment(self) -> None:
        start = self.pos
        while not self._eof() and self.text[self.pos] not in "\r\n":
            self.pos += 1
        comment = self.text[start : self.pos]
        if (
            comment.startswith(IGNORE_UPDATES_MARKER)
            and self._key is not None
            and self._section is not None
            and self._point(start).line == self._key_line
        ):
            self._ignored[self._section].add(self._key)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def _value(self, top_level: bool = False) -> Tuple[str, int, int]:
        start = self.pos
        char = self._peek()
        if char in ('"', "'"):
            self._string()
            return "string", start, self.pos
        if char == "{":
            self._inline_table(top_level)
            return "table", start, self.pos
        if char == "[":
            self._array()
            return "array", start, self.pos

        while not self._eof() and self.text[self.pos] not in _VALUE_TERMINATORS:
            self.pos += 1
        if self.pos == start:
            self._fail("Expected a value")
        return "other", start, self.pos

    def _string(self) -> None:
        quote = self.text[self.pos]
        if self.text.startswith(quote * 3, self.pos):
            self.pos += 3
            closing = quote * 3
            while not self._eof():
                if quote == '"' and self.text[self.pos] == "\\":
                    self.pos += 2
                    continue
                if self.text.startswith(closing, self.pos):
                    self.pos += 3
                    # Up to two quotes may directly precede the delimiter
                    extra = 0
                    while extra < 2 and self._peek() == quote:
                        self.pos += 1
                        extra += 1
                    return
                self.pos += 1
            self._fail("Unterminated multi-line string")

        self.pos += 1
        while not self._eof():
            char = self.text[self.pos]
            if quote == '"' and char == "\\":
                self.pos += 2
                continue
            if char == quote:
                self.pos += 1
                return
            if char in "\r\n":
                break
            self.pos += 1
        self._fail("Unterminated string")

    def _inline_table(self, top_level: bool) -> None:
        self._expect("{")
        self._skip_blank()
        if self._peek() == "}":
            self.pos += 1
            return

        while True:
            self._skip_blank()
            key = self._key_text()
            self._skip_spaces()
            self._expect("=")
            self._skip_spaces()
            kind, start, end = self._value()
            if (
                top_level
                and key == "version"
                and kind == "string"
                and self._key is not None
                and self._section in (CatalogSection.LIBRARIES, CatalogSection.PLUGINS)
            ):
                self._record(self._section, self._key, start, end)

            self._skip_blank()
            char = self._peek()
            if char == ",":
                self.pos += 1
                continue
            if char == "}":
                self.pos += 1
                return
            self._fail("Expected ',' or '}' in inline table")

    def _array(self) -> None:
        self._expect("[")
        while True:
            self._skip_blank()
            if self._peek() == "]":
                self.pos += 1
                return
            self._value()
            self._skip_blank()
            char = self._peek()
            if char == ",":
                self.pos += 1
            elif char != "]":
                self._fail("Expected ',' or ']' in array")

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def _key_text(self) -> str:
        parts: List[str] = []
        while True:
            char = self._peek()
            if char in ('"', "'"):
                start = self.pos
                self._string()
                raw = self.text[start + 1 : self.pos - 1]
                parts.append(_unescape_key(raw) if char == '"' else raw)
            else:
                start = self.pos
                while not self._eof() and self.text[self.pos] in _BARE_KEY_CHARS:
                    self.pos += 1
                if self.pos == start:
                    self._fail("Expected a key")
                parts.append(self.text[start : self.pos])

            self._skip_spaces()
            if self._peek() != ".":
                return ".".join(parts)
            self.pos += 1
            self._skip_spaces()

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _eof(self) -> bool:
        return self.pos >= len(self.text)

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _expect(self, char: str) -> None:
        if self._peek() != char:
            self._fail(f"Expected '{char}'")
        self.pos += 1

    def _skip_spaces(self) -> None:
        while self._peek() in (" ", "\t"):
            self.pos += 1

    def _skip_blank(self) -> None:
        """Skip whitespace, newlines and comments (inside arrays and tables)."""
        while not self._eof():
            char = self.text[self.pos]
            if char in " \t\r\n":
                self.pos += 1
            elif char == "#":
                self._comment()
            else:
                return

    def _point(self, index: int) -> Point:
        line = bisect.bisect_right(self._line_starts, index) - 1
        return Point(line=line, column=index - self._line_starts[line])

    def _fail(self, message: str) -> None:
        point = self._point(min(self.pos, len(self.text)))
        line_start = self._line_starts[point.line]
        line_end = self.text.find("\n", line_start)
        line_content = self.text[line_start : line_end if line_end >= 0 else None]
        raise ParseError(
            message,
            line_number=point.line + 1,
            line_content=line_content.rstrip("\r"),
            file_path=self.source,
        )


def _unescape_key(raw: str) -> str:
    # Only quote and backslash escapes are handled
    return raw.replace('\\"', '"').replace("\\\\", "\\")

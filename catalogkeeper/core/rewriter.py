"""In-place version catalog rewriting.

Updates are applied as text surgery on the original file rather than by
re-serializing the parsed catalog, so comments, quoting style, alignment and
line endings all survive. Only the version literals that changed are
touched.

Replacements are keyed by what they edit: when several libraries share one
``version.ref``, a single edit of the ``[versions]`` entry is produced.

Typical usage::

    from catalogkeeper.core.rewriter import CatalogRewriter

    rewriter = CatalogRewriter()
    edits = rewriter.rewrite(
        "gradle/libs.versions.toml",
        parsed,
        library_updates={"okhttp": parse_version("4.12.0")},
    )
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from catalogkeeper.models.catalog import (
    CatalogSection,
    ParsedCatalog,
    Positions,
    VersionCatalog,
    VersionPosition,
)
from catalogkeeper.models.declared import Reference, Simple
from catalogkeeper.models.dependency import Dependency
from catalogkeeper.models.version import StaticVersion
from catalogkeeper.utils.filesystem import atomic_write, safe_read_file
from catalogkeeper.utils.logger import get_logger

logger = get_logger("rewriter")


@dataclass(frozen=True)
class Replacement:
    """
    A planned edit of one version literal.

    Attributes:
        position: Where the literal sits in the catalog.
        current_text: Version text to replace.
        updated_text: Version text to write instead.
    """

    position: VersionPosition
    current_text: str
    updated_text: str

    @property
    def replaced_text(self) -> str:
        """The literal with its version swapped, quotes and prefix kept."""
        value_text = self.position.value_text
        head, sep, tail = value_text.rpartition(self.current_text)
        if not sep:
            return value_text
        return head + self.updated_text + tail

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.position.start.line, self.position.start.column)


def _split_lines(content: str) -> List[str]:
    """Split on ``\\n`` only, keeping terminators (``\\r\\n`` stays intact)."""
    parts = content.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


class CatalogRewriter:
    """Compute and apply version replacements on a catalog file."""

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def compute_replacements(
        self,
        catalog: VersionCatalog,
        positions: Positions,
        library_updates: Optional[Mapping[str, StaticVersion]] = None,
        plugin_updates: Optional[Mapping[str, StaticVersion]] = None,
    ) -> List[Replacement]:
        """
        Turn per-key updates into deduplicated, ordered replacements.

        Args:
            catalog: Parsed catalog.
            positions: Literal positions recorded while parsing.
            library_updates: New version by library key.
            plugin_updates: New version by plugin key.

        Returns:
            Replacements sorted by position. Entries without a recorded
            position (rich versions, unknown keys) are left out.
        """
        planned: Dict[Tuple[CatalogSection, str], Replacement] = {}

        for section, updates, dependencies in (
            (CatalogSection.LIBRARIES, library_updates or {}, catalog.libraries),
            (CatalogSection.PLUGINS, plugin_updates or {}, catalog.plugins),
        ):
            for key, updated in updates.items():
                dependency = dependencies.get(key)
                if dependency is None:
                    logger.debug("No %s entry named %s", section.value, key)
                    continue
                planned_key, replacement = self._plan(
                    section, key, dependency, updated, catalog, positions
                )
                if replacement is not None:
                    planned[planned_key] = replacement

        return sorted(planned.values(), key=lambda rep: rep.sort_key)

    def _plan(
        self,
        section: CatalogSection,
        key: str,
        dependency: Dependency,
        updated: StaticVersion,
        catalog: VersionCatalog,
        positions: Positions,
    ) -> Tuple[Tuple[CatalogSection, str], Optional[Replacement]]:
        version = dependency.version

        if isinstance(version, Reference):
            planned_key = (CatalogSection.VERSIONS, version.ref)
            position = positions.get(CatalogSection.VERSIONS, version.ref)
            current = catalog.versions.get(version.ref)
            if position is None or current is None:
                logger.debug("No position for version %s, skipping", version.ref)
                return planned_key, None
            return planned_key, Replacement(position, str(current), str(updated))

        planned_key = (section, key)
        position = positions.get(section, key)
        if not isinstance(version, Simple) or position is None:
            logger.debug("No position for %s %s, skipping", section.value, key)
            return planned_key, None
        return planned_key, Replacement(position, str(version), str(updated))

    # ------------------------------------------------------------------
    # Applying
    # ------------------------------------------------------------------

    def apply(self, content: str, replacements: Iterable[Replacement]) -> str:
        """
        Apply *replacements* to catalog text.

        Text outside the replaced literals is copied through unchanged. A
        literal which cannot be found where expected is logged and skipped.

        Args:
            content: Original catalog text.
            replacements: Replacements from :meth:`compute_replacements`.

        Returns:
            The rewritten text; identical to *content* when there is
            nothing to replace.
        """
        by_line: Dict[int, List[Replacement]] = {}
        for replacement in replacements:
            by_line.setdefault(replacement.position.start.line, []).append(replacement)
        if not by_line:
            return content

        lines = _split_lines(content)
        output: List[str] = []
        index = 0

        while index < len(lines):
            on_line = by_line.get(index)
            if not on_line:
                output.append(lines[index])
                index += 1
                continue

            text = lines[index]
            next_index = index + 1
            # Right to left so that earlier columns stay valid
            for replacement in sorted(
                on_line, key=lambda rep: rep.position.start.column, reverse=True
            ):
                if replacement.position.nb_lines > 1:
                    text, next_index = self._replace_multiline(
                        lines, index, text, replacement, next_index
                    )
                else:
                    text = self._replace_in_line(text, replacement)

            output.append(text)
            index = next_index

        return "".join(output)

    def _replace_in_line(self, line: str, replacement: Replacement) -> str:
        value_text = replacement.position.value_text
        column = replacement.position.start.column

        if line[column : column + len(value_text)] == value_text:
            end = column + len(value_text)
            return line[:column] + replacement.replaced_text + line[end:]

        found = line.find(value_text)
        if found < 0:
            logger.warning(
                "Version literal %s not found on line %d, skipping",
                value_text,
                replacement.position.start.line + 1,
            )
            return line
        return line[:found] + replacement.replaced_text + line[found + len(value_text) :]

    def _replace_multiline(
        self,
        lines: List[str],
        index: int,
        text: str,
        replacement: Replacement,
        next_index: int,
    ) -> Tuple[str, int]:
        position = replacement.position
        end = position.end
        if end.line >= len(lines):
            logger.warning(
                "Version literal at line %d runs past the end of file, skipping",
                position.start.line + 1,
            )
            return text, next_index

        span = "".join(lines[index : end.line + 1])
        column = position.start.column
        if span[column : column + len(position.value_text)] != position.value_text:
            logger.warning(
                "Multi-line version literal at line %d changed, skipping",
                position.start.line + 1,
            )
            return text, next_index

        tail = lines[end.line][end.column :]
        return text[:column] + replacement.replaced_text + tail, max(next_index, end.line + 1)

    # ------------------------------------------------------------------
    # File level
    # ------------------------------------------------------------------

    def rewrite(
        self,
        catalog_path: Union[str, Path],
        parsed: ParsedCatalog,
        library_updates: Optional[Mapping[str, StaticVersion]] = None,
        plugin_updates: Optional[Mapping[str, StaticVersion]] = None,
    ) -> int:
        """
        Rewrite the catalog file in place.

        The new content is written to a temporary file in the same
        directory which then replaces the catalog atomically. The file is
        not touched when there is nothing to replace.

        Returns:
            Number of literals replaced.

        Raises:
            FileOperationError: Reading or writing failed; the original file
                is left untouched.
        """
        replacements = self.compute_replacements(
            parsed.catalog,
            parsed.info.positions,
            library_updates=library_updates,
            plugin_updates=plugin_updates,
        )
        if not replacements:
            logger.debug("Nothing to rewrite in %s", catalog_path)
            return 0

        content = safe_read_file(catalog_path)
        atomic_write(catalog_path, self.apply(content, replacements))
        logger.info("Rewrote %d version(s) in %s", len(replacements), catalog_path)
        return len(replacements)

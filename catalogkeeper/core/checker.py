"""Dependency update checking for a whole version catalog.

:class:`DependencyUpdateChecker` is the orchestration layer between the
catalog parser and the update selector. It parses the catalog, drops the
dependencies excluded by configuration or by ``#ignoreUpdates`` comments,
then asks the selector about every remaining dependency concurrently.

Typical usage::

    from catalogkeeper.utils.http import HTTPClient
    from catalogkeeper.core.metadata_source import MavenMetadataSource
    from catalogkeeper.core.selector import UpdateSelector
    from catalogkeeper.core.checker import DependencyUpdateChecker

    async with HTTPClient() as http:
        selector = UpdateSelector(
            MavenMetadataSource(http),
            config.repositories,
            config.plugin_repositories,
        )
        checker = DependencyUpdateChecker(config, selector)
        result = await checker.check("gradle/libs.versions.toml")

        for update in result.updates:
            print(f"{update.module_id}: {update.current_text} → {update.updated_text}")
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from catalogkeeper.config import CatalogKeeperConfig
from catalogkeeper.core.catalog_parser import CatalogParser
from catalogkeeper.core.selector import UpdateResult, UpdateSelector
from catalogkeeper.models.catalog import ParsedCatalog
from catalogkeeper.models.declared import ResolvedVersion
from catalogkeeper.models.dependency import Dependency
from catalogkeeper.models.repository import Repository
from catalogkeeper.models.version import StaticVersion
from catalogkeeper.utils.logger import get_logger
from catalogkeeper.utils.version_utils import get_update_type

logger = get_logger("checker")


@dataclass(frozen=True)
class DependencyUpdate:
    """
    An available update for one catalog entry.

    Attributes:
        key: Key of the entry in ``[libraries]`` or ``[plugins]``.
        dependency: The declared dependency.
        current: Declared version, resolved against ``[versions]``.
        updated: Version to update to.
        repository: Repository the update was found in.
    """

    key: str
    dependency: Dependency
    current: ResolvedVersion
    updated: StaticVersion
    repository: Repository

    @property
    def module_id(self) -> str:
        return self.dependency.module_id

    @property
    def current_text(self) -> str:
        return str(self.current)

    @property
    def updated_text(self) -> str:
        return str(self.updated)

    @property
    def update_type(self) -> str:
        return get_update_type(self.current.probable_selected_version, self.updated)

    def to_json(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "module": self.module_id,
            "type": "plugin" if self.dependency.is_plugin else "library",
            "current": self.current_text,
            "updated": self.updated_text,
            "update_type": self.update_type,
            "repository": self.repository.url,
        }


@dataclass
class CatalogUpdateResult:
    """
    Updates found in one catalog.

    Attributes:
        parsed: The parsed catalog, kept for rewriting.
        libraries: Library updates, sorted by module id.
        plugins: Plugin updates, sorted by module id.
        skipped: Keys excluded by configuration or ignore comments.
        failed: Keys whose check raised an error.
    """

    parsed: ParsedCatalog
    libraries: List[DependencyUpdate] = field(default_factory=list)
    plugins: List[DependencyUpdate] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def updates(self) -> List[DependencyUpdate]:
        return self.libraries + self.plugins

    @property
    def has_updates(self) -> bool:
        return bool(self.libraries or self.plugins)

    @property
    def library_updates(self) -> Dict[str, StaticVersion]:
        """New version by library key, as expected by the rewriter."""
        return {update.key: update.updated for update in self.libraries}

    @property
    def plugin_updates(self) -> Dict[str, StaticVersion]:
        """New version by plugin key, as expected by the rewriter."""
        return {update.key: update.updated for update in self.plugins}

    def restricted_to(self, keys: List[str]) -> "CatalogUpdateResult":
        """Return a copy holding only the updates whose key is in *keys*."""
        wanted = set(keys)
        return CatalogUpdateResult(
            parsed=self.parsed,
            libraries=[u for u in self.libraries if u.key in wanted],
            plugins=[u for u in self.plugins if u.key in wanted],
            skipped=list(self.skipped),
            failed=list(self.failed),
        )


class DependencyUpdateChecker:
    """Async update checker for every dependency of a version catalog.

    Args:
        config: Loaded configuration, used for exclusions.
        selector: Selector deciding the update of each dependency.
        parser: Catalog parser; a new :class:`CatalogParser` by default.
    """

    def __init__(
        self,
        config: CatalogKeeperConfig,
        selector: UpdateSelector,
        parser: Optional[CatalogParser] = None,
    ) -> None:
        self.config = config
        self.selector = selector
        self.parser = parser or CatalogParser()

    async def check(self, catalog_path: Union[str, Path]) -> CatalogUpdateResult:
        """Parse *catalog_path* and look for updates.

        Raises:
            ParseError: The catalog is not a valid version catalog.
            FileOperationError: The catalog cannot be read.
        """
        parsed = self.parser.parse_file(catalog_path)
        return await self.check_parsed(parsed)

    async def check_parsed(self, parsed: ParsedCatalog) -> CatalogUpdateResult:
        """Look for updates of every dependency of an already parsed catalog.

        Errors for individual dependencies are logged and recorded in
        :attr:`CatalogUpdateResult.failed` so that one bad dependency does
        not block the rest.
        """
        result = CatalogUpdateResult(parsed=parsed)
        to_check: List[Tuple[str, Dependency]] = []

        for key, dependency in parsed.catalog.dependencies():
            if self._is_excluded(parsed, key, dependency):
                logger.debug("Skipping excluded %s (%s)", key, dependency.module_id)
                result.skipped.append(key)
                continue
            to_check.append((key, dependency))

        logger.info("Checking %d dependencies for updates", len(to_check))

        tasks = [
            self.selector.select(dependency, parsed.catalog.versions)
            for _, dependency in to_check
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        self._process_check_results(result, to_check, outcomes)

        result.libraries.sort(key=lambda update: update.module_id)
        result.plugins.sort(key=lambda update: update.module_id)
        return result

    def _is_excluded(self, parsed: ParsedCatalog, key: str, dependency: Dependency) -> bool:
        return self.config.is_excluded(key, dependency) or parsed.info.ignores.is_excluded(
            key, dependency
        )

    def _process_check_results(
        self,
        result: CatalogUpdateResult,
        checked: List[Tuple[str, Dependency]],
        outcomes: List[Union[Optional[UpdateResult], BaseException]],
    ) -> None:
        for (key, dependency), outcome in zip(checked, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Error checking %s (%s): %s", key, dependency.module_id, outcome
                )
                result.failed.append(key)
                continue
            if outcome is None:
                continue

            update = DependencyUpdate(
                key=key,
                dependency=dependency,
                current=outcome.current_version,
                updated=outcome.updated_version,
                repository=outcome.repository,
            )
            if dependency.is_plugin:
                result.plugins.append(update)
            else:
                result.libraries.append(update)

"""Update selection for a single dependency.

Given a dependency and its declared version, :class:`UpdateSelector` asks a
candidate source for the versions published in each configured repository,
keeps the static candidates that are an update for the declared version and
pass the configured policy, and picks the greatest one.

Repositories are queried in priority order and **the first repository with
an accepted candidate wins**: later repositories are not queried for that
dependency, even if they host a greater version.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Protocol, Sequence

from catalogkeeper.models.declared import ResolvedVersion
from catalogkeeper.models.dependency import Dependency
from catalogkeeper.models.repository import Repository
from catalogkeeper.models.version import StaticVersion, parse_version
from catalogkeeper.policies import Policy
from catalogkeeper.utils.logger import get_logger

logger = get_logger("selector")


class CandidateSource(Protocol):
    """Anything able to list the versions of a dependency in a repository."""

    async def fetch_versions(
        self, dependency: Dependency, repository: Repository
    ) -> Sequence[str]:
        ...


@dataclass(frozen=True)
class UpdateResult:
    """
    Outcome of a successful selection.

    Attributes:
        current_version: Resolved declared version.
        updated_version: Greatest accepted candidate.
        repository: Repository the candidate was found in.
    """

    current_version: ResolvedVersion
    updated_version: StaticVersion
    repository: Repository


class UpdateSelector:
    """
    Select the update of a dependency, if any.

    Args:
        source: Candidate source queried for published versions.
        library_repositories: Repositories searched for libraries, in
            priority order.
        plugin_repositories: Repositories searched for plugins, in priority
            order.
        policy: Optional additional acceptance predicate.
        only_check_static_versions: Skip dependencies whose resolved
            version is not a single static version.
    """

    def __init__(
        self,
        source: CandidateSource,
        library_repositories: Sequence[Repository],
        plugin_repositories: Sequence[Repository],
        policy: Optional[Policy] = None,
        only_check_static_versions: bool = True,
    ) -> None:
        self.source = source
        self.library_repositories = list(library_repositories)
        self.plugin_repositories = list(plugin_repositories)
        self.policy = policy
        self.only_check_static_versions = only_check_static_versions

    def repositories_for(self, dependency: Dependency) -> List[Repository]:
        """Repositories to search for *dependency*, filters applied."""
        repositories = (
            self.plugin_repositories if dependency.is_plugin else self.library_repositories
        )
        return [repository for repository in repositories if dependency in repository]

    async def select(
        self,
        dependency: Dependency,
        versions: Mapping[str, ResolvedVersion],
    ) -> Optional[UpdateResult]:
        """
        Find the update of *dependency*.

        Args:
            dependency: Library or plugin to check.
            versions: The catalog's ``[versions]`` table, used to resolve
                references.

        Returns:
            The selected update, or ``None`` when the version cannot be
            resolved, is skipped, or is already up to date.
        """
        if dependency.version is None:
            return None

        current = dependency.version.resolve(versions)
        if current is None:
            logger.debug(
                "Unresolved version reference for %s, skipping", dependency.module_id
            )
            return None

        if self.only_check_static_versions and not current.is_static:
            logger.debug(
                "Non static version %s for %s, skipping", current, dependency.module_id
            )
            return None

        for repository in self.repositories_for(dependency):
            raw_versions = await self.source.fetch_versions(dependency, repository)
            accepted = [
                candidate
                for candidate in (parse_version(raw) for raw in raw_versions)
                if candidate.is_static
                and current.is_update(candidate)  # type: ignore[arg-type]
                and self._accepts(dependency, current, candidate)  # type: ignore[arg-type]
            ]
            if accepted:
                updated = max(accepted)
                logger.debug(
                    "Update %s -> %s for %s in %s",
                    current,
                    updated,
                    dependency.module_id,
                    repository,
                )
                return UpdateResult(
                    current_version=current,
                    updated_version=updated,  # type: ignore[arg-type]
                    repository=repository,
                )

        return None

    def _accepts(
        self,
        dependency: Dependency,
        current: ResolvedVersion,
        candidate: StaticVersion,
    ) -> bool:
        if self.policy is None:
            return True
        try:
            return bool(self.policy.select(dependency, current, candidate))
        except Exception as exc:
            # A failing policy counts as no policy
            logger.warning(
                "Policy %s failed for %s %s: %s",
                getattr(self.policy, "name", self.policy),
                dependency.module_id,
                candidate,
                exc,
            )
            return True

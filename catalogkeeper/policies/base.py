"""Policy protocol shared by built-in and third-party policies."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from catalogkeeper.models.declared import ResolvedVersion
from catalogkeeper.models.dependency import Dependency
from catalogkeeper.models.version import StaticVersion


@runtime_checkable
class Policy(Protocol):
    """
    Acceptance predicate for update candidates.

    Implementations must be pure and should never raise; the selector treats
    an exception as if no policy were configured.
    """

    name: str
    description: Optional[str]

    def select(
        self,
        dependency: Dependency,
        current_version: ResolvedVersion,
        updated_version: StaticVersion,
    ) -> bool:
        """Return ``True`` if *updated_version* may replace *current_version*."""
        ...


def current_static_version(
    current_version: ResolvedVersion,
) -> Optional[StaticVersion]:
    """Best-effort concrete value of a resolved declaration."""
    return current_version.probable_selected_version

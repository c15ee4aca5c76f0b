"""Policy accepting every update."""

from __future__ import annotations

from catalogkeeper.models.declared import ResolvedVersion
from catalogkeeper.models.dependency import Dependency
from catalogkeeper.models.version import StaticVersion


class AlwaysAcceptPolicy:
    name = "always"
    description = "Policy that always accepts an update."

    def select(
        self,
        dependency: Dependency,
        current_version: ResolvedVersion,
        updated_version: StaticVersion,
    ) -> bool:
        return True

"""
Declared versions: what a catalog entry literally states.

A library or plugin entry declares its version in one of three notations:

- ``Simple``: a plain string, ``version = "1.2"``
- ``Rich``: a table of constraints, ``version = { strictly = "[1,2[", prefer = "1.5" }``
- ``Reference``: an indirection into ``[versions]``, ``version.ref = "kotlin"``

``Simple`` and ``Rich`` are *resolved* declarations and can answer whether a
candidate is an update. A ``Reference`` must first be :meth:`resolved
<Reference.resolve>` against the catalog's version table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Union

from catalogkeeper.models.version import GradleVersion, StaticVersion, is_static


@dataclass(frozen=True)
class Simple:
    """A version given as a single string."""

    version: GradleVersion

    @property
    def is_static(self) -> bool:
        return self.version.is_static

    def resolve(self, versions: Mapping[str, "ResolvedVersion"]) -> "Simple":
        return self

    def is_update(self, candidate: StaticVersion) -> bool:
        return self.version.is_update(candidate)

    @property
    def probable_selected_version(self) -> Optional[StaticVersion]:
        return self.version if is_static(self.version) else None  # type: ignore[return-value]

    def __str__(self) -> str:
        return str(self.version)


@dataclass(frozen=True)
class Rich:
    """A version given as a table of Gradle rich constraints.

    Attributes:
        require: Minimum accepted version, may be upgraded by conflict resolution.
        strictly: Version or range that must be honoured.
        prefer: Preferred version within ``require`` or ``strictly``.
        reject: Versions that must never be selected.
        reject_all: Reject every version of the module.
    """

    require: Optional[GradleVersion] = None
    strictly: Optional[GradleVersion] = None
    prefer: Optional[GradleVersion] = None
    reject: Optional[GradleVersion] = None
    reject_all: bool = False

    @property
    def is_static(self) -> bool:
        return False

    def resolve(self, versions: Mapping[str, "ResolvedVersion"]) -> "Rich":
        return self

    def is_update(self, candidate: StaticVersion) -> bool:
        """Return ``True`` when *candidate* would be an upgrade for these constraints.

        ``reject_all`` and ``reject`` veto first. Then ``strictly`` decides,
        deferring to ``prefer`` when ``strictly`` is a range or prefix. Without
        ``strictly``, an update of ``prefer`` wins over ``require``.
        """
        if self.reject_all:
            return False
        if self.reject is not None and self.reject.contains(candidate):
            return False

        if self.strictly is not None:
            if not self.strictly.is_static and self.prefer is not None:
                return self.prefer.is_update(candidate)
            return self.strictly.is_update(candidate)

        if self.require is not None:
            if self.prefer is not None and self.prefer.is_update(candidate):
                return True
            return self.require.is_update(candidate)

        if self.prefer is not None:
            return self.prefer.is_update(candidate)

        return False

    @property
    def probable_selected_version(self) -> Optional[StaticVersion]:
        """First static version among ``strictly``, ``require`` and ``prefer``."""
        if self.reject_all:
            return None
        for version in (self.strictly, self.require, self.prefer):
            if is_static(version):
                return version  # type: ignore[return-value]
        return None

    def __str__(self) -> str:
        fields = []
        if self.require is not None:
            fields.append(f'require = "{self.require}"')
        if self.strictly is not None:
            fields.append(f'strictly = "{self.strictly}"')
        if self.prefer is not None:
            fields.append(f'prefer = "{self.prefer}"')
        if self.reject is not None:
            fields.append(f'reject = "{self.reject}"')
        if self.reject_all:
            fields.append("rejectAll = true")
        return "{ " + ", ".join(fields) + " }"


ResolvedVersion = Union[Simple, Rich]


@dataclass(frozen=True)
class Reference:
    """A version pointing at a named entry of the ``[versions]`` table."""

    ref: str

    def resolve(
        self, versions: Mapping[str, ResolvedVersion]
    ) -> Optional[ResolvedVersion]:
        """Look the reference up in *versions*; ``None`` when it is undefined."""
        return versions.get(self.ref)

    def __str__(self) -> str:
        return f"ref:{self.ref}"


DeclaredVersion = Union[Simple, Rich, Reference]

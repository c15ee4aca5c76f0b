"""
Maven repository model for catalogkeeper.

A :class:`Repository` is a Maven-layout base URL with optional Basic
credentials and an optional :class:`ComponentFilter` restricting which
dependencies are looked up in it.

Example:
    >>> repo = Repository(
    ...     "https://maven.example.com",
    ...     component_filter=ComponentFilter(includes=(PackageSpec("com.example.**"),)),
    ... )
    >>> Library("com.example.core", "api") in repo
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Pattern, Tuple

from catalogkeeper.constants import (
    DEFAULT_LIBRARY_REPOSITORIES,
    DEFAULT_PLUGIN_REPOSITORIES,
)
from catalogkeeper.models.dependency import Dependency


def glob_to_regex(glob: str) -> Pattern[str]:
    """
    Translate a package glob into a regular expression.

    ``?`` matches one character and ``*`` any run of characters within a
    single dot-separated segment; ``**`` matches any number of segments and
    must be a whole segment (``com.**``, ``**.test``, ``com.**.api``).

    Args:
        glob: Group glob such as ``com.example.*``.

    Returns:
        Compiled pattern to be used with ``fullmatch``.

    Raises:
        ValueError: If ``**`` is not a whole segment.
    """
    regex = []
    start = 0
    idx = 0
    length = len(glob)

    while idx < length:
        char = glob[idx]
        if char == "?":
            regex.append(re.escape(glob[start:idx]))
            regex.append(r"[^.]")
            start = idx + 1
        elif char == "*":
            regex.append(re.escape(glob[start:idx]))
            if idx + 1 < length and glob[idx + 1] == "*":
                if idx != 0 and glob[idx - 1] != ".":
                    raise ValueError(
                        f"'**' must follow a '.' or start the pattern: {glob}"
                    )
                if idx + 2 == length:
                    regex.append(".*")
                    idx += 1
                else:
                    if glob[idx + 2] != ".":
                        raise ValueError(
                            f"'**' must be followed by a '.' or end the pattern: {glob}"
                        )
                    regex.append(r"(.*?\.)*")
                    idx += 2
            else:
                regex.append(r"[^.]*")
            start = idx + 1
        idx += 1

    regex.append(re.escape(glob[start:]))
    return re.compile("".join(regex))


@dataclass(frozen=True)
class PackageSpec:
    """
    Matches dependencies by group, optionally narrowed to one artifact.

    Attributes:
        group: Exact group id, or a glob when ``name`` is ``None``.
        name: Exact artifact name; when given, ``group`` is compared literally.
    """

    group: str
    name: Optional[str] = None
    _pattern: Optional[Pattern[str]] = field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        pattern = None
        if self.name is None and "*" in self.group and self.group != "**":
            pattern = glob_to_regex(self.group)
        object.__setattr__(self, "_pattern", pattern)

    @classmethod
    def parse(cls, notation: str) -> "PackageSpec":
        """Build a spec from ``group`` or ``group:name`` notation."""
        group, _, name = notation.partition(":")
        return cls(group.strip(), name.strip() or None)

    def matches(self, dependency: Dependency) -> bool:
        group = dependency.repository_group
        if self.name is not None:
            return group == self.group and dependency.repository_name == self.name
        if "*" not in self.group:
            return group == self.group
        if self._pattern is None:
            # "**" matches everything
            return True
        return self._pattern.fullmatch(group) is not None


@dataclass(frozen=True)
class ComponentFilter:
    """Include / exclude lists; excludes win, empty includes accept all."""

    includes: Tuple[PackageSpec, ...] = ()
    excludes: Tuple[PackageSpec, ...] = ()

    def accepts(self, dependency: Dependency) -> bool:
        if any(spec.matches(dependency) for spec in self.excludes):
            return False
        if self.includes and not any(
            spec.matches(dependency) for spec in self.includes
        ):
            return False
        return True


@dataclass(frozen=True)
class Repository:
    """
    A Maven-layout repository.

    Attributes:
        url: Base URL, without trailing slash.
        user: Basic auth user name.
        password: Basic auth password.
        component_filter: Restricts which dependencies are looked up here.
    """

    url: str
    user: Optional[str] = None
    password: Optional[str] = None
    component_filter: Optional[ComponentFilter] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", self.url.rstrip("/"))

    @property
    def auth(self) -> Optional[Tuple[str, str]]:
        """Basic auth credentials when both user and password are set."""
        if self.user is not None and self.password is not None:
            return (self.user, self.password)
        return None

    def __contains__(self, dependency: Dependency) -> bool:
        return self.component_filter is None or self.component_filter.accepts(
            dependency
        )

    def __repr__(self) -> str:
        # Never print the password
        return f"Repository(url={self.url!r}, user={self.user!r})"

    def __str__(self) -> str:
        return self.url


def default_library_repositories() -> Tuple[Repository, ...]:
    return tuple(Repository(url) for url in DEFAULT_LIBRARY_REPOSITORIES)


def default_plugin_repositories() -> Tuple[Repository, ...]:
    return tuple(Repository(url) for url in DEFAULT_PLUGIN_REPOSITORIES)

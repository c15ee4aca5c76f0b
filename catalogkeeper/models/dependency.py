"""
Dependency data model for catalogkeeper.

A version catalog declares two kinds of dependencies: libraries, identified
by Maven ``group:name`` coordinates, and Gradle plugins, identified by their
plugin id. Both are looked up in Maven repositories; a plugin resolves
through its marker artifact ``<id>:<id>.gradle.plugin``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from catalogkeeper.constants import PLUGIN_MARKER_SUFFIX
from catalogkeeper.models.declared import DeclaredVersion


@dataclass(frozen=True)
class Library:
    """
    A library declared in the ``[libraries]`` table.

    Attributes:
        group: Maven group id.
        name: Maven artifact id.
        version: Declared version, or ``None`` when the version is
            managed elsewhere (for example by a platform).
    """

    group: str
    name: str
    version: Optional[DeclaredVersion] = None

    @property
    def module_id(self) -> str:
        return f"{self.group}:{self.name}"

    @property
    def repository_group(self) -> str:
        return self.group

    @property
    def repository_name(self) -> str:
        return self.name

    @property
    def is_plugin(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.module_id


@dataclass(frozen=True)
class Plugin:
    """
    A Gradle plugin declared in the ``[plugins]`` table.

    Attributes:
        id: Plugin id, e.g. ``org.jetbrains.kotlin.jvm``.
        version: Declared version, or ``None``.
    """

    id: str
    version: Optional[DeclaredVersion] = None

    @property
    def module_id(self) -> str:
        return self.id

    @property
    def repository_group(self) -> str:
        return self.id

    @property
    def repository_name(self) -> str:
        return self.id + PLUGIN_MARKER_SUFFIX

    @property
    def is_plugin(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.module_id


Dependency = Union[Library, Plugin]

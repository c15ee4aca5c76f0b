"""
Stability-level policy.

Versions are classified into tiers, from most to least stable: stable,
release candidate, beta, alpha and other. A candidate is accepted when it is
at least as stable as the current version, so a project on ``2.0`` is never
offered ``2.1-beta1`` while a project already on ``2.1-alpha1`` is.

Snapshots are only proposed to dependencies already on a snapshot.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Optional

from catalogkeeper.models.declared import ResolvedVersion
from catalogkeeper.models.dependency import Dependency
from catalogkeeper.models.version import Snapshot, StaticVersion
from catalogkeeper.policies.base import current_static_version

_STABLE_KEYWORDS = ("RELEASE", "FINAL", "GA")
_STABLE_RE = re.compile(r"^[0-9,.v-]+(-r)?$")
_RC_RE = re.compile(r"^.*-rc[0-9]+?$")
_BETA_RE = re.compile(r"^.*-beta[0-9]+?$")
_ALPHA_RE = re.compile(r"^.*-alpha[0-9]+?$")


class StabilityLevel(IntEnum):
    """Stability tiers; a lower value is more stable."""

    STABLE = 0
    RELEASE_CANDIDATE = 1
    BETA = 2
    ALPHA = 3
    OTHER = 4

    @classmethod
    def of(cls, version: StaticVersion) -> "StabilityLevel":
        """Classify the exact text of *version*."""
        text = version.exact_version.text
        upper = text.upper()
        if any(keyword in upper for keyword in _STABLE_KEYWORDS):
            return cls.STABLE
        if _STABLE_RE.match(text):
            return cls.STABLE
        if _RC_RE.match(text):
            return cls.RELEASE_CANDIDATE
        if _BETA_RE.match(text):
            return cls.BETA
        if _ALPHA_RE.match(text):
            return cls.ALPHA
        return cls.OTHER


class StabilityLevelPolicy:
    name = "stability-level"
    description = (
        "Policy based on stability levels of versions. It selects updates if "
        "the update's stability level is greater than or equal to the current "
        "version's stability level."
    )

    def select(
        self,
        dependency: Dependency,
        current_version: ResolvedVersion,
        updated_version: StaticVersion,
    ) -> bool:
        current = current_static_version(current_version)
        if isinstance(updated_version, Snapshot):
            return isinstance(current, Snapshot)

        current_level: Optional[StabilityLevel] = (
            StabilityLevel.of(current) if current is not None else None
        )
        # No derivable level: let the update through
        if current_level is None:
            return True
        return current_level >= StabilityLevel.of(updated_version)

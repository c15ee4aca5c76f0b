"""
Version comparison utilities for catalogkeeper.

This module classifies the change between a current and an updated Gradle
version, for display purposes only. Update decisions themselves are made by
:mod:`catalogkeeper.models.version`.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from catalogkeeper.models.version import Snapshot, StaticVersion

_RELEASE_RE = re.compile(r"^\d+(?:\.\d+)*")


def get_update_type(
    current_version: Optional[StaticVersion],
    target_version: Optional[StaticVersion],
) -> str:
    """Determine the update type between two static versions.

    Args:
        current_version: Current version, or ``None`` when it is not a
            single static version (range, prefix, rich constraints).
        target_version: Version to update to.

    Returns:
        One of:
            - ``"same"``      : Versions compare equal
            - ``"downgrade"`` : Target version is lower than current
            - ``"major"``     : First release number changes
            - ``"minor"``     : Second release number changes
            - ``"patch"``     : Third release number changes
            - ``"snapshot"``  : Target is a snapshot
            - ``"update"``    : Update that cannot be classified further
            - ``"unknown"``   : Missing version

    Examples:
        >>> from catalogkeeper.models.version import parse_version
        >>> get_update_type(parse_version("1.0.0"), parse_version("2.0.0"))
        'major'
        >>> get_update_type(parse_version("1.2"), parse_version("1.2.1"))
        'patch'
        >>> get_update_type(None, parse_version("1.0.0"))
        'unknown'
    """
    if current_version is None or target_version is None:
        return "unknown"

    comparison = target_version.compare_to(current_version)
    if comparison == 0:
        return "same"
    if comparison < 0:
        return "downgrade"
    if isinstance(target_version, Snapshot):
        return "snapshot"

    return _classify_upgrade(
        _release_numbers(current_version), _release_numbers(target_version)
    )


def _release_numbers(version: StaticVersion) -> Tuple[int, int, int]:
    """Leading dotted numbers of a version as (major, minor, patch)."""
    match = _RELEASE_RE.match(version.exact_version.text)
    numbers = [int(part) for part in match.group(0).split(".")] if match else []
    numbers.extend([0, 0, 0])
    return numbers[0], numbers[1], numbers[2]


def _classify_upgrade(current: Tuple[int, int, int], target: Tuple[int, int, int]) -> str:
    if current[0] != target[0]:
        return "major"
    if current[1] != target[1]:
        return "minor"
    if current[2] != target[2]:
        return "patch"
    # Qualifier-only change, e.g. 1.0-rc1 -> 1.0
    return "update"

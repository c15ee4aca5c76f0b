"""
Update policies for catalogkeeper.

A policy is an extra acceptance predicate applied after ordering has
established that a candidate is newer than the current version. It receives
the dependency, its resolved current version and the static candidate, and
answers whether the candidate may be proposed.

Built-in policies:

- ``always``: accept every candidate
- ``stability-level``: never propose a less stable release
- ``guava-android``: keep Guava on its ``-android`` flavour

Third-party packages register additional policies under the
``catalogkeeper.policies`` entry-point group::

    [project.entry-points."catalogkeeper.policies"]
    my-policy = "my_package.policies:MyPolicy"

Example:
    >>> policy = get_policy("stability-level")
    >>> policy.name
    'stability-level'
"""

from __future__ import annotations

from importlib.metadata import entry_points
from typing import Dict, Iterable, Optional

from catalogkeeper.constants import POLICY_ENTRY_POINT_GROUP
from catalogkeeper.exceptions import PolicyError
from catalogkeeper.policies.base import Policy
from catalogkeeper.policies.always_accept import AlwaysAcceptPolicy
from catalogkeeper.policies.guava_android import GuavaAndroidPolicy
from catalogkeeper.policies.stability_level import StabilityLevel, StabilityLevelPolicy
from catalogkeeper.utils.logger import get_logger

logger = get_logger("policies")

#: Policies shipped with catalogkeeper.
DEFAULT_POLICIES = (
    StabilityLevelPolicy(),
    AlwaysAcceptPolicy(),
    GuavaAndroidPolicy(),
)


def _load_entry_point_policies() -> Iterable[Policy]:
    for entry_point in entry_points(group=POLICY_ENTRY_POINT_GROUP):
        try:
            loaded = entry_point.load()
        except Exception as exc:
            raise PolicyError(
                f"Unable to load policy entry point {entry_point.value}: {exc}",
                policy_name=entry_point.name,
            ) from exc

        # Entry points may expose either a class or a ready instance
        policy = loaded() if isinstance(loaded, type) else loaded
        if not isinstance(policy, Policy):
            raise PolicyError(
                f"Entry point {entry_point.value} does not provide a policy",
                policy_name=entry_point.name,
            )
        logger.debug("Loaded policy %s from %s", policy.name, entry_point.value)
        yield policy


def load_policies(include_plugins: bool = True) -> Dict[str, Policy]:
    """
    Collect the available policies by name.

    Args:
        include_plugins: Also scan the ``catalogkeeper.policies`` entry
            points.

    Returns:
        Mapping of policy name to policy.

    Raises:
        PolicyError: If two policies share a name or a plugin cannot be
            loaded.
    """
    policies: Dict[str, Policy] = {}
    candidates = list(DEFAULT_POLICIES)
    if include_plugins:
        candidates.extend(_load_entry_point_policies())

    for policy in candidates:
        if policy.name in policies:
            raise PolicyError(
                f"Duplicate policy name: {policy.name}", policy_name=policy.name
            )
        policies[policy.name] = policy

    return policies


def get_policy(name: Optional[str], include_plugins: bool = True) -> Optional[Policy]:
    """
    Resolve a configured policy name.

    Args:
        name: Policy name, or ``None`` for no policy.
        include_plugins: Also consider entry-point policies.

    Returns:
        The matching policy, or ``None`` when *name* is ``None``.

    Raises:
        PolicyError: If no policy has that name.
    """
    if name is None:
        return None

    policies = load_policies(include_plugins=include_plugins)
    try:
        return policies[name]
    except KeyError:
        available = ", ".join(sorted(policies))
        raise PolicyError(
            f"Unknown policy '{name}' (available: {available})", policy_name=name
        ) from None


__all__ = [
    "Policy",
    "AlwaysAcceptPolicy",
    "GuavaAndroidPolicy",
    "StabilityLevel",
    "StabilityLevelPolicy",
    "DEFAULT_POLICIES",
    "load_policies",
    "get_policy",
]

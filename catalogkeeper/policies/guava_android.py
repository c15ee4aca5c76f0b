"""
Guava flavour policy.

Guava publishes every release twice, as ``X-jre`` and ``X-android``. Since
``jre`` sorts after ``android``, ordering alone would move Android projects
to the JRE flavour; this policy rejects such candidates.
"""

from __future__ import annotations

from catalogkeeper.models.declared import ResolvedVersion
from catalogkeeper.models.dependency import Dependency, Library
from catalogkeeper.models.version import StaticVersion
from catalogkeeper.policies.base import current_static_version

GUAVA_GROUP = "com.google.guava"
GUAVA_ARTIFACT = "guava"


class GuavaAndroidPolicy:
    name = "guava-android"
    description = (
        'Policy that rejects Guava updates with the suffix "-jre" when the '
        'current version uses the "-android" suffix.'
    )

    def select(
        self,
        dependency: Dependency,
        current_version: ResolvedVersion,
        updated_version: StaticVersion,
    ) -> bool:
        # Only Guava is concerned
        if not (
            isinstance(dependency, Library)
            and dependency.group == GUAVA_GROUP
            and dependency.name == GUAVA_ARTIFACT
        ):
            return True

        current = current_static_version(current_version)
        if current is None:
            return True

        return not (
            current.exact_version.text.endswith("-android")
            and updated_version.exact_version.text.endswith("-jre")
        )

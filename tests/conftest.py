from __future__ import annotations

from typing import Dict, Iterator, List, Sequence, Tuple, Type

import pytest

from catalogkeeper.models import Dependency, Repository
from catalogkeeper.utils.console import reconfigure_console
from catalogkeeper.utils.logger import disable_logging


SAMPLE_CATALOG = """\
[versions]
kotlin = "1.9.0"
okhttp = "4.10.0" #ignoreUpdates
junit = { strictly = "[4.0,5.0[", prefer = "4.12" }

[libraries]
okhttp = { module = "com.squareup.okhttp3:okhttp", version.ref = "okhttp" }
guava = { group = "com.google.guava", name = "guava", version = "31.0-jre" }
junit = "junit:junit:4.12"
stdlib = { module = "org.jetbrains.kotlin:kotlin-stdlib", version.ref = "kotlin" }
bom = { module = "com.example:bom" }
junit-rich = { module = "junit:junit-dep", version.ref = "junit" }
legacy = "org.legacy:legacy:1.0" #ignoreUpdates

[bundles]
kotlin = ["stdlib"]

[plugins]
kotlin-jvm = { id = "org.jetbrains.kotlin.jvm", version.ref = "kotlin" }
dokka = "org.jetbrains.dokka:1.8.10"
"""


class FakeSource:
    """In-memory candidate source keyed by module id.

    A ``(repository url, module id)`` key takes precedence over the bare
    module id, so tests can give repositories different content.
    """

    def __init__(self, versions: Dict[object, Sequence[str]]) -> None:
        self.versions = versions
        self.calls: List[Tuple[str, str]] = []

    async def fetch_versions(
        self, dependency: Dependency, repository: Repository
    ) -> Sequence[str]:
        self.calls.append((dependency.module_id, repository.url))
        specific = self.versions.get((repository.url, dependency.module_id))
        if specific is not None:
            return specific
        return self.versions.get(dependency.module_id, [])


@pytest.fixture
def sample_catalog() -> str:
    return SAMPLE_CATALOG


@pytest.fixture
def fake_source() -> Type[FakeSource]:
    return FakeSource


@pytest.fixture(autouse=True)
def _reset_global_output() -> Iterator[None]:
    yield
    disable_logging()
    reconfigure_console(None)

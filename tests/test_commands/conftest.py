from __future__ import annotations

from pathlib import Path
from typing import Iterator
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from catalogkeeper.cli import cli

LATEST = {
    "com.google.guava:guava": ["32.0-jre", "33.0-android"],
    "junit:junit": ["4.13.2"],
    "org.jetbrains.kotlin:kotlin-stdlib": ["2.0.0"],
    "org.jetbrains.kotlin.jvm": ["2.0.0"],
    "org.jetbrains.dokka": ["1.8.10"],
}


@pytest.fixture
def latest_versions() -> dict:
    """Repository content used by default, as a mutable copy."""
    return {key: list(value) for key, value in LATEST.items()}


@pytest.fixture
def catalog(tmp_path: Path, sample_catalog: str) -> Path:
    path = tmp_path / "libs.versions.toml"
    path.write_text(sample_catalog, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path) -> Iterator[None]:
    with patch("catalogkeeper.config.Path.cwd", return_value=tmp_path):
        yield


@pytest.fixture
def invoke(fake_source):
    """Run the CLI against in-memory repository content."""

    def _invoke(args, versions=LATEST, input=None):
        with patch(
            "catalogkeeper.commands.MavenMetadataSource",
            lambda http: fake_source(versions),
        ):
            return CliRunner().invoke(cli, args, input=input)

    return _invoke

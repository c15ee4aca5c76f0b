from __future__ import annotations

import pytest

from catalogkeeper.models.declared import Simple
from catalogkeeper.models.dependency import Library
from catalogkeeper.models.version import parse_version
from catalogkeeper.policies import StabilityLevel, StabilityLevelPolicy


@pytest.mark.unit
class TestStabilityLevel:
    """Classification of version texts."""

    @pytest.mark.parametrize(
        "text, level",
        [
            ("1.0", StabilityLevel.STABLE),
            ("2.5.1", StabilityLevel.STABLE),
            ("5.3.0.RELEASE", StabilityLevel.STABLE),
            ("1.0-Final", StabilityLevel.STABLE),
            ("2.0-rc1", StabilityLevel.RELEASE_CANDIDATE),
            ("2.0-beta2", StabilityLevel.BETA),
            ("2.0-alpha03", StabilityLevel.ALPHA),
            ("2.0-M1", StabilityLevel.OTHER),
            ("2.0-rc", StabilityLevel.OTHER),
        ],
    )
    def test_of(self, text: str, level: StabilityLevel) -> None:
        assert StabilityLevel.of(parse_version(text)) is level

    def test_snapshot_uses_base_version(self) -> None:
        assert StabilityLevel.of(parse_version("2.0-SNAPSHOT")) is StabilityLevel.STABLE

    def test_ordering(self) -> None:
        assert StabilityLevel.STABLE < StabilityLevel.BETA < StabilityLevel.OTHER


@pytest.mark.unit
class TestStabilityLevelPolicy:
    """Never propose a less stable release."""

    @pytest.fixture
    def policy(self) -> StabilityLevelPolicy:
        return StabilityLevelPolicy()

    @pytest.mark.parametrize(
        "current, updated, expected",
        [
            ("2.0", "2.1", True),
            ("2.0", "2.1-beta1", False),
            ("2.1-alpha1", "2.1-beta1", True),
            ("2.1-beta1", "2.1-alpha2", False),
            ("2.0-rc1", "2.0", True),
        ],
    )
    def test_select(
        self, policy: StabilityLevelPolicy, current: str, updated: str, expected: bool
    ) -> None:
        assert (
            policy.select(
                Library("a", "b"), Simple(parse_version(current)), parse_version(updated)
            )
            is expected
        )

    def test_snapshots_only_for_snapshots(self, policy: StabilityLevelPolicy) -> None:
        library = Library("a", "b")

        assert not policy.select(
            library, Simple(parse_version("1.0")), parse_version("1.1-SNAPSHOT")
        )
        assert policy.select(
            library, Simple(parse_version("1.0-SNAPSHOT")), parse_version("1.1-SNAPSHOT")
        )

    def test_unknown_current_level_accepts(self, policy: StabilityLevelPolicy) -> None:
        assert policy.select(
            Library("a", "b"), Simple(parse_version("1.+")), parse_version("2.0-alpha1")
        )

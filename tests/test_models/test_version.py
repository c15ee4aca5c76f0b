from __future__ import annotations

import itertools

import pytest

from catalogkeeper.models.version import (
    Exact,
    Latest,
    Prefix,
    Range,
    Snapshot,
    Unknown,
    VersionKind,
    is_static,
    parse_version,
)


def v(text: str):
    return parse_version(text)


@pytest.mark.unit
class TestParseVersion:
    """Dispatch of raw text to version kinds."""

    @pytest.mark.parametrize(
        "raw, kind",
        [
            ("1.2.3", VersionKind.EXACT),
            ("2.0-beta1", VersionKind.EXACT),
            ("1.0-SNAPSHOT", VersionKind.SNAPSHOT),
            ("[1.0,2.0[", VersionKind.RANGE),
            ("]1.0,)", VersionKind.RANGE),
            ("1.3.+", VersionKind.PREFIX),
            ("+", VersionKind.PREFIX),
            ("latest.release", VersionKind.LATEST),
            ("latest.integration", VersionKind.LATEST),
            ("", VersionKind.UNKNOWN),
            ("   ", VersionKind.UNKNOWN),
        ],
    )
    def test_kinds(self, raw: str, kind: VersionKind) -> None:
        assert parse_version(raw).kind is kind

    @pytest.mark.parametrize("raw", ["[latest.release,2.0]", "[1.+,2.0)", "(,)x"])
    def test_malformed_never_raises(self, raw: str) -> None:
        result = parse_version(raw)

        assert result.kind in (VersionKind.UNKNOWN, VersionKind.EXACT)

    def test_range_with_dynamic_bound_is_unknown(self) -> None:
        assert isinstance(parse_version("[1.+,2.0)"), Unknown)

    def test_none_is_unknown(self) -> None:
        assert isinstance(parse_version(None), Unknown)  # type: ignore[arg-type]

    def test_str_round_trips_text(self) -> None:
        for raw in ("1.2.3", "1.0-SNAPSHOT", "[1.0,2.0[", "1.+", "latest.release"):
            assert str(parse_version(raw)) == raw

    def test_is_static(self) -> None:
        assert is_static(v("1.0"))
        assert is_static(v("1.0-SNAPSHOT"))
        assert not is_static(v("1.+"))
        assert not is_static(v("[1.0,2.0]"))
        assert not is_static(v("latest.release"))
        assert not is_static(None)


@pytest.mark.unit
class TestExactOrdering:
    """Gradle ordering of concrete versions."""

    def test_ordering_chain(self) -> None:
        chain = ["1.1", "1.1.2-dev", "1.1.2-rc", "1.1.2", "1.1.2.1"]
        versions = [v(text) for text in chain]

        assert sorted(reversed(versions)) == versions
        for lower, higher in zip(versions, versions[1:]):
            assert lower < higher
            assert higher > lower

    @pytest.mark.parametrize(
        "lower, higher",
        [
            ("1.0", "1.0.1"),
            ("1.0-beta", "1.0"),
            ("1.0-alpha", "1.0-beta"),
            ("1.0-rc1", "1.0-rc2"),
            ("1.0-rc", "1.0-final"),
            ("1.0-final", "1.0-ga"),
            ("1.0-release", "1.0-sp"),
            ("1.0-dev", "1.0-alpha"),
            ("1.0-beta", "1.0-rc"),
            ("1.9", "1.10"),
            ("1.0.a", "1.0.1"),
            ("1.0-jre", "1.1-android"),
        ],
    )
    def test_pairs(self, lower: str, higher: str) -> None:
        assert v(lower) < v(higher)
        assert v(higher).compare_to(v(lower)) > 0

    def test_separators_are_equivalent(self) -> None:
        assert v("1.0-1").compare_to(v("1.0.1")) == 0
        assert v("1_0+1").compare_to(v("1.0.1")) == 0

    def test_equal_versions(self) -> None:
        assert v("1.2.3") == v("1.2.3")
        assert v("1.2.3") <= v("1.2.3")
        assert v("1.2.3") >= v("1.2.3")

    def test_max_picks_greatest(self) -> None:
        assert max(v(t) for t in ("1.0", "2.0-rc1", "1.5", "2.0-beta")) == v("2.0-rc1")

    def test_ordering_is_consistent_across_kinds(self) -> None:
        texts = [
            "1.0", "1.0-SNAPSHOT", "1.0.1", "1.1-dev", "1.1-alpha",
            "1.1-beta2", "1.1-rc1", "1.1", "1.1-SNAPSHOT", "1.1.a",
            "1.1.2-final", "1.9", "2.0-ga", "2.0-sp1", "2.0-SNAPSHOT", "10",
        ]
        versions = [v(text) for text in texts]

        def sign(value: int) -> int:
            return (value > 0) - (value < 0)

        for a, b in itertools.product(versions, repeat=2):
            assert sign(a.compare_to(b)) == -sign(b.compare_to(a)), (a, b)
        for a, b, c in itertools.product(versions, repeat=3):
            if a.compare_to(b) <= 0 and b.compare_to(c) <= 0:
                assert a.compare_to(c) <= 0, (a, b, c)


@pytest.mark.unit
class TestSnapshot:
    """Snapshots sort just above their base release."""

    def test_requires_suffix(self) -> None:
        with pytest.raises(ValueError):
            Snapshot("1.0")

    def test_exact_version(self) -> None:
        assert Snapshot("1.2-SNAPSHOT").exact_version == Exact("1.2")

    def test_ordering_against_exact(self) -> None:
        snapshot = v("1.0-SNAPSHOT")

        assert snapshot > v("1.0")
        assert v("1.0") < snapshot
        assert snapshot < v("1.0.1")
        assert v("1.0.1") > snapshot

    def test_ordering_between_snapshots(self) -> None:
        assert v("1.0-SNAPSHOT") < v("1.1-SNAPSHOT")
        assert v("1.0-SNAPSHOT").compare_to(v("1.0-SNAPSHOT")) == 0

    def test_exact_update_to_snapshot_of_same_base(self) -> None:
        assert v("1.0").is_update(v("1.0-SNAPSHOT"))
        assert not v("1.0").is_update(v("0.9-SNAPSHOT"))

    def test_snapshot_updates(self) -> None:
        snapshot = v("1.0-SNAPSHOT")

        assert snapshot.is_update(v("1.0.1"))
        assert snapshot.is_update(v("1.1-SNAPSHOT"))
        assert not snapshot.is_update(v("1.0"))
        assert not snapshot.is_update(v("1.0-SNAPSHOT"))


@pytest.mark.unit
class TestExactUpdates:
    """Exact.is_update and contains."""

    def test_is_update_only_for_greater(self) -> None:
        current = v("1.2")

        assert current.is_update(v("1.3"))
        assert not current.is_update(v("1.2"))
        assert not current.is_update(v("1.1"))

    def test_contains_is_equality(self) -> None:
        assert v("1.2") in v("1.2")
        assert v("1.3") not in v("1.2")


@pytest.mark.unit
class TestRange:
    """Bracketed version ranges."""

    def test_bounds(self) -> None:
        version_range = Range("[1.0,2.0[")

        assert version_range.lower_bound.value == Exact("1.0")
        assert version_range.lower_bound.is_exclusive is False
        assert version_range.upper_bound.value == Exact("2.0")
        assert version_range.upper_bound.is_exclusive is True

    def test_open_bounds(self) -> None:
        version_range = Range("(,2.0]")

        assert version_range.lower_bound is None
        assert version_range.upper_bound.is_exclusive is False

    @pytest.mark.parametrize("text", ["1.0,2.0", "[]", "[1.0,latest.release]"])
    def test_malformed_raises(self, text: str) -> None:
        with pytest.raises(ValueError):
            Range(text)

    @pytest.mark.parametrize(
        "text, candidate, expected",
        [
            ("[1.0,2.0]", "1.0", True),
            ("[1.0,2.0]", "1.5", True),
            ("[1.0,2.0]", "2.0", True),
            ("(1.0,2.0)", "1.0", False),
            ("(1.0,2.0)", "2.0", False),
            ("]1.0,2.0[", "1.0", False),
            ("]1.0,2.0[", "1.5", True),
            ("[1.0,)", "99", True),
            ("(,2.0]", "0.1", True),
            ("[1.0,2.0]", "0.9", False),
            ("[1.0,2.0]", "2.1", False),
        ],
    )
    def test_contains(self, text: str, candidate: str, expected: bool) -> None:
        assert Range(text).contains(v(candidate)) is expected

    @pytest.mark.parametrize(
        "text, candidate, expected",
        [
            ("[1.0,2.0[", "2.0", True),
            ("[1.0,2.0[", "2.4", True),
            ("[1.0,2.0]", "2.0", False),
            ("[1.0,2.0]", "2.1", True),
            ("[1.0,2.0[", "1.5", False),
            ("[1.0,2.0[", "0.5", False),
            ("[1.0,)", "5.0", False),
        ],
    )
    def test_is_update(self, text: str, candidate: str, expected: bool) -> None:
        assert Range(text).is_update(v(candidate)) is expected


@pytest.mark.unit
class TestPrefix:
    """Wildcard versions ending with '+'."""

    def test_requires_plus(self) -> None:
        with pytest.raises(ValueError):
            Prefix("1.0")

    def test_base_version(self) -> None:
        assert Prefix("1.3.+").base_version == Exact("1.3")
        assert Prefix("1.3+").base_version == Exact("1.3")
        assert Prefix("+").base_version is None

    def test_contains(self) -> None:
        prefix = Prefix("1.3.+")

        assert prefix.contains(v("1.3.0"))
        assert prefix.contains(v("1.3.9-rc1"))
        assert not prefix.contains(v("1.4"))
        assert not prefix.contains(v("1.30"))

    def test_bare_plus_matches_everything(self) -> None:
        prefix = Prefix("+")

        assert prefix.contains(v("0.0.1"))
        assert not prefix.is_update(v("99.0"))

    def test_is_update(self) -> None:
        prefix = Prefix("1.3.+")

        assert prefix.is_update(v("1.4"))
        assert not prefix.is_update(v("1.3.7"))
        assert not prefix.is_update(v("1.2"))


@pytest.mark.unit
class TestInertKinds:
    """Latest and Unknown never contain nor update."""

    @pytest.mark.parametrize("version", [Latest("latest.release"), Unknown("")])
    def test_inert(self, version) -> None:
        assert not version.is_static
        assert not version.contains(v("1.0"))
        assert not version.is_update(v("999"))

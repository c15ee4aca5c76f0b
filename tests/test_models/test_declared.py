from __future__ import annotations

import pytest

from catalogkeeper.models.declared import Reference, Rich, Simple
from catalogkeeper.models.version import parse_version


def v(text: str):
    return parse_version(text)


@pytest.mark.unit
class TestSimple:
    """A version given as a single string."""

    def test_static(self) -> None:
        declared = Simple(v("1.2"))

        assert declared.is_static
        assert declared.probable_selected_version == v("1.2")
        assert str(declared) == "1.2"

    def test_dynamic(self) -> None:
        declared = Simple(v("1.+"))

        assert not declared.is_static
        assert declared.probable_selected_version is None

    def test_is_update_delegates(self) -> None:
        assert Simple(v("1.2")).is_update(v("1.3"))
        assert not Simple(v("1.2")).is_update(v("1.1"))
        assert Simple(v("[1.0,2.0[")).is_update(v("2.0"))

    def test_resolve_returns_itself(self) -> None:
        declared = Simple(v("1.2"))

        assert declared.resolve({}) is declared


@pytest.mark.unit
class TestRich:
    """Gradle rich version constraints."""

    def test_never_static(self) -> None:
        assert not Rich(strictly=v("1.0")).is_static

    def test_reject_all_vetoes(self) -> None:
        assert not Rich(require=v("1.0"), reject_all=True).is_update(v("2.0"))

    def test_reject_vetoes_contained_candidates(self) -> None:
        declared = Rich(require=v("1.0"), reject=v("[2.0,3.0["))

        assert not declared.is_update(v("2.5"))
        assert declared.is_update(v("3.0"))

    def test_static_strictly(self) -> None:
        declared = Rich(strictly=v("1.0"), prefer=v("0.5"))

        assert declared.is_update(v("1.1"))
        assert not declared.is_update(v("1.0"))

    def test_range_strictly_defers_to_prefer(self) -> None:
        declared = Rich(strictly=v("[1.0,2.0["), prefer=v("1.5"))

        assert declared.is_update(v("1.6"))
        assert not declared.is_update(v("1.4"))
        assert declared.is_update(v("2.4"))

    def test_range_strictly_without_prefer(self) -> None:
        declared = Rich(strictly=v("[1.0,2.0["))

        assert declared.is_update(v("2.1"))
        assert not declared.is_update(v("1.6"))

    def test_prefer_update_wins_over_require(self) -> None:
        declared = Rich(require=v("1.0"), prefer=v("1.5"))

        assert declared.is_update(v("1.6"))
        # Not an update of prefer but still one of require
        assert declared.is_update(v("1.2"))
        assert not declared.is_update(v("0.9"))

    def test_prefer_only(self) -> None:
        assert Rich(prefer=v("1.5")).is_update(v("1.6"))
        assert not Rich(prefer=v("1.5")).is_update(v("1.5"))

    def test_no_constraints(self) -> None:
        assert not Rich().is_update(v("1.0"))

    def test_probable_selected_version(self) -> None:
        assert Rich(strictly=v("1.0"), require=v("0.5")).probable_selected_version == v("1.0")
        assert Rich(strictly=v("[1.0,2.0["), prefer=v("1.5")).probable_selected_version == v("1.5")
        assert Rich(require=v("1.+")).probable_selected_version is None
        assert Rich(require=v("1.0"), reject_all=True).probable_selected_version is None

    def test_str(self) -> None:
        declared = Rich(strictly=v("[1.0,2.0["), prefer=v("1.5"), reject_all=True)

        assert str(declared) == '{ strictly = "[1.0,2.0[", prefer = "1.5", rejectAll = true }'


@pytest.mark.unit
class TestReference:
    """Indirection into the [versions] table."""

    def test_resolve(self) -> None:
        versions = {"kotlin": Simple(v("2.1.20"))}

        assert Reference("kotlin").resolve(versions) == Simple(v("2.1.20"))
        assert Reference("missing").resolve(versions) is None

    def test_str(self) -> None:
        assert str(Reference("kotlin")) == "ref:kotlin"

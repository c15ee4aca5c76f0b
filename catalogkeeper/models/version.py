"""
Gradle version model for catalogkeeper.

A raw version string from a catalog or a repository parses into exactly one
of a closed set of kinds:

- :class:`Exact`: a concrete version such as ``1.2.3`` or ``2.0-beta1``
- :class:`Snapshot`: a concrete version carrying the ``-SNAPSHOT`` suffix
- :class:`Range`: a bracketed range such as ``[1.0,2.0[``
- :class:`Prefix`: a wildcard such as ``1.3.+``
- :class:`Latest`: a floating marker such as ``latest.release``
- :class:`Unknown`: blank or unparsable input

``Exact`` and ``Snapshot`` are *static* versions: they denote a single point
and are totally ordered following Gradle's version ordering rules. Every kind
answers two questions about a static candidate: does it :meth:`contain` the
candidate, and is the candidate an :meth:`is_update` for it.

:func:`parse_version` never raises; anything it cannot make sense of becomes
:class:`Unknown`, which matches nothing and is never updated.

Example::

    >>> parse_version("1.1.2-rc") < parse_version("1.1.2")
    True
    >>> parse_version("[1.0,2.0[").is_update(parse_version("2.4"))
    True
"""

from __future__ import annotations

import re
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

# ---------------------------------------------------------------------------
# Tokenization constants
# ---------------------------------------------------------------------------

#: Characters splitting a version into segments.
SEPARATORS = ".-_+"

#: Suffix identifying snapshot versions.
SNAPSHOT_SUFFIX = "-SNAPSHOT"

#: Prefix identifying floating "latest" markers.
LATEST_PREFIX = "latest."

#: Alphabetic run sorting below every other alphabetic run.
DEV_QUALIFIER = "dev"

#: Qualifiers sorting above ordinary alphabetic runs, lowest first.
SPECIAL_QUALIFIERS = ("rc", "snapshot", "final", "ga", "release", "sp")

LOWER_BOUND_MARKERS = "[(]"
UPPER_BOUND_MARKERS = "])["
EXCLUSIVE_LOWER_BOUND_MARKERS = "(]"
EXCLUSIVE_UPPER_BOUND_MARKERS = ")["

_SPLIT_RE = re.compile(r"[._\-+]")
_RUN_RE = re.compile(r"\d+|\D+")

# A single token: (is_numeric, int value or text)
Part = Tuple[bool, Union[int, str]]


class VersionKind(Enum):
    """Closed enumeration of the version kinds."""

    EXACT = "exact"
    SNAPSHOT = "snapshot"
    RANGE = "range"
    PREFIX = "prefix"
    LATEST = "latest"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Part comparison
# ---------------------------------------------------------------------------


def _tokenize(text: str) -> Tuple[Part, ...]:
    """Split *text* into alternating numeric / alphabetic runs."""
    parts = []
    for segment in _SPLIT_RE.split(text):
        for run in _RUN_RE.findall(segment):
            if run.isdigit():
                parts.append((True, int(run)))
            else:
                parts.append((False, run))
    return tuple(parts)


def _special_index(value: str) -> int:
    """Return the position of the first special qualifier found in *value*."""
    lowered = value.lower()
    for index, qualifier in enumerate(SPECIAL_QUALIFIERS):
        if qualifier in lowered:
            return index
    return -1


def _cmp(left, right) -> int:
    return (left > right) - (left < right)


def _compare_part(left: Part, right: Part) -> int:
    left_numeric, left_value = left
    right_numeric, right_value = right

    if left_numeric and right_numeric:
        return _cmp(left_value, right_value)
    if left_numeric:
        return 1
    if right_numeric:
        return -1

    if left_value == right_value:
        return 0
    if left_value == DEV_QUALIFIER:
        return -1
    if right_value == DEV_QUALIFIER:
        return 1

    left_special = _special_index(left_value)
    right_special = _special_index(right_value)
    if left_special < 0 and right_special < 0:
        return _cmp(left_value, right_value)
    if left_special >= 0 and right_special < 0:
        return 1
    if left_special < 0 and right_special >= 0:
        return -1
    if left_special != right_special:
        return _cmp(left_special, right_special)
    # Same qualifier family (e.g. "rc1" vs "rc2")
    return _cmp(left_value, right_value)


def _compare_parts(left: Tuple[Part, ...], right: Tuple[Part, ...]) -> int:
    for left_part, right_part in zip(left, right):
        result = _compare_part(left_part, right_part)
        if result != 0:
            return result

    common = min(len(left), len(right))
    if len(left) > len(right):
        # 1.0.1 > 1.0 but 1.0-beta < 1.0
        return 1 if left[common][0] else -1
    if len(left) < len(right):
        return -1 if right[common][0] else 1
    return 0


# ---------------------------------------------------------------------------
# Version kinds
# ---------------------------------------------------------------------------


class GradleVersion:
    """Common interface of every version kind."""

    kind: VersionKind
    text: str

    @property
    def is_static(self) -> bool:
        """Whether this denotes a single concrete version."""
        return False

    def contains(self, version: "StaticVersion") -> bool:
        raise NotImplementedError

    def is_update(self, version: "StaticVersion") -> bool:
        raise NotImplementedError

    def __contains__(self, version: "StaticVersion") -> bool:
        return self.contains(version)

    def __str__(self) -> str:
        return self.text


class _StaticVersion(GradleVersion):
    """Ordering shared by :class:`Exact` and :class:`Snapshot`."""

    @property
    def is_static(self) -> bool:
        return True

    @property
    def exact_version(self) -> "Exact":
        raise NotImplementedError

    def compare_to(self, other: "StaticVersion") -> int:
        raise NotImplementedError

    def contains(self, version: "StaticVersion") -> bool:
        return self == version

    def __lt__(self, other: "StaticVersion") -> bool:
        return self.compare_to(other) < 0

    def __le__(self, other: "StaticVersion") -> bool:
        return self.compare_to(other) <= 0

    def __gt__(self, other: "StaticVersion") -> bool:
        return self.compare_to(other) > 0

    def __ge__(self, other: "StaticVersion") -> bool:
        return self.compare_to(other) >= 0


@dataclass(frozen=True, eq=True, order=False)
class Exact(_StaticVersion):
    """A concrete version, ordered following Gradle's rules."""

    text: str
    _parts: Tuple[Part, ...] = field(
        init=False, repr=False, compare=False, hash=False
    )

    kind = VersionKind.EXACT

    def __post_init__(self) -> None:
        object.__setattr__(self, "_parts", _tokenize(self.text))

    @property
    def exact_version(self) -> "Exact":
        return self

    def compare_exact(self, other: "Exact") -> int:
        """Compare against another :class:`Exact` by token sequence."""
        return _compare_parts(self._parts, other._parts)

    def compare_to(self, other: "StaticVersion") -> int:
        if isinstance(other, Snapshot):
            result = self.compare_exact(other.exact_version)
            return -1 if result == 0 else result
        return self.compare_exact(other)

    def is_update(self, version: "StaticVersion") -> bool:
        if isinstance(version, Snapshot):
            return version.exact_version.compare_exact(self) >= 0
        return version.compare_exact(self) > 0

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, eq=True, order=False)
class Snapshot(_StaticVersion):
    """A concrete version published as ``<base>-SNAPSHOT``.

    A snapshot sorts just above the release with the same base, and below
    any larger release.
    """

    text: str
    _exact: Exact = field(init=False, repr=False, compare=False, hash=False)

    kind = VersionKind.SNAPSHOT

    def __post_init__(self) -> None:
        if not self.text.endswith(SNAPSHOT_SUFFIX):
            raise ValueError(f"Wrong format for snapshot {self.text}")
        object.__setattr__(
            self, "_exact", Exact(self.text[: -len(SNAPSHOT_SUFFIX)])
        )

    @property
    def exact_version(self) -> Exact:
        return self._exact

    def compare_to(self, other: "StaticVersion") -> int:
        if isinstance(other, Snapshot):
            return self._exact.compare_exact(other.exact_version)
        result = self._exact.compare_exact(other)
        return 1 if result == 0 else result

    def is_update(self, version: "StaticVersion") -> bool:
        return version.exact_version.compare_exact(self._exact) > 0

    def __str__(self) -> str:
        return self.text


StaticVersion = Union[Exact, Snapshot]


@dataclass(frozen=True)
class Bound:
    """One end of a :class:`Range`."""

    value: StaticVersion
    is_exclusive: bool


@dataclass(frozen=True, eq=True)
class Range(GradleVersion):
    """A bracketed version range such as ``[1.0,2.0)`` or ``]1.0,)``.

    Both ``)`` and ``[`` close an exclusive upper bound; both ``(`` and ``]``
    open an exclusive lower bound. Either bound may be omitted.

    Raises:
        ValueError: The text is not delimited by bound markers, or a bound
            is not a static version.
    """

    text: str
    lower_bound: Optional[Bound] = field(init=False, compare=False, hash=False)
    upper_bound: Optional[Bound] = field(init=False, compare=False, hash=False)

    kind = VersionKind.RANGE

    def __post_init__(self) -> None:
        text = self.text
        if not (
            len(text) > 2
            and text[0] in LOWER_BOUND_MARKERS
            and text[-1] in UPPER_BOUND_MARKERS
        ):
            raise ValueError(f"Wrong format for range {text}")

        lower_exclusive = text[0] in EXCLUSIVE_LOWER_BOUND_MARKERS
        upper_exclusive = text[-1] in EXCLUSIVE_UPPER_BOUND_MARKERS
        parts = [part.strip() for part in text[1:-1].split(",")]

        lower_text = parts[0] if parts else ""
        upper_text = parts[1] if len(parts) > 1 else ""

        object.__setattr__(
            self, "lower_bound", _make_bound(lower_text, lower_exclusive, text)
        )
        object.__setattr__(
            self, "upper_bound", _make_bound(upper_text, upper_exclusive, text)
        )

    def contains(self, version: StaticVersion) -> bool:
        exact = version.exact_version
        lower = self.lower_bound
        upper = self.upper_bound

        if lower is None and upper is None:
            return False
        if lower is not None and exact < lower.value:
            return False
        if upper is not None and exact > upper.value:
            return False
        if lower is not None and exact == lower.value:
            return not lower.is_exclusive
        if upper is not None and exact == upper.value:
            return not upper.is_exclusive

        # Strictly between the bounds that are present
        return True

    def is_update(self, version: StaticVersion) -> bool:
        if self.contains(version):
            return False
        upper = self.upper_bound
        if upper is None:
            return False
        if version == upper.value:
            return upper.is_exclusive
        return upper.value.is_update(version)

    def __str__(self) -> str:
        return self.text


def _make_bound(text: str, exclusive: bool, range_text: str) -> Optional[Bound]:
    if not text:
        return None
    value = parse_version(text)
    if not value.is_static:
        raise ValueError(f"Range bound {text!r} in {range_text} is not static")
    return Bound(value=value, is_exclusive=exclusive)  # type: ignore[arg-type]


@dataclass(frozen=True, eq=True)
class Prefix(GradleVersion):
    """A wildcard version such as ``1.3.+`` or ``+``.

    Raises:
        ValueError: The text does not end with ``+``.
    """

    text: str
    base_version: Optional[Exact] = field(init=False, compare=False, hash=False)
    _pattern: Optional["re.Pattern[str]"] = field(
        init=False, repr=False, compare=False, hash=False
    )

    kind = VersionKind.PREFIX

    def __post_init__(self) -> None:
        if not self.text or self.text[-1] != "+":
            raise ValueError(f"Wrong format for prefix {self.text}")

        prefix_text = self.text[:-1]
        if not prefix_text:
            # A bare "+" matches every version
            pattern = None
            base = None
        else:
            pattern = re.compile(re.escape(prefix_text) + ".*")
            exact_text = (
                prefix_text[:-1] if prefix_text[-1] in SEPARATORS else prefix_text
            )
            base = Exact(exact_text) if exact_text else None

        object.__setattr__(self, "_pattern", pattern)
        object.__setattr__(self, "base_version", base)

    def contains(self, version: StaticVersion) -> bool:
        return self._pattern is None or self._pattern.fullmatch(version.text) is not None

    def is_update(self, version: StaticVersion) -> bool:
        return (
            self.base_version is not None
            and not self.contains(version)
            and self.base_version.is_update(version)
        )

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, eq=True)
class Latest(GradleVersion):
    """A floating marker such as ``latest.release``; never comparable."""

    text: str

    kind = VersionKind.LATEST

    def contains(self, version: StaticVersion) -> bool:
        return False

    def is_update(self, version: StaticVersion) -> bool:
        return False

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, eq=True)
class Unknown(GradleVersion):
    """Blank or unparsable input; inert in every comparison."""

    text: str

    kind = VersionKind.UNKNOWN

    def contains(self, version: StaticVersion) -> bool:
        return False

    def is_update(self, version: StaticVersion) -> bool:
        return False

    def __str__(self) -> str:
        return self.text


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_version(raw: str) -> GradleVersion:
    """Parse *raw* into the matching version kind.

    Dispatch order: blank → :class:`Unknown`, bracketed → :class:`Range`,
    trailing ``+`` → :class:`Prefix`, ``-SNAPSHOT`` suffix →
    :class:`Snapshot`, ``latest.`` prefix → :class:`Latest`, otherwise
    :class:`Exact`. Malformed ranges or prefixes fall back to
    :class:`Unknown`; this function never raises.

    Args:
        raw: Version text as written in a catalog or repository metadata.

    Returns:
        The parsed version.
    """
    text = (raw or "").strip()
    try:
        if not text:
            return Unknown(raw or "")
        if (
            len(text) > 2
            and text[0] in LOWER_BOUND_MARKERS
            and text[-1] in UPPER_BOUND_MARKERS
        ):
            return Range(text)
        if text.endswith("+"):
            return Prefix(text)
        if text.endswith(SNAPSHOT_SUFFIX):
            return Snapshot(text)
        if text.startswith(LATEST_PREFIX):
            return Latest(text)
        return Exact(text)
    except ValueError:
        return Unknown(raw)


def is_static(version: Optional[GradleVersion]) -> bool:
    """Return ``True`` when *version* is an :class:`Exact` or :class:`Snapshot`."""
    return version is not None and version.is_static

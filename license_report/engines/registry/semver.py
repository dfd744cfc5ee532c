"""npm-compatible semantic versions and range matching.

Covers the range syntax found in ``package.json`` manifests: ``||`` unions,
hyphen ranges (``1.2.3 - 2.3.4``), space-separated comparator sets, caret and
tilde ranges, ``x``/``X``/``*`` partials and the plain comparison operators.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

_NUM = r"0|[1-9]\d*"
_XR = rf"{_NUM}|[xX*]"
_PRE = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"

_VERSION_RE = re.compile(
    rf"^v?({_NUM})\.({_NUM})\.({_NUM})(?:-({_PRE}))?(?:\+({_PRE}))?$"
)
_PARTIAL_RE = re.compile(
    rf"^v?({_XR})(?:\.({_XR})(?:\.({_XR})(?:-({_PRE}))?(?:\+{_PRE})?)?)?$"
)
_TOKEN_RE = re.compile(r"^(<=|>=|<|>|=|\^|~>?)?(.*)$")
_OP_SPACE_RE = re.compile(r"(<=|>=|<|>|=|\^|~>?)\s+")
_HYPHEN_RE = re.compile(r"^(\S+)\s+-\s+(\S+)$")


class InvalidRange(ValueError):
    """Raised when a range expression cannot be parsed."""


def _prerelease_ids(text: str | None) -> tuple[int | str, ...]:
    if not text:
        return ()
    return tuple(int(part) if part.isdigit() else part for part in text.split("."))


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """A parsed ``major.minor.patch[-prerelease][+build]`` version."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[int | str, ...] = ()
    build: tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def sort_key(self) -> tuple:
        # Releases sort after their prereleases; numeric identifiers before alphanumeric.
        if not self.prerelease:
            return (*self.core, 1, ())
        ids = tuple(
            (0, part, "") if isinstance(part, int) else (1, 0, part) for part in self.prerelease
        )
        return (*self.core, 0, ids)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(str(part) for part in self.prerelease)
        return text


def parse_version(text: str | None) -> Version | None:
    """Parse a strict version string; returns None when *text* is not one."""
    if not text:
        return None
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return Version(
        int(m.group(1)),
        int(m.group(2)),
        int(m.group(3)),
        _prerelease_ids(m.group(4)),
        build,
    )


def valid(text: str | None) -> str | None:
    """Return the normalised version string, or None if *text* is not a version."""
    version = parse_version(text)
    return str(version) if version is not None else None


@dataclass(frozen=True)
class Comparator:
    op: str  # one of < <= > >= =
    version: Version

    def test(self, candidate: Version) -> bool:
        a, b = candidate.sort_key(), self.version.sort_key()
        if self.op == "<":
            return a < b
        if self.op == "<=":
            return a <= b
        if self.op == ">":
            return a > b
        if self.op == ">=":
            return a >= b
        return a == b


ComparatorSet = tuple[Comparator, ...]

# <0.0.0-0 is below every version.
_NOTHING: ComparatorSet = (Comparator("<", Version(0, 0, 0, (0,))),)


def _partial(text: str) -> tuple[int | None, int | None, int | None, tuple[int | str, ...]]:
    m = _PARTIAL_RE.match(text)
    if m is None:
        raise InvalidRange(f"invalid version in range: {text!r}")

    def num(value: str | None) -> int | None:
        if value is None or value in ("x", "X", "*"):
            return None
        return int(value)

    major, minor, patch = num(m.group(1)), num(m.group(2)), num(m.group(3))
    if major is None:
        minor = patch = None
    elif minor is None:
        patch = None
    return major, minor, patch, _prerelease_ids(m.group(4))


def _desugar(op: str, text: str, floor: tuple[int | str, ...]) -> ComparatorSet:
    """Expand one range token into primitive comparators."""
    major, minor, patch, pre = _partial(text)

    def v(a: int, b: int, c: int, p: tuple[int | str, ...] = ()) -> Version:
        return Version(a, b, c, p)

    if op == "^":
        if major is None:
            return ()
        if minor is None:
            return (Comparator(">=", v(major, 0, 0)), Comparator("<", v(major + 1, 0, 0, floor)))
        if patch is None:
            upper = v(0, minor + 1, 0, floor) if major == 0 else v(major + 1, 0, 0, floor)
            return (Comparator(">=", v(major, minor, 0)), Comparator("<", upper))
        if major > 0:
            upper = v(major + 1, 0, 0, floor)
        elif minor > 0:
            upper = v(0, minor + 1, 0, floor)
        else:
            upper = v(0, 0, patch + 1, floor)
        return (Comparator(">=", v(major, minor, patch, pre)), Comparator("<", upper))

    if op in ("~", "~>"):
        if major is None:
            return ()
        if minor is None:
            return (Comparator(">=", v(major, 0, 0)), Comparator("<", v(major + 1, 0, 0, floor)))
        lower = v(major, minor, patch or 0, pre if patch is not None else ())
        return (Comparator(">=", lower), Comparator("<", v(major, minor + 1, 0, floor)))

    if op == ">":
        if major is None:
            return _NOTHING
        if minor is None:
            return (Comparator(">=", v(major + 1, 0, 0, floor)),)
        if patch is None:
            return (Comparator(">=", v(major, minor + 1, 0, floor)),)
        return (Comparator(">", v(major, minor, patch, pre)),)

    if op == ">=":
        if major is None:
            return ()
        if patch is None:
            return (Comparator(">=", v(major, minor or 0, 0, floor)),)
        return (Comparator(">=", v(major, minor, patch, pre)),)

    if op == "<":
        if major is None:
            return _NOTHING
        if patch is None:
            return (Comparator("<", v(major, minor or 0, 0, floor)),)
        return (Comparator("<", v(major, minor, patch, pre)),)

    if op == "<=":
        if major is None:
            return ()
        if minor is None:
            return (Comparator("<", v(major + 1, 0, 0, floor)),)
        if patch is None:
            return (Comparator("<", v(major, minor + 1, 0, floor)),)
        return (Comparator("<=", v(major, minor, patch, pre)),)

    # bare version or "="
    if major is None:
        return ()
    if minor is None:
        return (Comparator(">=", v(major, 0, 0)), Comparator("<", v(major + 1, 0, 0, floor)))
    if patch is None:
        return (Comparator(">=", v(major, minor, 0)), Comparator("<", v(major, minor + 1, 0, floor)))
    return (Comparator("=", v(major, minor, patch, pre)),)


def _hyphen(low: str, high: str, floor: tuple[int | str, ...]) -> ComparatorSet:
    lo_major, lo_minor, lo_patch, lo_pre = _partial(low)
    hi_major, hi_minor, hi_patch, hi_pre = _partial(high)
    comparators: list[Comparator] = []
    if lo_major is not None:
        lower = Version(lo_major, lo_minor or 0, lo_patch or 0, lo_pre)
        comparators.append(Comparator(">=", lower))
    if hi_major is not None:
        if hi_minor is None:
            comparators.append(Comparator("<", Version(hi_major + 1, 0, 0, floor)))
        elif hi_patch is None:
            comparators.append(Comparator("<", Version(hi_major, hi_minor + 1, 0, floor)))
        else:
            comparators.append(Comparator("<=", Version(hi_major, hi_minor, hi_patch, hi_pre)))
    return tuple(comparators)


def parse_range(text: str, *, include_prerelease: bool = False) -> list[ComparatorSet]:
    """Parse an npm range into a union of comparator sets.

    An empty comparator set matches every version. Raises :class:`InvalidRange`.
    """
    floor: tuple[int | str, ...] = (0,) if include_prerelease else ()
    sets: list[ComparatorSet] = []
    for part in (text or "").split("||"):
        part = part.strip()
        hyphen = _HYPHEN_RE.match(part)
        if hyphen:
            sets.append(_hyphen(hyphen.group(1), hyphen.group(2), floor))
            continue
        comparators: list[Comparator] = []
        for token in _OP_SPACE_RE.sub(r"\1", part).split():
            m = _TOKEN_RE.match(token)
            comparators.extend(_desugar(m.group(1) or "", m.group(2), floor))
        sets.append(tuple(comparators))
    return sets


def _set_allows(
    version: Version, comparators: ComparatorSet, include_prerelease: bool
) -> bool:
    if not all(c.test(version) for c in comparators):
        return False
    if include_prerelease or not version.is_prerelease:
        return True
    # A prerelease only matches when the set names a prerelease of the same release.
    return any(
        c.version.is_prerelease and c.version.core == version.core for c in comparators
    )


def satisfies(version: Version, range_text: str, *, include_prerelease: bool = False) -> bool:
    """Whether *version* falls inside *range_text*; invalid ranges match nothing."""
    try:
        sets = parse_range(range_text, include_prerelease=include_prerelease)
    except InvalidRange:
        return False
    return any(_set_allows(version, s, include_prerelease) for s in sets)


def max_satisfying(
    versions: Iterable[str], range_text: str, *, include_prerelease: bool = False
) -> Version | None:
    """Highest version in *versions* satisfying *range_text*.

    Unparseable entries in *versions* are skipped. Returns None when nothing
    matches or when the range itself is invalid.
    """
    try:
        sets = parse_range(range_text, include_prerelease=include_prerelease)
    except InvalidRange:
        return None

    best: Version | None = None
    for text in versions:
        candidate = parse_version(text)
        if candidate is None:
            continue
        if best is not None and candidate <= best:
            continue
        if any(_set_allows(candidate, s, include_prerelease) for s in sets):
            best = candidate
    return best

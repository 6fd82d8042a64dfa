"""Version requirements: exact versions, npm-style ranges and dist-tags."""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable

from semver import Version

from .errors import MalformedSpecifier

UNCONSTRAINED = "0.0.0"

_TAG_RE = re.compile(r"^[A-Za-z][A-Za-z0-9._-]*$")
_PARTIAL_RE = re.compile(
    r"^v?(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)
_COMPARATOR_RE = re.compile(r"^(?P<op><=|>=|<|>|=|\^|~>?)?(?P<version>\S+)$")
_HYPHEN_RE = re.compile(r"^(?P<low>\S+)\s+-\s+(?P<high>\S+)$")
_OPERATOR_GAP_RE = re.compile(r"(<=|>=|<|>|=|\^|~>?)\s+")

_OPS: dict[str, Callable[[Version, Version], bool]] = {
    "=": operator.eq,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

Comparator = tuple[str, Version]


def parse_version(text: str) -> Version | None:
    """Parse a concrete semantic version, tolerating a leading ``v``."""
    value = (text or "").strip()
    if value[:1] in ("v", "V") and value[1:2].isdigit():
        value = value[1:]
    try:
        return Version.parse(value)
    except (ValueError, TypeError):
        return None


@dataclass(frozen=True)
class _Partial:
    major: int | None
    minor: int | None
    patch: int | None
    prerelease: str | None

    def filled(self) -> Version:
        return Version(self.major or 0, self.minor or 0, self.patch or 0, prerelease=self.prerelease)


def _parse_partial(text: str) -> _Partial:
    match = _PARTIAL_RE.match(text)
    if not match:
        raise MalformedSpecifier(f"invalid version in requirement: {text!r}")

    def _part(key: str) -> int | None:
        raw = match.group(key)
        if raw is None or raw in ("x", "X", "*"):
            return None
        return int(raw)

    major, minor, patch = _part("major"), _part("minor"), _part("patch")
    # Anything after a wildcard is a wildcard too ("1.x.3" == "1.x").
    if major is None:
        minor = patch = None
    elif minor is None:
        patch = None
    prerelease = match.group("pre") if patch is not None else None
    return _Partial(major=major, minor=minor, patch=patch, prerelease=prerelease)


def _expand(op: str, partial: _Partial) -> list[Comparator]:
    major, minor, patch = partial.major, partial.minor, partial.patch
    if major is None:
        return []
    base = partial.filled()

    if op in ("", "="):
        if minor is None:
            return [(">=", base), ("<", Version(major + 1, 0, 0))]
        if patch is None:
            return [(">=", base), ("<", Version(major, minor + 1, 0))]
        return [("=", base)]
    if op == "^":
        if major > 0 or minor is None:
            upper = Version(major + 1, 0, 0)
        elif minor > 0 or patch is None:
            upper = Version(0, minor + 1, 0)
        else:
            upper = Version(0, 0, patch + 1)
        return [(">=", base), ("<", upper)]
    if op in ("~", "~>"):
        if minor is None:
            return [(">=", base), ("<", Version(major + 1, 0, 0))]
        return [(">=", base), ("<", Version(major, minor + 1, 0))]
    if op == ">":
        if patch is not None:
            return [(">", base)]
        if minor is not None:
            return [(">=", Version(major, minor + 1, 0))]
        return [(">=", Version(major + 1, 0, 0))]
    if op == "<=":
        if patch is not None:
            return [("<=", base)]
        if minor is not None:
            return [("<", Version(major, minor + 1, 0))]
        return [("<", Version(major + 1, 0, 0))]
    # ">=" and "<" only need the zero-filled bound.
    return [(op, base)]


def _parse_hyphen(low: str, high: str) -> list[Comparator]:
    lower = _parse_partial(low)
    upper = _parse_partial(high)
    comparators: list[Comparator] = []
    if lower.major is not None:
        comparators.append((">=", lower.filled()))
    comparators.extend(_expand("<=", upper))
    return comparators


def _parse_alternative(text: str) -> list[Comparator]:
    text = text.strip()
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        return _parse_hyphen(hyphen.group("low"), hyphen.group("high"))
    comparators: list[Comparator] = []
    for token in _OPERATOR_GAP_RE.sub(r"\1", text).split():
        match = _COMPARATOR_RE.match(token)
        if not match:
            raise MalformedSpecifier(f"invalid comparator: {token!r}")
        comparators.extend(_expand(match.group("op") or "", _parse_partial(match.group("version"))))
    return comparators


def _satisfies(version: Version, comparators: list[Comparator]) -> bool:
    if not all(_OPS[op](version, bound) for op, bound in comparators):
        return False
    if version.prerelease is None:
        return True
    # A prerelease only matches when a comparator opts in on the same release line.
    release = (version.major, version.minor, version.patch)
    return any(
        bound.prerelease is not None and (bound.major, bound.minor, bound.patch) == release
        for _, bound in comparators
    )


@dataclass(frozen=True)
class VersionRequirement:
    raw: str
    kind: str
    alternatives: tuple[tuple[Comparator, ...], ...] = field(default=(), compare=False, repr=False)

    @classmethod
    def parse(cls, raw: str) -> "VersionRequirement":
        text = (raw or "").strip()
        if text in ("", "*", "x", "X"):
            return cls(raw=text or "*", kind="range", alternatives=((),))
        exact = parse_version(text)
        if exact is not None:
            return cls(raw=text, kind="exact", alternatives=((("=", exact),),))
        try:
            alternatives = tuple(tuple(_parse_alternative(part)) for part in text.split("||"))
        except MalformedSpecifier:
            if _TAG_RE.match(text):
                return cls(raw=text, kind="tag")
            raise MalformedSpecifier(f"invalid version requirement: {raw!r}") from None
        return cls(raw=text, kind="range", alternatives=alternatives)

    @property
    def is_tag(self) -> bool:
        return self.kind == "tag"

    def matches(self, version: str | Version) -> bool:
        if self.is_tag:
            return False
        parsed = version if isinstance(version, Version) else parse_version(version)
        if parsed is None:
            return False
        return any(_satisfies(parsed, list(alternative)) for alternative in self.alternatives)

    def select(self, versions: Iterable[str]) -> str | None:
        """Return the highest of ``versions`` that satisfies this requirement."""
        best: Version | None = None
        best_raw: str | None = None
        for raw in versions:
            parsed = parse_version(raw)
            if parsed is None or not self.matches(parsed):
                continue
            if best is None or parsed > best:
                best = parsed
                best_raw = raw
        return best_raw

    def __str__(self) -> str:
        return self.raw


def is_unconstrained(version: str | None) -> bool:
    return version is None or version.strip() in ("", UNCONSTRAINED)

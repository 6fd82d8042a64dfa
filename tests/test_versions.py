from __future__ import annotations

import pytest

from sapm_core import MalformedSpecifier, VersionRequirement
from sapm_core.versions import is_unconstrained, parse_version


@pytest.mark.parametrize(
    "requirement, version, expected",
    [
        ("1.2.3", "1.2.3", True),
        ("1.2.3", "1.2.4", False),
        ("v1.2.3", "1.2.3", True),
        ("^1.2.3", "1.9.0", True),
        ("^1.2.3", "2.0.0", False),
        ("^1.2.3", "1.2.2", False),
        ("^0.2.3", "0.2.9", True),
        ("^0.2.3", "0.3.0", False),
        ("^0.0.3", "0.0.4", False),
        ("~1.2.3", "1.2.9", True),
        ("~1.2.3", "1.3.0", False),
        ("~1", "1.9.9", True),
        ("1.x", "1.5.0", True),
        ("1.x", "2.0.0", False),
        ("1.2", "1.2.7", True),
        ("*", "3.0.0", True),
        (">=1.0.0 <2.0.0", "1.4.0", True),
        (">=1.0.0 <2.0.0", "2.0.0", False),
        (">= 1.0.0", "1.0.0", True),
        (">1.2", "1.2.9", False),
        (">1.2", "1.3.0", True),
        ("<=1.2", "1.2.9", True),
        ("1.2.3 - 2.3", "2.3.9", True),
        ("1.2.3 - 2.3", "2.4.0", False),
        ("<1.0.0 || >=3.0.0", "0.5.0", True),
        ("<1.0.0 || >=3.0.0", "2.0.0", False),
        ("<1.0.0 || >=3.0.0", "3.1.0", True),
    ],
)
def test_matches(requirement: str, version: str, expected: bool) -> None:
    assert VersionRequirement.parse(requirement).matches(version) is expected


def test_prereleases_need_an_opt_in_on_the_same_release() -> None:
    assert not VersionRequirement.parse("^1.2.3").matches("1.3.0-beta.1")
    assert VersionRequirement.parse(">=1.3.0-beta.0").matches("1.3.0-beta.1")
    assert not VersionRequirement.parse(">=1.3.0-beta.0").matches("1.4.0-beta.1")
    assert VersionRequirement.parse("1.3.0-beta.1").matches("1.3.0-beta.1")


def test_kinds() -> None:
    assert VersionRequirement.parse("2.29.4").kind == "exact"
    assert VersionRequirement.parse("^2.0.0").kind == "range"
    assert VersionRequirement.parse("latest").is_tag
    assert VersionRequirement.parse("next").is_tag
    assert not VersionRequirement.parse("latest").matches("1.0.0")


@pytest.mark.parametrize("raw", ["^abc", ">=", "1.2.3.4.5", "~>", "!1.0.0"])
def test_rejects_invalid_requirements(raw: str) -> None:
    with pytest.raises(MalformedSpecifier):
        VersionRequirement.parse(raw)


def test_select_returns_highest_match() -> None:
    requirement = VersionRequirement.parse("^1.0.0")
    assert requirement.select(["1.0.0", "1.5.0", "2.0.0", "not-a-version"]) == "1.5.0"
    assert requirement.select(["2.0.0", "3.0.0"]) is None


def test_helpers() -> None:
    assert parse_version("v2.0.0") is not None
    assert parse_version("2.0") is None
    assert is_unconstrained(None)
    assert is_unconstrained("0.0.0")
    assert not is_unconstrained("^1.0.0")

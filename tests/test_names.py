from __future__ import annotations

import pytest

from sapm_core import MalformedSpecifier, PackageName


def test_parse_unscoped_name() -> None:
    name = PackageName.parse("moment")
    assert name.name == "moment"
    assert name.scope is None
    assert not name.is_scoped
    assert str(name) == "moment"


def test_parse_scoped_name() -> None:
    name = PackageName.parse("@voidvoxel/position-3d")
    assert name.scope == "@voidvoxel"
    assert name.name == "position-3d"
    assert name.to_json() == {"name": "position-3d", "scope": "@voidvoxel"}


@pytest.mark.parametrize(
    "raw",
    ["moment", "block-stream", "@voidvoxel/position-3d", "@types/node", "scope/name"],
)
def test_parse_then_stringify_is_identity(raw: str) -> None:
    assert str(PackageName.parse(raw)) == raw
    assert PackageName.parse(str(PackageName.parse(raw))) == PackageName.parse(raw)


@pytest.mark.parametrize("raw", ["", "   ", "scope/", "@scope/", "/name", "@", "@/name"])
def test_parse_rejects_missing_segments(raw: str) -> None:
    with pytest.raises(MalformedSpecifier):
        PackageName.parse(raw)


def test_scope_is_not_validated_for_leading_at() -> None:
    assert PackageName.parse("voidvoxel/position-3d").scope == "voidvoxel"


def test_setters_return_new_values() -> None:
    original = PackageName("position-3d")
    scoped = original.with_scope("@voidvoxel")
    assert str(scoped) == "@voidvoxel/position-3d"
    assert original.scope is None
    assert str(scoped.with_name("vector-3d")) == "@voidvoxel/vector-3d"
    assert PackageName.stringify(scoped.with_scope(None)) == "position-3d"

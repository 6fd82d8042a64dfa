"""``name@version`` specifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import MalformedSpecifier
from .names import PackageName
from .versions import UNCONSTRAINED, VersionRequirement, is_unconstrained


def split_specifier(raw: str) -> tuple[str, str | None]:
    """Split a specifier into its name part and optional version part.

    A leading ``@`` opens a scope and belongs to the name, so only the
    remainder is split on ``@``::

        "moment"                 -> ("moment", None)
        "moment@2.29.4"          -> ("moment", "2.29.4")
        "@scope/name"            -> ("@scope/name", None)
        "@scope/name@^1.0.0"     -> ("@scope/name", "^1.0.0")
    """
    text = (raw or "").strip()
    if text.startswith("@"):
        head, sep, version = text[1:].partition("@")
        name = "@" + head
    else:
        name, sep, version = text.partition("@")
    if not sep:
        return name, None
    return name, version


@dataclass(frozen=True, init=False)
class PackageDependency:
    name: PackageName
    version: str = UNCONSTRAINED

    def __init__(self, name: PackageName | str, version: str | None = None) -> None:
        if isinstance(name, str):
            name = PackageName.parse(name)
        if not isinstance(name, PackageName):
            raise MalformedSpecifier(f"invalid package name {name!r}")
        version = UNCONSTRAINED if version is None else version.strip()
        if not version:
            raise MalformedSpecifier(f"empty version for package '{name}'")
        if version != UNCONSTRAINED:
            VersionRequirement.parse(version)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "version", version)

    @classmethod
    def parse(cls, raw: str) -> "PackageDependency":
        name, version = split_specifier(raw)
        if version is not None and not version.strip():
            raise MalformedSpecifier(f"missing version after '@' in {raw!r}")
        return cls(name, version)

    @staticmethod
    def stringify(dependency: "PackageDependency") -> str:
        return str(dependency)

    @property
    def full_name(self) -> str:
        return str(self.name)

    @property
    def is_unconstrained(self) -> bool:
        return is_unconstrained(self.version)

    @property
    def requirement(self) -> VersionRequirement | None:
        if self.is_unconstrained:
            return None
        return VersionRequirement.parse(self.version)

    def to_json(self) -> dict[str, Any]:
        return {"name": self.full_name, "version": self.version}

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"

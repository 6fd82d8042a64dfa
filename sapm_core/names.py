"""Scoped package names (``@scope/name``)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .errors import MalformedSpecifier


@dataclass(frozen=True)
class PackageName:
    name: str
    scope: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise MalformedSpecifier("package name cannot be empty")
        if self.name == "@" or self.scope == "@":
            raise MalformedSpecifier(f"a bare '@' is not a package name or scope: {str(self)!r}")
        if self.scope is not None:
            if not self.scope:
                raise MalformedSpecifier(f"empty scope in package name '/{self.name}'")
            if "/" in self.scope:
                raise MalformedSpecifier(f"scope cannot contain '/': {self.scope!r}")

    @classmethod
    def parse(cls, raw: str) -> "PackageName":
        """Split ``raw`` on its first ``/``.

        The scope is kept exactly as written; the leading ``@`` is the
        caller's convention and is not checked here.
        """
        text = (raw or "").strip()
        if not text:
            raise MalformedSpecifier("empty package name")
        if "/" not in text:
            return cls(name=text)
        scope, _, name = text.partition("/")
        if not name:
            raise MalformedSpecifier(f"missing package name after scope: {raw!r}")
        if not scope:
            raise MalformedSpecifier(f"missing scope before '/': {raw!r}")
        return cls(name=name, scope=scope)

    @staticmethod
    def stringify(package_name: "PackageName") -> str:
        return str(package_name)

    @property
    def is_scoped(self) -> bool:
        return self.scope is not None

    def with_name(self, name: str) -> "PackageName":
        return replace(self, name=name)

    def with_scope(self, scope: str | None) -> "PackageName":
        return replace(self, scope=scope)

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "scope": self.scope}

    def __str__(self) -> str:
        if self.scope:
            return f"{self.scope}/{self.name}"
        return self.name

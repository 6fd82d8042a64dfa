"""In-memory view of a project's ``package.json``."""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .errors import InvalidManifest, ManifestNotFound, ManifestWriteFailed

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"
DEFAULT_VERSION = "0.0.0"
DEFAULT_MAIN = "src/index.js"
CANONICAL_KEYS = ("name", "version", "main", "dependencies", "devDependencies")


def _string_map(value: Any, *, key: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidManifest(f"'{key}' must be an object")
    return {str(name): str(version) for name, version in value.items()}


def _file_mode(path: Path) -> int:
    # mkstemp creates 0600 files; keep the existing mode, or what open() would give a new file.
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


@dataclass
class Manifest:
    name: str
    version: str = DEFAULT_VERSION
    main: str = DEFAULT_MAIN
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def default(cls, name: str = "example") -> "Manifest":
        return cls(name=name)

    @staticmethod
    def resolve_path(path: str | os.PathLike[str]) -> Path:
        """Map a project directory (or the manifest itself) to the manifest path."""
        resolved = Path(path).resolve()
        if resolved.name == MANIFEST_FILENAME:
            return resolved
        return resolved / MANIFEST_FILENAME

    @classmethod
    def exists(cls, path: str | os.PathLike[str]) -> bool:
        return cls.resolve_path(path).is_file()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Manifest":
        if not isinstance(data, Mapping):
            raise InvalidManifest("manifest root must be a JSON object")
        extra = {str(key): value for key, value in data.items() if key not in CANONICAL_KEYS}
        return cls(
            name=str(data.get("name") or ""),
            version=str(data.get("version") or DEFAULT_VERSION),
            main=str(data.get("main") or DEFAULT_MAIN),
            dependencies=_string_map(data.get("dependencies"), key="dependencies"),
            dev_dependencies=_string_map(data.get("devDependencies"), key="devDependencies"),
            extra=extra,
        )

    @classmethod
    def loads(cls, text: str) -> "Manifest":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidManifest(f"manifest is not valid JSON: {exc}") from exc
        return cls.from_dict(payload)

    @classmethod
    def load(cls, path: str | os.PathLike[str], *, required: bool = True) -> "Manifest | None":
        manifest_path = cls.resolve_path(path)
        if not manifest_path.is_file():
            if required:
                raise ManifestNotFound(f"manifest not found: {manifest_path}")
            return None
        manifest = cls.loads(manifest_path.read_text(encoding="utf-8"))
        logger.debug("loaded manifest path=%s dependencies=%s", manifest_path, len(manifest.dependencies))
        return manifest

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "main": self.main,
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies),
        }
        payload.update(self.extra)
        return payload

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2) + "\n"

    def save(self, path: str | os.PathLike[str]) -> Path:
        """Write the manifest; a failed write leaves the previous file in place."""
        manifest_path = self.resolve_path(path)
        text = self.dumps()
        try:
            manifest_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".package-", suffix=".json", dir=manifest_path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                os.chmod(tmp_name, _file_mode(manifest_path))
                os.replace(tmp_name, manifest_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ManifestWriteFailed(f"failed to write {manifest_path}: {exc}") from exc
        logger.debug("saved manifest path=%s", manifest_path)
        return manifest_path

    def add_dependency(self, name: str, version: str, *, dev: bool = False) -> None:
        target = self.dev_dependencies if dev else self.dependencies
        target[name] = version

    def remove_dependency(self, name: str) -> bool:
        removed = self.dependencies.pop(name, None) is not None
        removed = self.dev_dependencies.pop(name, None) is not None or removed
        return removed

    def has_dependency(self, name: str) -> bool:
        return name in self.dependencies or name in self.dev_dependencies

    def dependency_version(self, name: str) -> str | None:
        if name in self.dependencies:
            return self.dependencies[name]
        return self.dev_dependencies.get(name)

    def installed_names(self) -> set[str]:
        return set(self.dependencies) | set(self.dev_dependencies)

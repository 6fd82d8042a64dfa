"""On-disk layout shared by package sources."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Iterable, Mapping

from ..errors import MalformedSpecifier, VersionNotFound
from ..versions import VersionRequirement

LATEST_TAG = "latest"


def package_dir(install_path: Path, name: str) -> Path:
    """Directory a package lives in, e.g. ``node_modules/@scope/name``."""
    root = install_path.resolve()
    target = (root / name).resolve()
    if root not in target.parents:
        raise MalformedSpecifier(f"package name escapes install directory: {name!r}")
    return target


def read_package_version(path: Path) -> str | None:
    manifest = path / "package.json"
    if not manifest.is_file():
        return None
    try:
        payload = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    version = str(payload.get("version") or "").strip()
    return version or None


def select_version(
    name: str,
    available: Iterable[str],
    requested: str | None,
    tags: Mapping[str, str] | None = None,
) -> str:
    """Pick the version to install.

    ``None`` means unconstrained: the ``latest`` tag when the source has
    one, else the highest release.
    """
    versions = list(available)
    tags = dict(tags or {})
    if requested is None:
        tagged = tags.get(LATEST_TAG)
        if tagged in versions:
            return tagged
        requested = "*"
    requirement = VersionRequirement.parse(requested)
    if requirement.is_tag:
        tagged = tags.get(requirement.raw)
        if tagged in versions:
            return tagged
        if requirement.raw == LATEST_TAG:
            requirement = VersionRequirement.parse("*")
        else:
            raise VersionNotFound(f"no dist-tag '{requirement.raw}' for {name}")
    selected = requirement.select(versions)
    if selected is None:
        raise VersionNotFound(f"no version of {name} satisfies '{requirement.raw}'")
    return selected


def remove_package_dir(install_path: Path, name: str) -> bool:
    target = package_dir(install_path, name)
    if not target.exists():
        return False
    shutil.rmtree(target)
    # Drop the scope directory once its last package is gone.
    parent = target.parent
    if parent != install_path.resolve() and parent.name.startswith("@") and not any(parent.iterdir()):
        parent.rmdir()
    return True

"""Package source backed by an npm-compatible registry."""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tarfile
import tempfile
from pathlib import Path
from typing import Any

from ..errors import SourceUnavailable, VersionNotFound
from .client import RegistryClient
from .layout import package_dir, read_package_version, remove_package_dir, select_version
from .models import InstalledPackage

logger = logging.getLogger(__name__)


def _safe_tar_extract(tf: tarfile.TarFile, dest: Path) -> None:
    """
    Prevent path traversal. Only allow members under dest.
    """
    dest = dest.resolve()
    for member in tf.getmembers():
        target = (dest / member.name).resolve()
        if not str(target).startswith(str(dest) + os.sep) and target != dest:
            raise SourceUnavailable(f"unsafe tar member path: {member.name}")
        if member.issym() or member.islnk():
            raise SourceUnavailable(f"links are not allowed in package archives: {member.name}")
        if not (member.isfile() or member.isdir()):
            raise SourceUnavailable(f"special files are not allowed in package archives: {member.name}")
    tf.extractall(dest, filter="data")


def _package_root(extracted: Path) -> Path:
    # npm tarballs wrap everything in "package/"; older ones use any single top-level dir.
    candidate = extracted / "package"
    if candidate.is_dir():
        return candidate
    children = list(extracted.iterdir())
    if len(children) == 1 and children[0].is_dir():
        return children[0]
    return extracted


def _verify_shasum(archive: Path, expected: str | None) -> None:
    if not expected:
        return
    digest = hashlib.sha1(archive.read_bytes()).hexdigest()
    if digest != expected.strip().lower():
        raise SourceUnavailable(f"checksum mismatch for {archive.name}: expected {expected}, got {digest}")


class RegistrySource:
    def __init__(self, install_path: Path, client: RegistryClient) -> None:
        self.install_path = Path(install_path).resolve()
        self.client = client

    def install(self, name: str, version: str | None = None) -> InstalledPackage:
        document = self.client.package_document(name)
        versions = document.get("versions")
        if not isinstance(versions, dict) or not versions:
            raise VersionNotFound(f"no versions published for {name}")
        tags = document.get("dist-tags")
        selected = select_version(name, versions.keys(), version, tags if isinstance(tags, dict) else None)
        dist = _dist_info(versions[selected])
        tarball = str(dist.get("tarball") or "").strip()
        if not tarball:
            raise SourceUnavailable(f"registry has no tarball for {name}@{selected}")

        target = package_dir(self.install_path, name)
        with tempfile.TemporaryDirectory(prefix="sapm-install-") as tmpd:
            tmp = Path(tmpd)
            archive = self.client.download(tarball, tmp / "package.tgz")
            _verify_shasum(archive, dist.get("shasum"))
            extracted = tmp / "extract"
            extracted.mkdir()
            try:
                with tarfile.open(archive, "r:*") as tf:
                    _safe_tar_extract(tf, extracted)
            except tarfile.TarError as exc:
                raise SourceUnavailable(f"invalid package archive for {name}@{selected}") from exc
            if target.exists():
                shutil.rmtree(target)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(_package_root(extracted)), str(target))

        installed = read_package_version(target) or selected
        logger.debug("registry install name=%s version=%s dir=%s", name, installed, target)
        return InstalledPackage(name=name, version=installed, path=target)

    def uninstall(self, name: str) -> None:
        if not remove_package_dir(self.install_path, name):
            logger.debug("registry uninstall name=%s: nothing on disk", name)

    def is_installed(self, name: str) -> bool:
        return package_dir(self.install_path, name).is_dir()

    def package_path(self, name: str) -> Path:
        return package_dir(self.install_path, name)


def _dist_info(metadata: Any) -> dict[str, Any]:
    if not isinstance(metadata, dict):
        return {}
    dist = metadata.get("dist")
    return dist if isinstance(dist, dict) else {}

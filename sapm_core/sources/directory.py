"""Offline package source: ``<root>/<name>/<version>/`` directories."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..errors import SourceUnavailable, VersionNotFound
from ..versions import parse_version
from .layout import package_dir, read_package_version, remove_package_dir, select_version
from .models import InstalledPackage

logger = logging.getLogger(__name__)


class DirectorySource:
    def __init__(self, root: Path, install_path: Path) -> None:
        self.root = Path(root).resolve()
        self.install_path = Path(install_path).resolve()

    def available_versions(self, name: str) -> list[str]:
        if not self.root.is_dir():
            raise SourceUnavailable(f"package directory not found: {self.root}")
        package_root = package_dir(self.root, name)
        if not package_root.is_dir():
            return []
        return [
            child.name
            for child in package_root.iterdir()
            if child.is_dir() and parse_version(child.name) is not None
        ]

    def install(self, name: str, version: str | None = None) -> InstalledPackage:
        versions = self.available_versions(name)
        if not versions:
            raise VersionNotFound(f"package not found in {self.root}: {name}")
        selected = select_version(name, versions, version)
        source_dir = package_dir(self.root, name) / selected

        target = package_dir(self.install_path, name)
        if target.exists():
            shutil.rmtree(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source_dir, target)

        installed = read_package_version(target) or selected
        logger.debug("directory install name=%s version=%s dir=%s", name, installed, target)
        return InstalledPackage(name=name, version=installed, path=target)

    def uninstall(self, name: str) -> None:
        if not remove_package_dir(self.install_path, name):
            logger.debug("directory uninstall name=%s: nothing on disk", name)

    def is_installed(self, name: str) -> bool:
        return package_dir(self.install_path, name).is_dir()

    def package_path(self, name: str) -> Path:
        return package_dir(self.install_path, name)

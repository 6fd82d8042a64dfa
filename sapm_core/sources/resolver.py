from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..config import SapmConfig
from .client import RegistryClient
from .directory import DirectorySource
from .models import InstalledPackage
from .registry import RegistrySource


class PackageSource(Protocol):
    """What the orchestrator needs from whatever fetches and removes packages.

    ``version`` is ``None`` when the caller did not constrain it.
    """

    def install(self, name: str, version: str | None = None) -> InstalledPackage: ...

    def uninstall(self, name: str) -> None: ...

    def is_installed(self, name: str) -> bool: ...

    def package_path(self, name: str) -> Path: ...


def build_source(config: SapmConfig, project_root: Path, install_path: Path) -> PackageSource:
    source_path = config.source_path(project_root)
    if source_path is not None:
        return DirectorySource(source_path, install_path)
    client = RegistryClient(
        config.registry_url,
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
        backoff_seconds=config.backoff_seconds,
        token=config.token,
    )
    return RegistrySource(install_path, client)

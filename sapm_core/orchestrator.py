"""Install/uninstall driver that keeps ``package.json`` in step with the package source.

Every specifier goes through the same steps, one specifier at a time:

    parse -> check manifest -> materialize via source -> record in manifest

and ends as installed, already satisfied, uninstalled or failed. A failure is
reported in that specifier's :class:`OutcomeReport`; it never stops the rest
of the batch.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from .config import SapmConfig, load_config
from .dependency import PackageDependency
from .errors import MalformedSpecifier, ManifestWriteFailed, NotInstalled, SapmError
from .manifest import Manifest
from .names import PackageName
from .sources import PackageSource, build_source
from .versions import VersionRequirement, is_unconstrained

logger = logging.getLogger(__name__)

ANY_VERSION = "*"


class OutcomeStatus(str, Enum):
    INSTALLED = "installed"
    ALREADY_SATISFIED = "already-satisfied"
    UNINSTALLED = "uninstalled"
    FAILED = "failed"


@dataclass(frozen=True)
class OutcomeReport:
    specifier: str
    status: OutcomeStatus
    name: str | None = None
    version: str | None = None
    error: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

    @classmethod
    def failed(cls, specifier: str, exc: Exception, *, name: str | None = None) -> "OutcomeReport":
        return cls(
            specifier=specifier,
            status=OutcomeStatus.FAILED,
            name=name,
            error=getattr(exc, "code", "io-error"),
            message=str(exc),
        )


class InstallOrchestrator:
    def __init__(
        self,
        project_path: str | os.PathLike[str] = ".",
        source: PackageSource | None = None,
        *,
        config: SapmConfig | None = None,
        install_path: str | os.PathLike[str] | None = None,
    ) -> None:
        self.manifest_path = Manifest.resolve_path(project_path)
        self.project_root = self.manifest_path.parent
        self.config = config or load_config(self.project_root)
        if install_path is not None:
            self.install_path = Path(install_path).resolve()
        else:
            self.install_path = self.config.install_path(self.project_root)
        self.source = source or build_source(self.config, self.project_root, self.install_path)
        self.manifest = self._load_manifest()

    def _load_manifest(self) -> Manifest:
        manifest = Manifest.load(self.manifest_path, required=False)
        if manifest is None:
            manifest = Manifest.default(self.project_root.name)
            manifest.save(self.manifest_path)
            logger.debug("created default manifest at %s", self.manifest_path)
        return manifest

    def install(self, *specifiers: str, dev: bool = False) -> list[OutcomeReport]:
        """Install each specifier; with none, install what the manifest already lists."""
        if not specifiers:
            return self.sync()
        return [self._install_one(specifier, dev=dev) for specifier in specifiers]

    def uninstall(self, *specifiers: str) -> list[OutcomeReport]:
        """Uninstall each specifier; with none, uninstall every manifest entry."""
        if not specifiers:
            specifiers = tuple(sorted(self.manifest.installed_names()))
        return [self._uninstall_one(specifier) for specifier in specifiers]

    def sync(self) -> list[OutcomeReport]:
        """Materialize manifest entries missing from the source. The manifest is not rewritten."""
        reports: list[OutcomeReport] = []
        entries = {**self.manifest.dev_dependencies, **self.manifest.dependencies}
        for name in sorted(entries):
            recorded = entries[name]
            specifier = f"{name}@{recorded}"
            requested = None if recorded in ("", ANY_VERSION) else recorded
            try:
                PackageName.parse(name)
                if self.source.is_installed(name):
                    reports.append(OutcomeReport(specifier, OutcomeStatus.ALREADY_SATISFIED, name, recorded))
                    continue
                installed = self.source.install(name, requested)
            except (SapmError, OSError) as exc:
                logger.warning("sync %s failed: %s", specifier, exc)
                reports.append(OutcomeReport.failed(specifier, exc, name=name))
                continue
            reports.append(OutcomeReport(specifier, OutcomeStatus.INSTALLED, name, installed.version or recorded))
        return reports

    def is_installed(self, name: str, version_requirement: str | None = None) -> bool:
        recorded = self.manifest.dependency_version(name)
        if recorded is None:
            return False
        if is_unconstrained(version_requirement) or recorded == version_requirement:
            return True
        try:
            requirement = VersionRequirement.parse(version_requirement)
        except MalformedSpecifier:
            return False
        return requirement.matches(recorded)

    def package_path(self, name: str) -> Path:
        if not self.is_installed(name):
            raise NotInstalled(f"{name} is not a dependency of {self.manifest.name}")
        return self.source.package_path(name)

    def _install_one(self, specifier: str, *, dev: bool) -> OutcomeReport:
        try:
            dependency = PackageDependency.parse(specifier)
        except MalformedSpecifier as exc:
            logger.warning("install %r rejected: %s", specifier, exc)
            return OutcomeReport.failed(specifier, exc)

        name = dependency.full_name
        if self.manifest.has_dependency(name):
            recorded = self.manifest.dependency_version(name)
            logger.debug("install %s: already satisfied by %s", name, recorded)
            return OutcomeReport(specifier, OutcomeStatus.ALREADY_SATISFIED, name, recorded)

        requested = None if dependency.is_unconstrained else dependency.version
        try:
            installed = self.source.install(name, requested)
        except (SapmError, OSError) as exc:
            logger.warning("install %s failed: %s", specifier, exc)
            return OutcomeReport.failed(specifier, exc, name=name)

        version = installed.version or requested or ANY_VERSION
        self.manifest.add_dependency(name, version, dev=dev)
        try:
            self._persist(lambda: self.manifest.remove_dependency(name))
        except ManifestWriteFailed as exc:
            return OutcomeReport.failed(specifier, exc, name=name)
        logger.debug("installed %s@%s", name, version)
        return OutcomeReport(specifier, OutcomeStatus.INSTALLED, name, version)

    def _uninstall_one(self, specifier: str) -> OutcomeReport:
        try:
            dependency = PackageDependency.parse(specifier)
        except MalformedSpecifier as exc:
            logger.warning("uninstall %r rejected: %s", specifier, exc)
            return OutcomeReport.failed(specifier, exc)

        name = dependency.full_name
        requested = None if dependency.is_unconstrained else dependency.version
        if not self.is_installed(name, requested):
            exc = NotInstalled(f"{specifier} is not installed")
            return OutcomeReport.failed(specifier, exc, name=name)

        recorded = self.manifest.dependency_version(name)
        was_dev = name in self.manifest.dev_dependencies
        try:
            self.source.uninstall(name)
        except (SapmError, OSError) as exc:
            logger.warning("uninstall %s failed: %s", specifier, exc)
            return OutcomeReport.failed(specifier, exc, name=name)

        self.manifest.remove_dependency(name)
        try:
            self._persist(lambda: self.manifest.add_dependency(name, recorded, dev=was_dev))
        except ManifestWriteFailed as exc:
            return OutcomeReport.failed(specifier, exc, name=name)
        logger.debug("uninstalled %s", name)
        return OutcomeReport(specifier, OutcomeStatus.UNINSTALLED, name, recorded)

    def _persist(self, rollback: Callable[[], object]) -> None:
        try:
            self.manifest.save(self.manifest_path)
        except ManifestWriteFailed:
            # Undo the in-memory edit so it matches what is still on disk.
            rollback()
            logger.error("manifest write failed; %s was not updated", self.manifest_path, exc_info=True)
            raise

"""Package specifier resolution and manifest synchronisation."""

from .config import SapmConfig, load_config
from .dependency import PackageDependency, split_specifier
from .errors import (
    InvalidManifest,
    MalformedSpecifier,
    ManifestNotFound,
    ManifestWriteFailed,
    NotInstalled,
    SapmError,
    SourceUnavailable,
    VersionNotFound,
)
from .manifest import MANIFEST_FILENAME, Manifest
from .names import PackageName
from .orchestrator import InstallOrchestrator, OutcomeReport, OutcomeStatus
from .versions import UNCONSTRAINED, VersionRequirement

__all__ = [
    "InstallOrchestrator",
    "InvalidManifest",
    "MANIFEST_FILENAME",
    "MalformedSpecifier",
    "Manifest",
    "ManifestNotFound",
    "ManifestWriteFailed",
    "NotInstalled",
    "OutcomeReport",
    "OutcomeStatus",
    "PackageDependency",
    "PackageName",
    "SapmConfig",
    "SapmError",
    "SourceUnavailable",
    "UNCONSTRAINED",
    "VersionNotFound",
    "VersionRequirement",
    "load_config",
    "split_specifier",
]

"""Error taxonomy for package resolution and manifest synchronisation."""

from __future__ import annotations


class SapmError(Exception):
    """Base error; ``code`` is what ends up in an outcome report."""

    code = "sapm-error"


class MalformedSpecifier(SapmError, ValueError):
    code = "malformed-specifier"


class SourceUnavailable(SapmError):
    """Network, registry or timeout failure. Safe to retry."""

    code = "source-unavailable"


class VersionNotFound(SapmError):
    code = "version-not-found"


class NotInstalled(SapmError):
    code = "not-installed"


class ManifestNotFound(SapmError):
    code = "manifest-not-found"


class InvalidManifest(SapmError):
    code = "invalid-manifest"


class ManifestWriteFailed(SapmError):
    """The manifest could not be persisted; disk and memory may disagree."""

    code = "manifest-write-failed"

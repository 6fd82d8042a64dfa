from __future__ import annotations

import json
from pathlib import Path

import pytest

from sapm_core import InstallOrchestrator, Manifest, OutcomeStatus, SapmConfig, SourceUnavailable, VersionNotFound
from sapm_core.sources import DirectorySource, build_source


def _publish(root: Path, name: str, version: str) -> Path:
    package = root / name / version
    package.mkdir(parents=True, exist_ok=True)
    (package / "package.json").write_text(json.dumps({"name": name, "version": version}), encoding="utf-8")
    (package / "index.js").write_text("module.exports = {};\n", encoding="utf-8")
    return package


def test_install_picks_highest_matching_version(tmp_path: Path) -> None:
    root = tmp_path / "packages"
    for version in ("1.0.0", "1.2.0", "2.0.0"):
        _publish(root, "left-pad", version)
    source = DirectorySource(root, tmp_path / "node_modules")

    installed = source.install("left-pad", "^1.0.0")

    assert installed.version == "1.2.0"
    assert installed.path == (tmp_path / "node_modules" / "left-pad").resolve()
    assert (installed.path / "index.js").exists()
    assert source.is_installed("left-pad")


def test_unconstrained_install_takes_highest_release(tmp_path: Path) -> None:
    root = tmp_path / "packages"
    for version in ("2.29.3", "2.29.4", "3.0.0-beta.1"):
        _publish(root, "moment", version)
    source = DirectorySource(root, tmp_path / "node_modules")

    assert source.install("moment").version == "2.29.4"
    assert source.install("moment", "latest").version == "2.29.4"


def test_install_scoped_package_and_uninstall(tmp_path: Path) -> None:
    root = tmp_path / "packages"
    _publish(root, "@voidvoxel/position-3d", "1.0.0")
    install_path = tmp_path / "node_modules"
    source = DirectorySource(root, install_path)

    installed = source.install("@voidvoxel/position-3d")
    assert installed.path == (install_path / "@voidvoxel" / "position-3d").resolve()

    source.uninstall("@voidvoxel/position-3d")
    assert not source.is_installed("@voidvoxel/position-3d")
    assert not (install_path / "@voidvoxel").exists()
    source.uninstall("@voidvoxel/position-3d")


def test_missing_package_and_version(tmp_path: Path) -> None:
    root = tmp_path / "packages"
    _publish(root, "moment", "2.29.4")
    source = DirectorySource(root, tmp_path / "node_modules")

    with pytest.raises(VersionNotFound):
        source.install("block-stream")
    with pytest.raises(VersionNotFound):
        source.install("moment", "^3.0.0")
    with pytest.raises(VersionNotFound):
        source.install("moment", "next")


def test_missing_root_is_unavailable(tmp_path: Path) -> None:
    source = DirectorySource(tmp_path / "nowhere", tmp_path / "node_modules")
    with pytest.raises(SourceUnavailable):
        source.install("moment")


def test_orchestrator_uses_configured_source_dir(tmp_path: Path) -> None:
    root = tmp_path / "packages"
    _publish(root, "moment", "2.29.4")
    _publish(root, "@voidvoxel/position-3d", "1.0.0")
    project = tmp_path / "app"
    config = SapmConfig(source_dir=str(root))
    assert isinstance(build_source(config, project, project / "node_modules"), DirectorySource)

    orchestrator = InstallOrchestrator(project, config=config)
    reports = orchestrator.install("moment", "block-stream", "@voidvoxel/position-3d")

    assert [report.status for report in reports] == [
        OutcomeStatus.INSTALLED,
        OutcomeStatus.FAILED,
        OutcomeStatus.INSTALLED,
    ]
    assert orchestrator.package_path("moment") == (project / "node_modules" / "moment").resolve()
    assert (project / "node_modules" / "@voidvoxel" / "position-3d" / "package.json").exists()

    [removed] = orchestrator.uninstall("moment")
    assert removed.status is OutcomeStatus.UNINSTALLED
    assert not (project / "node_modules" / "moment").exists()


def test_sync_reports_manifest_entry_outside_install_dir(tmp_path: Path) -> None:
    root = tmp_path / "packages"
    _publish(root, "moment", "1.0.0")
    project = tmp_path / "app"
    Manifest(name="app", dependencies={"../evil": "1.0.0", "moment": "1.0.0"}).save(project)
    orchestrator = InstallOrchestrator(project, DirectorySource(root, project / "node_modules"), config=SapmConfig())

    reports = orchestrator.install()

    assert [(report.name, report.status) for report in reports] == [
        ("../evil", OutcomeStatus.FAILED),
        ("moment", OutcomeStatus.INSTALLED),
    ]
    assert reports[0].error == "malformed-specifier"
    assert not (tmp_path / "evil").exists()
    assert (project / "node_modules" / "moment" / "index.js").exists()

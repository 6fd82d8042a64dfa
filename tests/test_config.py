from __future__ import annotations

from pathlib import Path

import pytest

from sapm_core import load_config

_ENV_KEYS = ("SAPM_REGISTRY", "SAPM_TOKEN", "SAPM_INSTALL_DIR", "SAPM_SOURCE_DIR")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_config(project: Path, text: str) -> None:
    config_dir = project / ".sapm"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.toml").write_text(text, encoding="utf-8")


def test_defaults_without_config(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config.registry_url == "https://registry.npmjs.org"
    assert config.install_path(tmp_path) == (tmp_path / "node_modules").resolve()
    assert config.source_path(tmp_path) is None
    assert config.token is None


def test_reads_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NPM_TOKEN", "secret")
    _write_config(
        tmp_path,
        """[registry]
url = "https://registry.local/npm/"
timeout_seconds = 5
max_retries = 4
token = "${NPM_TOKEN}"

[install]
dir = "vendor/modules"
source_dir = "offline"
""",
    )
    config = load_config(tmp_path / "package.json")
    assert config.registry_url == "https://registry.local/npm"
    assert config.timeout_seconds == 5.0
    assert config.max_retries == 4
    assert config.token == "secret"
    assert config.install_path(tmp_path) == (tmp_path / "vendor" / "modules").resolve()
    assert config.source_path(tmp_path) == (tmp_path / "offline").resolve()


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_config(tmp_path, '[registry]\nurl = "https://file.local"\n')
    monkeypatch.setenv("SAPM_REGISTRY", "https://env.local/")
    monkeypatch.setenv("SAPM_INSTALL_DIR", str(tmp_path / "elsewhere"))
    config = load_config(tmp_path)
    assert config.registry_url == "https://env.local"
    assert config.install_path(tmp_path) == (tmp_path / "elsewhere").resolve()


def test_broken_config_falls_back_to_defaults(tmp_path: Path) -> None:
    _write_config(tmp_path, "[registry\nurl = ")
    assert load_config(tmp_path).registry_url == "https://registry.npmjs.org"

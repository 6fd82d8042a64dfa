from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

CONFIG_PATH = Path(".sapm") / "config.toml"
DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_INSTALL_DIR = "node_modules"


def _resolve_env_value(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_name = value[2:-1].strip()
        if env_name:
            return os.getenv(env_name, "")
    return value


def _string_or_none(value: Any) -> str | None:
    value = _resolve_env_value(value)
    text = str(value or "").strip()
    return text or None


def _load_sections(project_root: Path) -> dict[str, Any]:
    config_path = project_root / CONFIG_PATH
    if not config_path.exists():
        return {}
    try:
        payload = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _section(payload: Mapping[str, Any], name: str) -> dict[str, Any]:
    section = payload.get(name)
    return section if isinstance(section, dict) else {}


@dataclass(frozen=True)
class SapmConfig:
    registry_url: str = DEFAULT_REGISTRY_URL
    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_seconds: float = 0.2
    token: str | None = None
    install_dir: str = DEFAULT_INSTALL_DIR
    source_dir: str | None = None

    def install_path(self, project_root: Path) -> Path:
        path = Path(self.install_dir)
        if not path.is_absolute():
            path = project_root / path
        return path.resolve()

    def source_path(self, project_root: Path) -> Path | None:
        if not self.source_dir:
            return None
        path = Path(self.source_dir)
        if not path.is_absolute():
            path = project_root / path
        return path.resolve()


def load_config(project_root: str | os.PathLike[str]) -> SapmConfig:
    """Read ``.sapm/config.toml`` below ``project_root`` and apply ``SAPM_*`` overrides."""
    root = Path(project_root).resolve()
    if root.name == "package.json":
        root = root.parent
    payload = _load_sections(root)
    registry = _section(payload, "registry")
    install = _section(payload, "install")

    registry_url = (
        _string_or_none(os.getenv("SAPM_REGISTRY"))
        or _string_or_none(registry.get("url"))
        or DEFAULT_REGISTRY_URL
    )
    return SapmConfig(
        registry_url=registry_url.rstrip("/"),
        timeout_seconds=float(registry.get("timeout_seconds", 30.0)),
        max_retries=int(registry.get("max_retries", 2)),
        backoff_seconds=float(registry.get("backoff_seconds", 0.2)),
        token=_string_or_none(os.getenv("SAPM_TOKEN")) or _string_or_none(registry.get("token")),
        install_dir=(
            _string_or_none(os.getenv("SAPM_INSTALL_DIR"))
            or _string_or_none(install.get("dir"))
            or DEFAULT_INSTALL_DIR
        ),
        source_dir=_string_or_none(os.getenv("SAPM_SOURCE_DIR")) or _string_or_none(install.get("source_dir")),
    )

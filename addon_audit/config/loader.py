"""Configuration loading helpers for addon-audit."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .models import AuditConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
AUDIT_CONFIG_FILENAME = "audit_config.yaml"
HOME_ENV_VAR = "ADDON_AUDIT_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV_VAR)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def audit_config_path(self) -> Path:
        for suffix in CONFIG_EXTENSIONS:
            candidate = self.data_dir / f"audit_config{suffix}"
            if candidate.exists():
                return candidate
        return self.data_dir / AUDIT_CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: AuditConfig | None = None

    def load_audit_config(self) -> AuditConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.audit_config_path()
        if path.exists():
            config = AuditConfig.model_validate(_read_file(path))
        else:
            config = AuditConfig()
        self._cache = config
        return config

    def save_audit_config(self, config: AuditConfig) -> Path:
        path = self.locator.audit_config_path()
        _write_file(path, config.model_dump(mode="json"))
        self._cache = config
        return path

    def apply_overrides(self, **overrides: Any) -> AuditConfig:
        """Return a validated copy of the loaded config with ``None`` values skipped.

        Nested sections are given as dicts, e.g. ``catalog={"page_size": 50}``.
        """

        cleaned: dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if isinstance(value, dict):
                value = {k: v for k, v in value.items() if v is not None}
                if not value:
                    continue
            cleaned[key] = value
        base = self.load_audit_config().model_dump(mode="json")
        return AuditConfig.model_validate(_merge(base, cleaned))


__all__ = [
    "AUDIT_CONFIG_FILENAME",
    "CONFIG_EXTENSIONS",
    "ConfigLocator",
    "ConfigRepository",
    "HOME_ENV_VAR",
]

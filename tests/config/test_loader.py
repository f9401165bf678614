from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from addon_audit.config.loader import ConfigLocator, ConfigRepository
from addon_audit.config.models import AuditConfig, CurseSort


def test_config_locator_uses_env_and_creates_directories(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("ADDON_AUDIT_HOME", str(tmp_path))
    locator = ConfigLocator()
    assert locator.project_root == tmp_path.resolve()
    assert locator.data_dir.exists()
    assert locator.logs_dir.exists()
    assert locator.audit_config_path() == tmp_path.resolve() / "data" / "audit_config.yaml"


def test_missing_file_gives_defaults_without_writing(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load_audit_config()
    assert config.model_dump() == AuditConfig().model_dump()
    assert not temp_config_repository.locator.audit_config_path().exists()


def test_save_then_load_roundtrip(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ADDON_AUDIT_HOME", raising=False)
    locator = ConfigLocator(project_root=tmp_path)
    repo = ConfigRepository(locator)
    config = AuditConfig(batch_size=10, catalog={"sort": "total_downloads", "page_size": 50})
    path = repo.save_audit_config(config)

    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert payload["batch_size"] == 10
    assert payload["catalog"]["sort"] == 5
    assert payload["endpoints"]["curse"].startswith("https://")

    loaded = ConfigRepository(locator).load_audit_config()
    assert loaded.model_dump() == config.model_dump()


def test_json_config_is_supported(temp_config_repository: ConfigRepository) -> None:
    path = temp_config_repository.locator.data_dir / "audit_config.json"
    path.write_text(json.dumps({"batch_size": 5}), encoding="utf-8")
    assert temp_config_repository.load_audit_config().batch_size == 5


def test_non_mapping_file_rejected(temp_config_repository: ConfigRepository) -> None:
    path = temp_config_repository.locator.audit_config_path()
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load_audit_config()


def test_apply_overrides_skips_none_and_merges_sections(
    temp_config_repository: ConfigRepository,
) -> None:
    temp_config_repository.save_audit_config(AuditConfig(catalog={"game_id": 2}))
    config = temp_config_repository.apply_overrides(
        batch_size=None,
        catalog={"page_size": 20, "sort": None},
    )
    assert config.batch_size == 25
    assert config.catalog.game_id == 2
    assert config.catalog.page_size == 20
    assert config.catalog.sort is CurseSort.POPULARITY


def test_apply_overrides_validates(temp_config_repository: ConfigRepository) -> None:
    with pytest.raises(ValueError):
        temp_config_repository.apply_overrides(batch_size=0)

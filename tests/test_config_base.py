# Showcase test scripts
from __future__ import annotations

import json
from pathlib import Path

from sc_platform import config_base as cb


def test_defaults_when_no_file(config_base: Path) -> None:
    cfg = cb.load_config()
    assert cfg["storage"]["mode"] == "local"
    assert cfg["storage"]["remote"]["base_url"] == "http://localhost:3001/api"
    assert cfg["identity"]["storage_key"] == "userId"
    assert cb.data_dir(cfg) == config_base / "data"
    assert cb.local_storage_path(cfg) == config_base / "local_storage.json"


def test_user_values_merge_over_defaults(config_base: Path) -> None:
    (config_base / "config.json").write_text(
        json.dumps({"storage": {"mode": "REMOTE", "remote": {"base_url": "http://x/api/", "max_retries": 99}}}),
        "utf-8",
    )
    cfg = cb.load_config()
    assert cfg["storage"]["mode"] == "remote"
    assert cfg["storage"]["remote"]["base_url"] == "http://x/api"
    assert cfg["storage"]["remote"]["max_retries"] == 5
    assert cfg["storage"]["remote"]["timeout"] == 10.0
    assert cfg["storage"]["local"]["backend"] == "file"


def test_unknown_values_are_normalized(config_base: Path) -> None:
    cfg = cb.normalize_config({
        "storage": {"mode": "cloud", "local": {"backend": "sqlite"}},
        "server": {"cors_origins": "http://a, http://b", "port": "abc"},
    })
    assert cfg["storage"]["mode"] == "local"
    assert cfg["storage"]["local"]["backend"] == "file"
    assert cfg["server"]["cors_origins"] == ["http://a", "http://b"]
    assert cfg["server"]["port"] == 3001


def test_broken_file_yields_defaults(config_base: Path) -> None:
    (config_base / "config.json").write_text("{", "utf-8")
    assert cb.load_config()["storage"]["mode"] == "local"


def test_save_then_load(config_base: Path) -> None:
    cfg = cb.load_config()
    cfg["storage"]["mode"] = "remote"
    cb.save_config(cfg)
    assert cb.load_config()["storage"]["mode"] == "remote"
    assert not list(config_base.glob("*.tmp"))


def test_redact_hides_api_key() -> None:
    cfg = {"storage": {"document": {"api_key": "secret"}}}
    assert cb.redact_config(cfg)["storage"]["document"]["api_key"] != "secret"
    assert cfg["storage"]["document"]["api_key"] == "secret"

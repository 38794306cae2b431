from __future__ import annotations

import json
from pathlib import Path

import pytest

from meetscribe.app import config as app_config


def test_ensure_user_config_exists_creates_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    created = app_config.ensure_user_config_exists()
    assert created == tmp_path / "config.json"
    loaded = json.loads(created.read_text(encoding="utf-8"))
    assert loaded["model"] == "base"
    assert loaded["chunk_seconds"] == 5


def test_load_user_config_ignores_unknown_keys(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(json.dumps({"model": "small", "unexpected": 1}), encoding="utf-8")
    loaded, used = app_config.load_user_config(str(cfg_path))
    assert used == cfg_path
    assert loaded["model"] == "small"
    assert loaded["chunk_seconds"] == 5
    assert "unexpected" not in loaded


def test_load_user_config_accepts_bom(tmp_path: Path) -> None:
    cfg_path = tmp_path / "bom.json"
    cfg_path.write_bytes(b"\xef\xbb\xbf" + json.dumps({"language": "de"}).encode("utf-8"))
    loaded, _ = app_config.load_user_config(str(cfg_path))
    assert loaded["language"] == "de"


def test_missing_explicit_config_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        app_config.load_user_config(str(tmp_path / "nope.json"))


def test_non_object_config_is_rejected(tmp_path: Path) -> None:
    cfg_path = tmp_path / "list.json"
    cfg_path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        app_config.load_user_config(str(cfg_path))

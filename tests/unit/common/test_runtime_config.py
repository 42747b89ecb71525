"""Tests for common.runtime_config module."""

import json
import stat
from pathlib import Path

import pytest

from common.runtime_config import (
    get_runtime_config_path,
    read_curator_runtime_config,
    read_runtime_config,
    update_curator_runtime_config,
    write_runtime_config,
)


class TestGetRuntimeConfigPath:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        target = tmp_path / "custom.json"
        monkeypatch.setenv("FUTURENEWS_RUNTIME_CONFIG_FILE", str(target))
        assert get_runtime_config_path() == target

    def test_default_under_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FUTURENEWS_RUNTIME_CONFIG_FILE", raising=False)
        path = get_runtime_config_path()
        assert path.name == "runtime.json"
        assert path.parent.name == ".futurenews"


class TestReadWriteRuntimeConfig:
    def test_missing_file_returns_none(self, tmp_path: Path) -> None:
        assert read_runtime_config(tmp_path / "missing.json") is None

    def test_unreadable_file_returns_none(self, tmp_path: Path) -> None:
        path = tmp_path / "runtime.json"
        path.write_text("{not json")
        assert read_runtime_config(path) is None

    def test_write_is_owner_only(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg" / "runtime.json"
        write_runtime_config({"schema": 1}, path)
        assert json.loads(path.read_text()) == {"schema": 1}
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert stat.S_IMODE(path.parent.stat().st_mode) == 0o700
        assert not path.with_name("runtime.json.tmp").exists()


class TestUpdateCuratorRuntimeConfig:
    def test_patch_merges_and_removes_blank(self, tmp_path: Path) -> None:
        path = tmp_path / "runtime.json"
        update_curator_runtime_config({"mode": "anthropic", "apiKey": "secret", "maxTokens": 8000}, path)
        update_curator_runtime_config({"apiKey": "", "model": "sonnet", "maxTokens": None}, path)

        curator = read_curator_runtime_config(path)
        assert curator == {"mode": "anthropic", "model": "sonnet"}
        assert read_runtime_config(path)["schema"] == 1

    def test_non_dict_curator_section_is_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "runtime.json"
        path.write_text(json.dumps({"curator": "oops"}))
        assert read_curator_runtime_config(path) == {}

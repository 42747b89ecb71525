"""Tests for common.config module."""

import pytest

from common.config import ConfigSingleton, load_yaml, resolve_config_path


class TestResolveConfigPath:
    def test_explicit_name(self, tmp_path) -> None:
        (tmp_path / "local.yaml").write_text("mode: mock\n")
        assert resolve_config_path("local", tmp_path) == tmp_path / "local.yaml"

    def test_env_var_then_default(self, tmp_path, monkeypatch) -> None:
        (tmp_path / "prod.yaml").write_text("mode: auto\n")
        (tmp_path / "local.yaml").write_text("mode: mock\n")

        monkeypatch.delenv("TEST_CONFIG_ENV", raising=False)
        assert resolve_config_path(None, tmp_path, env_var="TEST_CONFIG_ENV").name == "prod.yaml"

        monkeypatch.setenv("TEST_CONFIG_ENV", "local")
        assert resolve_config_path(None, tmp_path, env_var="TEST_CONFIG_ENV").name == "local.yaml"

    def test_missing_file(self, tmp_path) -> None:
        assert resolve_config_path("staging", tmp_path) is None


class TestLoadYaml:
    def test_mapping(self, tmp_path) -> None:
        path = tmp_path / "prod.yaml"
        path.write_text("mode: auto\nmax_workers: 4\n")
        assert load_yaml(path) == {"mode": "auto", "max_workers": 4}

    def test_empty_and_missing(self, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml(path) == {}
        assert load_yaml(None) == {}

    def test_rejects_non_mapping(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_yaml(path)


class TestConfigSingleton:
    def test_loads_once_until_reset(self) -> None:
        calls = []

        def loader() -> dict:
            calls.append(1)
            return {"n": len(calls)}

        manager = ConfigSingleton(loader)
        assert manager.get() is manager.get()
        assert len(calls) == 1

        manager.reset()
        assert manager.get() == {"n": 2}

    def test_set_overrides(self) -> None:
        manager = ConfigSingleton(lambda: {"loaded": True})
        manager.set({"loaded": False})
        assert manager.get() == {"loaded": False}

    def test_requires_loader(self) -> None:
        with pytest.raises(RuntimeError):
            ConfigSingleton().get()

"""Tests for generate_curation.config module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from generate_curation import config as config_module
from generate_curation.config import CurationConfig, load_config

ENV_VARS = [
    "CURATOR_MODE", "CURATOR_MODEL", "CURATOR_API_KEY", "CURATOR_API_URL", "CURATOR_HTTP_URL",
    "CURATOR_MAX_TOKENS", "CURATOR_TIMEOUT_S", "CURATOR_DAILY_TIMEOUT_S",
    "CURATOR_KEY_STORIES_PER_EDITION", "CURATOR_SYSTEM_PROMPT", "CURATOR_MAX_WORKERS",
    "ANTHROPIC_API_KEY", "ANTHROPIC_BASE_URL", "OPENAI_API_KEY", "OPENAI_BASE_URL",
    "CURATION_CONFIG_ENV",
]


@pytest.fixture
def isolated(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "CONFIG_DIR", tmp_path)
    runtime = tmp_path / "runtime.json"
    monkeypatch.setenv("FUTURENEWS_RUNTIME_CONFIG_FILE", str(runtime))
    return tmp_path


class TestCurationConfig:
    def test_defaults(self) -> None:
        config = CurationConfig()
        assert config.mode == "auto"
        assert config.max_tokens == 16000
        assert config.timeout_s == 300
        assert config.daily_timeout_s == 90
        assert config.key_stories_per_edition == 1
        assert config.fallback_on_invalid is True

    def test_clamps(self) -> None:
        config = CurationConfig(
            max_tokens="100", timeout_s=5000, daily_timeout_s=1, key_stories_per_edition=99, max_workers=0
        )
        assert config.max_tokens == 2000
        assert config.timeout_s == 600
        assert config.daily_timeout_s == 20
        assert config.key_stories_per_edition == 7
        assert config.max_workers == 1

    def test_blank_system_prompt_uses_default(self) -> None:
        assert CurationConfig(system_prompt="  ").system_prompt == config_module.DEFAULT_SYSTEM_PROMPT

    @pytest.mark.parametrize("mode", ["off", "disabled", "0", "false", " OFF "])
    def test_disabled_modes(self, mode: str) -> None:
        config = CurationConfig(mode=mode)
        assert config.disabled
        assert config.resolve_mode() == "disabled"

    def test_auto_prefers_anthropic_then_openai_then_mock(self) -> None:
        assert CurationConfig(anthropic_api_key="a", openai_api_key="o").resolve_mode() == "anthropic"
        assert CurationConfig(openai_api_key="o").resolve_mode() == "openai"
        assert CurationConfig().resolve_mode() == "mock"

    def test_explicit_mode_wins(self) -> None:
        config = CurationConfig(mode="openai", anthropic_api_key="a")
        assert config.resolve_mode() == "openai"
        assert config.pinned

    def test_unknown_mode_is_mock(self) -> None:
        config = CurationConfig(mode="gemini")
        assert config.resolve_mode() == "mock"
        assert not config.pinned


class TestLoadConfig:
    def test_no_sources_gives_defaults(self, isolated: Path) -> None:
        assert load_config() == CurationConfig()

    def test_yaml_layer(self, isolated: Path) -> None:
        (isolated / "prod.yaml").write_text("mode: mock\nmax_workers: 4\nunknown_key: 1\n")
        config = load_config()
        assert config.mode == "mock"
        assert config.max_workers == 4

    def test_named_yaml_via_env(self, isolated: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (isolated / "local.yaml").write_text("key_stories_per_edition: 3\n")
        monkeypatch.setenv("CURATION_CONFIG_ENV", "local")
        assert load_config().key_stories_per_edition == 3

    def test_runtime_overrides_yaml(self, isolated: Path) -> None:
        (isolated / "prod.yaml").write_text("mode: mock\nmodel: from-yaml\n")
        (isolated / "runtime.json").write_text(json.dumps({"curator": {"mode": "anthropic", "apiKey": "rk"}}))
        config = load_config()
        assert config.mode == "anthropic"
        assert config.api_key == "rk"
        assert config.model == "from-yaml"

    def test_env_overrides_runtime(self, isolated: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (isolated / "runtime.json").write_text(json.dumps({"curator": {"mode": "anthropic", "maxTokens": 9000}}))
        monkeypatch.setenv("CURATOR_MODE", "openai")
        monkeypatch.setenv("OPENAI_API_KEY", "ok")
        config = load_config()
        assert config.mode == "openai"
        assert config.openai_api_key == "ok"
        assert config.max_tokens == 9000

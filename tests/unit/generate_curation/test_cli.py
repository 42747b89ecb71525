"""Tests for the generate-curation and configure-curator command line tools."""

from __future__ import annotations

import json
import sys

import pytest

from common.runtime_config import read_curator_runtime_config
from generate_curation import cli, config_cli

ENV_VARS = ["CURATOR_MODE", "CURATOR_API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "CURATOR_HTTP_URL"]


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FUTURENEWS_RUNTIME_CONFIG_FILE", str(tmp_path / "runtime.json"))
    monkeypatch.chdir(tmp_path)

    snapshot = {
        "day": "2026-01-05",
        "topicsBySection": {
            "U.S.": [
                {"topic_slug": f"us-{i}", "theme": "Energy", "label": f"Label {i}", "horizon_bucket": "near"}
                for i in range(6)
            ]
        },
    }
    (tmp_path / "2026-01-05.json").write_text(json.dumps(snapshot), encoding="utf-8")
    return tmp_path


def run(monkeypatch, module, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", [module.__name__, *args])
    module.main()


class TestGenerateCurationCli:
    def test_mock_daily_curation(self, workspace, monkeypatch, capsys) -> None:
        run(monkeypatch, cli, "--day", "2026-01-05", "--snapshot-dir", str(workspace), "--mode", "mock")

        output = json.loads(capsys.readouterr().out)
        assert output["provider"] == "mock"
        assert len(output["editions"]) == 11
        assert output["editions"][0]["hero"]["topic_slug"].startswith("us-")

    def test_story_mode(self, workspace, monkeypatch, capsys) -> None:
        run(
            monkeypatch, cli,
            "--day", "2026-01-05", "--snapshot-dir", str(workspace), "--mode", "mock", "--years-forward", "2",
        )

        output = json.loads(capsys.readouterr().out)
        assert output["years_forward"] == 2
        assert output["model"] == "mock-curator"
        assert sum(story["hero"] for story in output["stories"]) == 1

    def test_disabled_prints_nothing(self, workspace, monkeypatch, capsys) -> None:
        run(monkeypatch, cli, "--day", "2026-01-05", "--snapshot-dir", str(workspace), "--mode", "off")
        assert capsys.readouterr().out == ""

    def test_failure_reports_unavailable(self, workspace, monkeypatch, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run(monkeypatch, cli, "--day", "2026-01-05", "--snapshot-dir", str(workspace), "--mode", "anthropic")

        assert exc_info.value.code == 1
        assert cli.UNAVAILABLE_MESSAGE in capsys.readouterr().err


class TestConfigureCuratorCli:
    def test_persists_and_removes(self, workspace, monkeypatch) -> None:
        run(monkeypatch, config_cli, "--mode", "openai", "--max-workers", "3", "--model", "gpt-4o-mini")
        assert read_curator_runtime_config() == {"mode": "openai", "maxWorkers": 3, "model": "gpt-4o-mini"}

        run(monkeypatch, config_cli, "--model", "")
        assert read_curator_runtime_config() == {"mode": "openai", "maxWorkers": 3}

    def test_requires_an_option(self, workspace, monkeypatch) -> None:
        with pytest.raises(SystemExit):
            run(monkeypatch, config_cli)

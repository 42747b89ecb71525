"""Tests for generate_curation.repair module."""

from __future__ import annotations

import pytest

from generate_curation.errors import ParseError
from generate_curation.repair import (
    RepairLadder,
    close_truncated,
    parse_braced,
    parse_direct,
    parse_stripped,
    strip_fences,
)

TRUNCATED_PLAN = (
    '{"schema":1,"yearsForward":3,"sections":{"U.S.":[{"rank":1,"topic_slug":"grid-storage",'
    '"title":"Grid'
)


class TestSteps:
    def test_parse_direct(self) -> None:
        assert parse_direct(' {"a": 1} ') == {"a": 1}
        assert parse_direct("[1, 2]") is None
        assert parse_direct("not json") is None

    def test_strip_fences(self) -> None:
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_fences('Here you go:\n```\n{"a": 1}\n```\nThanks') == '{"a": 1}'
        assert strip_fences('  {"a": 1} ') == '{"a": 1}'

    def test_parse_stripped(self) -> None:
        assert parse_stripped('```JSON\n{"a": 1}\n```') == {"a": 1}
        assert parse_stripped('{"a": 1}') is None

    def test_parse_braced(self) -> None:
        assert parse_braced('Sure! {"a": {"b": 2}} Hope that helps.') == {"a": {"b": 2}}
        assert parse_braced("no braces here") is None
        assert parse_braced("} backwards {") is None

    def test_close_truncated_open_string(self) -> None:
        parsed = close_truncated(TRUNCATED_PLAN)
        assert parsed["sections"]["U.S."][0]["title"] == "Grid"

    def test_close_truncated_open_array(self) -> None:
        assert close_truncated('{"keyStoryIds":["a","b"') == {"keyStoryIds": ["a", "b"]}

    def test_close_truncated_gives_up(self) -> None:
        assert close_truncated('{"a": {"b": {"c": [1, {"d": ') is None


class TestRepairLadder:
    def test_direct(self) -> None:
        assert RepairLadder().parse('{"ok": true}') == {"ok": True}

    def test_fenced(self) -> None:
        assert RepairLadder().parse('```json\n{"ok": true}\n```') == {"ok": True}

    def test_prose_wrapped(self) -> None:
        assert RepairLadder().parse('The plan follows.\n{"ok": true}\nDone.') == {"ok": True}

    def test_truncated_fixture_repaired_when_flagged(self) -> None:
        parsed = RepairLadder().parse(TRUNCATED_PLAN, truncated=True)
        assert parsed["yearsForward"] == 3
        assert parsed["sections"]["U.S."][0]["topic_slug"] == "grid-storage"

    def test_truncated_fixture_fails_when_not_flagged(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            RepairLadder().parse(TRUNCATED_PLAN, truncated=False)
        assert exc_info.value.truncated is False

    def test_empty_response(self) -> None:
        with pytest.raises(ParseError):
            RepairLadder().parse("   ", truncated=True)

    def test_preview_is_bounded(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            RepairLadder().parse("x" * 5000)
        assert len(exc_info.value.preview) <= 400

    def test_custom_steps_run_in_order(self) -> None:
        calls = []

        def first(text):
            calls.append("first")
            return None

        def second(text):
            calls.append("second")
            return {"from": "second"}

        ladder = RepairLadder(steps=[first, second])
        assert ladder.parse("anything") == {"from": "second"}
        assert calls == ["first", "second"]

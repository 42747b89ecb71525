"""Tests for generate_curation.prompts module."""

from __future__ import annotations

import json

from allocate_topics.models import DayBrief, Signal, Topic, TopicSnapshot
from generate_curation.models import StoryCandidate
from generate_curation.prompts import (
    DAY_BRIEF_TOPICS_PER_SECTION,
    EDITION_TOPICS_PER_SECTION,
    MAX_ECON_SIGNALS,
    MAX_LABEL_LEN,
    build_day_brief_prompt,
    build_edition_plan_prompt,
    build_story_curation_prompt,
)

SECTIONS = ["U.S.", "World"]


def make_snapshot(topics_per_section: int = 25) -> TopicSnapshot:
    return TopicSnapshot(
        day="2026-01-05",
        topics_by_section={
            section: [
                Topic(
                    topic_slug=f"{section[0].lower()}-{i}",
                    theme="Theme",
                    label="x" * 300,
                    horizon_bucket="near",
                    score=0.5,
                )
                for i in range(topics_per_section)
            ]
            for section in SECTIONS
        },
        econ_signals=[Signal(label=f"econ {i}", value=str(i)) for i in range(20)],
        market_signals=[Signal(label="Rate cut", prob="61%")],
    )


def payload_of(user: str) -> dict:
    return json.loads(user.split("INPUT:\n", 1)[1])


class TestBuildDayBriefPrompt:
    def test_payload_limits(self) -> None:
        system, user = build_day_brief_prompt(make_snapshot(), SECTIONS)
        payload = payload_of(user)

        assert "Return ONLY valid JSON" in system
        assert payload["day"] == "2026-01-05"
        assert payload["sections"] == SECTIONS
        assert len(payload["econ"]) == MAX_ECON_SIGNALS
        assert payload["markets"] == [{"label": "Rate cut", "prob": "61%"}]
        assert len(payload["topics"]["U.S."]) == DAY_BRIEF_TOPICS_PER_SECTION
        assert payload["topics"]["U.S."][0]["score"] == 0.5
        assert len(payload["topics"]["U.S."][0]["label"]) == MAX_LABEL_LEN


class TestBuildEditionPlanPrompt:
    def test_embeds_day_brief(self) -> None:
        brief = DayBrief(summary="Grids expand.", sections={"U.S.": "Storage."})
        system, user = build_edition_plan_prompt(make_snapshot(), 3, "January 5, 2029", SECTIONS, brief)
        payload = payload_of(user)

        assert user.startswith("Plan the Future Times edition dated January 5, 2029 (yearsForward=3).")
        assert "planning a full front page" in system
        assert payload["dayBrief"] == {"summary": "Grids expand.", "sections": {"U.S.": "Storage."}}
        assert payload["yearsForward"] == 3
        assert len(payload["topics"]["World"]) == EDITION_TOPICS_PER_SECTION
        assert "score" not in payload["topics"]["World"][0]


class TestBuildStoryCurationPrompt:
    def test_lists_candidates(self) -> None:
        candidates = [
            StoryCandidate(
                story_id="ft-2026-01-05-y2-u-s-grid-impact",
                section="U.S.",
                rank=1,
                topic=Topic(topic_slug="grid", theme="Energy", label="Grid storage", horizon_bucket="near", brief="B"),
                citations=[{"title": f"Story {i}", "source": "Wire"} for i in range(4)],
            )
        ]
        prompt = build_story_curation_prompt(candidates, "2026-01-05", 2, "January 5, 2028", key_count=1)

        assert "Pick exactly 1 key stories" in prompt
        assert '"yearsForward":2' in prompt
        assert "- storyId: ft-2026-01-05-y2-u-s-grid-impact" in prompt
        assert "  topic: Grid storage" in prompt
        assert "    - Story 1 (Wire)" in prompt
        assert "Story 2" not in prompt

    def test_no_candidates(self) -> None:
        prompt = build_story_curation_prompt([], "2026-01-05", 2, "January 5, 2028", key_count=0)
        assert prompt.endswith("Story candidates (must use these storyIds exactly):\n- (none)")

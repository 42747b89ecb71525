"""Tests for story-mode curation plan normalization."""

from __future__ import annotations

from allocate_topics.models import Topic
from generate_curation.models import StoryCandidate
from normalize_plans.normalize_plans import normalize_story_plan

DAY = "2026-01-05"


def candidates() -> list[StoryCandidate]:
    return [
        StoryCandidate(
            story_id=f"s{i}",
            section="U.S." if i < 2 else "World",
            rank=i % 2 + 1,
            title=f"Candidate {i}",
            dek=f"Candidate dek {i}",
            topic=Topic(topic_slug=f"t{i}", theme=f"Theme {i}", label=f"Label {i}", horizon_bucket="near"),
        )
        for i in range(4)
    ]


def normalize(raw):
    return normalize_story_plan(raw, candidates(), DAY, 5, "January 5, 2031", model="m")


class TestNormalizeStoryPlan:
    def test_unknown_story_id_dropped(self) -> None:
        plan = normalize({"stories": [{"storyId": "invented", "curatedTitle": "X"}, {"storyId": "s1", "curatedTitle": "Y"}]})
        ids = [s.story_id for s in plan.stories]
        assert "invented" not in ids
        assert ids == ["s0", "s1", "s2", "s3"]
        assert plan.stories[1].curated_title == "Y"

    def test_two_heroes_become_one(self) -> None:
        plan = normalize({"stories": [{"storyId": "s2", "hero": True}, {"storyId": "s3", "hero": True}]})
        heroes = [s.story_id for s in plan.stories if s.hero]
        assert heroes == ["s2"]
        assert plan.hero.story_id == "s2"

    def test_first_key_story_is_hero_when_none_flagged(self) -> None:
        plan = normalize({"keyStoryIds": ["s3"], "stories": []})
        assert [s.story_id for s in plan.stories if s.hero] == ["s3"]
        assert plan.key_story_ids == ["s3"]

    def test_first_candidate_is_hero_by_default(self) -> None:
        plan = normalize({})
        assert [s.story_id for s in plan.stories if s.hero] == ["s0"]

    def test_draft_dropped_for_non_key_story(self) -> None:
        draft = {"title": "T", "dek": "D", "body": "Paragraph one."}
        plan = normalize({"stories": [
            {"storyId": "s0", "key": True, "draftArticle": draft},
            {"storyId": "s1", "key": False, "draftArticle": draft},
        ]})
        assert plan.stories[0].draft_article is not None
        assert plan.stories[0].draft_article.body == "Paragraph one."
        assert plan.stories[1].draft_article is None

    def test_draft_with_empty_body_is_none(self) -> None:
        plan = normalize({"stories": [{"storyId": "s0", "key": True, "draftArticle": {"title": "T", "body": "  "}}]})
        assert plan.stories[0].draft_article is None

    def test_missing_text_falls_back_to_candidate(self) -> None:
        plan = normalize({"stories": [{"storyId": "s2"}]})
        story = plan.stories[2]
        assert story.curated_title == "Candidate 2"
        assert story.curated_dek == "Candidate dek 2"
        assert story.topic_title == "Theme 2"

    def test_accepts_snake_case_keys(self) -> None:
        plan = normalize({"key_story_ids": ["s1"], "stories": [{"story_id": "s1", "curated_title": "Snake"}]})
        assert plan.stories[1].curated_title == "Snake"
        assert plan.stories[1].key is True

    def test_non_dict_input(self) -> None:
        plan = normalize("garbage")
        assert len(plan.stories) == 4
        assert sum(s.hero for s in plan.stories) == 1
        assert plan.model == "m"

    def test_no_candidates(self) -> None:
        plan = normalize_story_plan({"stories": [{"storyId": "s0"}]}, [], DAY, 0, "January 5, 2026")
        assert plan.stories == []
        assert plan.hero is None

    def test_editorial_traces_kept(self) -> None:
        plan = normalize({
            "editionThesis": "  Grids   became the story. ",
            "thinkingTrace": ["Picked the clearest bridge", "", 7],
            "stories": [
                {
                    "storyId": "s1",
                    "extrapolationTrace": [f"step {i}" for i in range(12)],
                    "rationale": ["High signal density", None],
                }
            ],
        })
        assert plan.edition_thesis == "Grids became the story."
        assert plan.thinking_trace == ["Picked the clearest bridge", "7"]
        assert plan.stories[1].extrapolation_trace == [f"step {i}" for i in range(8)]
        assert plan.stories[1].rationale == ["High signal density"]
        assert plan.stories[0].extrapolation_trace == []

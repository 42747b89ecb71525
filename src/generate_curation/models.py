"""Data models for generate_curation pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from allocate_topics.models import Signal, Topic


@dataclass
class StoryCandidate:
    """An existing story slot offered to the curator for rewriting."""

    story_id: str
    section: str
    rank: int
    angle: str = ""
    title: str = ""
    dek: str = ""
    topic: Topic | None = None
    citations: list[dict[str, str]] = field(default_factory=list)


@dataclass
class DraftArticle:
    title: str
    dek: str
    body: str


@dataclass
class StoryCuration:
    """Curator output for one story candidate."""

    story_id: str
    section: str
    rank: int
    curated_title: str
    curated_dek: str
    topic_title: str = ""
    spark_directions: str = ""
    key: bool = False
    hero: bool = False
    future_event_seed: str = ""
    outline: list[str] = field(default_factory=list)
    extrapolation_trace: list[str] = field(default_factory=list)
    rationale: list[str] = field(default_factory=list)
    draft_article: DraftArticle | None = None


@dataclass
class CurationPlan:
    """Story-mode curation plan for one edition."""

    day: str
    years_forward: int
    edition_date: str
    generated_at: str
    model: str
    stories: list[StoryCuration] = field(default_factory=list)
    key_story_ids: list[str] = field(default_factory=list)
    edition_thesis: str = ""
    thinking_trace: list[str] = field(default_factory=list)
    schema: int = 1

    @property
    def hero(self) -> StoryCuration | None:
        return next((story for story in self.stories if story.hero), None)


@dataclass
class StoryRecord:
    """A story as held by the story store, with the evidence used to render it."""

    story_id: str
    day: str
    years_forward: int
    section: str
    edition_date: str
    headline_seed: str
    dek_seed: str = ""
    topic: Topic | None = None
    signals: list[Signal] = field(default_factory=list)
    markets: list[Signal] = field(default_factory=list)
    citations: list[dict[str, str]] = field(default_factory=list)
    curation: StoryCuration | None = None
    curation_generated_at: str | None = None


@dataclass
class GenerationResult:
    """Parsed structured output of one backend call."""

    data: dict[str, Any]
    provider: str
    model: str
    truncated: bool = False
    text: str = ""

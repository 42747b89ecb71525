"""Data models for allocate_topics pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

HORIZON_BUCKETS = ("near", "mid", "long")


@dataclass(frozen=True)
class Topic:
    """A baseline topic collected for one day."""

    topic_slug: str
    theme: str
    label: str
    horizon_bucket: str
    score: float | None = None
    brief: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Topic:
        return cls(
            topic_slug=str(data.get("topic_slug") or "").strip(),
            theme=str(data.get("theme") or ""),
            label=str(data.get("label") or ""),
            horizon_bucket=str(data.get("horizon_bucket") or "").strip().lower(),
            score=data.get("score"),
            brief=str(data.get("brief") or ""),
        )


@dataclass(frozen=True)
class Signal:
    """An economic or market observation; context only."""

    label: str
    value: str | None = None
    prob: str | None = None
    title: str = ""
    source: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Signal:
        value = data.get("value")
        prob = data.get("prob")
        return cls(
            label=str(data.get("label") or ""),
            value=None if value is None else str(value),
            prob=None if prob is None else str(prob),
            title=str(data.get("title") or ""),
            source=str(data.get("source") or ""),
        )


@dataclass
class StorySlot:
    """One ranked story slot in an edition section."""

    rank: int
    section: str
    topic_slug: str = ""
    angle: str = ""
    title: str = ""
    dek: str = ""
    future_event: str = ""
    lede_seed: str = ""
    nut_seed: str = ""
    outline: list[str] = field(default_factory=list)


@dataclass
class Edition:
    """The front page for one (day, years_forward) pair."""

    years_forward: int
    edition_date: str
    hero: StorySlot | None
    sections: dict[str, list[StorySlot]]
    schema: int = 1

    def all_slots(self) -> list[StorySlot]:
        return [slot for slots in self.sections.values() for slot in slots]


@dataclass
class DayBrief:
    """Day-level context summary embedded in every edition prompt."""

    summary: str
    sections: dict[str, str] = field(default_factory=dict)


@dataclass
class DailyCuration:
    """All eleven editions planned for one day."""

    day: str
    generated_at: str
    provider: str
    model: str
    day_brief: DayBrief
    editions: list[Edition]
    econ: list[Signal] = field(default_factory=list)
    markets: list[Signal] = field(default_factory=list)
    validation_errors: dict[int, list[str]] = field(default_factory=dict)
    schema: int = 1


@dataclass
class TopicSnapshot:
    """Topics and signals collected for one day."""

    day: str
    topics_by_section: dict[str, list[Topic]]
    econ_signals: list[Signal] = field(default_factory=list)
    market_signals: list[Signal] = field(default_factory=list)

    def topic_pools(self) -> dict[str, set[str]]:
        return {
            section: {t.topic_slug for t in topics if t.topic_slug}
            for section, topics in self.topics_by_section.items()
        }

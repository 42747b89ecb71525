"""Prompt builders for the day brief, edition plans and story-mode curation."""

from __future__ import annotations

import json
from dataclasses import asdict

from allocate_topics.models import DayBrief, Signal, Topic, TopicSnapshot
from common.utils import clamp_text
from generate_curation.instructions import (
    DAY_BRIEF_INSTRUCTIONS,
    DAY_BRIEF_SYSTEM,
    EDITION_PLAN_INSTRUCTIONS,
    EDITION_PLAN_SYSTEM,
    STORY_CURATION_INSTRUCTIONS,
)
from generate_curation.models import StoryCandidate

MAX_LABEL_LEN = 120
MAX_BRIEF_LEN = 180
DAY_BRIEF_TOPICS_PER_SECTION = 12
EDITION_TOPICS_PER_SECTION = 18
MAX_ECON_SIGNALS = 8
MAX_MARKET_SIGNALS = 10
MAX_CITATIONS_PER_CANDIDATE = 2


def _topic_summary(topic: Topic, include_score: bool = False) -> dict:
    summary = {
        "topic_slug": topic.topic_slug,
        "theme": topic.theme,
        "label": clamp_text(topic.label, MAX_LABEL_LEN),
        "horizon_bucket": topic.horizon_bucket,
    }
    if include_score:
        summary["score"] = topic.score
    return summary


def _signal_summary(signal: Signal) -> dict:
    return {k: v for k, v in asdict(signal).items() if v not in (None, "")}


def build_day_brief_prompt(snapshot: TopicSnapshot, section_order: list[str]) -> tuple[str, str]:
    """Return (system, user) for the day-brief call."""
    payload = {
        "day": snapshot.day,
        "sections": section_order,
        "econ": [_signal_summary(s) for s in snapshot.econ_signals[:MAX_ECON_SIGNALS]],
        "markets": [_signal_summary(s) for s in snapshot.market_signals[:MAX_MARKET_SIGNALS]],
        "topics": {
            section: [
                _topic_summary(t, include_score=True)
                for t in snapshot.topics_by_section.get(section, [])[:DAY_BRIEF_TOPICS_PER_SECTION]
            ]
            for section in section_order
        },
    }
    user = f"{DAY_BRIEF_INSTRUCTIONS.strip()}\n\nINPUT:\n{json.dumps(payload, ensure_ascii=False)}"
    return DAY_BRIEF_SYSTEM.strip(), user


def build_edition_plan_prompt(
    snapshot: TopicSnapshot,
    years_forward: int,
    edition_date: str,
    section_order: list[str],
    day_brief: DayBrief,
) -> tuple[str, str]:
    """Return (system, user) for one edition-plan call; embeds the day brief."""
    payload = {
        "day": snapshot.day,
        "yearsForward": years_forward,
        "editionDate": edition_date,
        "sections": section_order,
        "dayBrief": {"summary": day_brief.summary, "sections": day_brief.sections},
        "topics": {
            section: [
                _topic_summary(t)
                for t in snapshot.topics_by_section.get(section, [])[:EDITION_TOPICS_PER_SECTION]
            ]
            for section in section_order
        },
    }
    user = (
        f"Plan the Future Times edition dated {edition_date} (yearsForward={years_forward}).\n"
        f"{EDITION_PLAN_INSTRUCTIONS.strip()}\n\nINPUT:\n{json.dumps(payload, ensure_ascii=False)}"
    )
    return EDITION_PLAN_SYSTEM.strip(), user


def _candidate_lines(candidate: StoryCandidate) -> str:
    topic = candidate.topic
    lines = [
        f"- storyId: {candidate.story_id}",
        f"  section: {candidate.section} rank: {candidate.rank}",
        f"  topic: {clamp_text(topic.label if topic else candidate.title, 130)}",
        f"  brief: {clamp_text(topic.brief if topic else '', MAX_BRIEF_LEN)}",
    ]
    citations = candidate.citations[:MAX_CITATIONS_PER_CANDIDATE]
    if citations:
        lines.append("  citations:")
        for citation in citations:
            title = clamp_text(citation.get("title"), 100)
            source = clamp_text(citation.get("source"), 30)
            lines.append(f"    - {title} ({source})")
    return "\n".join(lines)


def build_story_curation_prompt(
    candidates: list[StoryCandidate],
    day: str,
    years_forward: int,
    edition_date: str,
    key_count: int,
) -> str:
    """User prompt for a story-mode curation pass over existing candidates."""
    header = (
        'You are an expert editorial planner for "The Future Times".\n'
        f"You are curating the edition published on {edition_date} (yearsForward={years_forward}) "
        f"based on baseline signals from {day}."
    )
    instructions = STORY_CURATION_INSTRUCTIONS.format(
        key_count=key_count,
        day=day,
        years_forward=years_forward,
        edition_date=edition_date,
    ).strip()
    listing = "\n\n".join(_candidate_lines(c) for c in candidates) or "- (none)"
    return f"{header}\n\n{instructions}\n\nStory candidates (must use these storyIds exactly):\n{listing}"

"""Deterministic story-mode curation used when no backend is available."""

from __future__ import annotations

import re

from common.utils import clamp_text
from generate_curation.models import StoryCandidate

MOCK_MODEL = "mock-curator"

_TRAILING_PARTIAL_WORD_RE = re.compile(r"\s+\S*$")


def _short_topic(label: str, max_len: int = 80) -> str:
    if len(label) <= max_len:
        return label
    return _TRAILING_PARTIAL_WORD_RE.sub("", label[:max_len]).strip()


def pick_lead_candidate(candidates: list[StoryCandidate]) -> StoryCandidate | None:
    """U.S. rank-1 candidate, else the first one."""
    for candidate in candidates:
        if candidate.rank == 1 and candidate.section == "U.S.":
            return candidate
    return candidates[0] if candidates else None


def build_mock_story_plan(
    candidates: list[StoryCandidate],
    day: str,
    years_forward: int,
    edition_date: str,
    key_count: int,
) -> dict:
    """
    Build a raw story-mode plan in the backend wire shape.

    The lead candidate is the hero and, when key_count > 0, the only key story.
    No drafts are written.
    """
    lead = pick_lead_candidate(candidates)
    key_ids = [lead.story_id] if lead and key_count > 0 else []
    baseline_year = day[:4] or "2026"
    target_year = int(baseline_year) + years_forward

    stories = []
    for candidate in candidates:
        label = clamp_text((candidate.topic.label if candidate.topic else "") or candidate.title, 400)
        short = _short_topic(label)
        stories.append({
            "storyId": candidate.story_id,
            "curatedTitle": f"{short}, {target_year}: What Changed",
            "curatedDek": (
                f"The signals from {baseline_year} around {short} have matured into policy, "
                f"markets, and daily life by {edition_date}."
            ),
            "topicTitle": label,
            "sparkDirections": " ".join([
                f"Write as if published on {edition_date}.",
                f"The topic is: {short}.",
                f"Treat baseline citations as the historical record from {day}.",
                "Invent a specific future outcome that resolves the uncertainty around this topic (no hedging).",
            ]),
            "key": candidate.story_id in key_ids,
            "hero": lead is not None and candidate.story_id == lead.story_id,
            "futureEventSeed": (
                f'By {edition_date}, the story that began with "{short}" in {baseline_year} '
                "has reached a decisive turning point."
            ),
            "outline": [
                f"Lead: what happened by {target_year}, anchored in {short}",
                f"How it traces back to {baseline_year} baseline signals",
                "Who won and who lost; operational details and constraints",
                "What comes next",
            ],
            "extrapolationTrace": [
                f"Baseline ({baseline_year}): {label[:140]}",
                f"Bridge: institutions adapt and incentives shift over {max(1, years_forward)} years",
                f"Outcome: a specific, reportable event by {edition_date}",
            ],
            "rationale": [
                "High signal density in baseline evidence",
                "Clear path to a concrete future outcome",
                "Likely to attract reader attention in the section",
            ],
            "draftArticle": None,
        })

    return {
        "schema": 1,
        "day": day,
        "yearsForward": years_forward,
        "editionDate": edition_date,
        "model": MOCK_MODEL,
        "editionThesis": (
            f"By {edition_date}, the baseline themes from {day} have hardened into "
            "day-to-day operations and policy."
        ),
        "thinkingTrace": [
            "Prioritized stories with the clearest baseline-to-outcome bridge",
            "Chose a hero story that is broad, narrative, and easy to visualize",
            "Kept secondary stories as directives to minimize prewriting volume",
        ],
        "keyStoryIds": key_ids,
        "stories": stories,
    }

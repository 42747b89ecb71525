"""Deterministic allocation of a day's topics into future edition slots."""

from __future__ import annotations

import logging

from allocate_topics.models import (
    HORIZON_BUCKETS,
    DailyCuration,
    DayBrief,
    Edition,
    Topic,
    TopicSnapshot,
)
from common.hashing import pick_deterministic, stable_hash
from common.utils import ANGLES, SECTION_ORDER, clamp_text, format_edition_date, iso_now, round_half_up
from normalize_plans.normalize_plans import normalize_edition_plan

logger = logging.getLogger(__name__)

SLOTS_PER_SECTION = 5
MAX_POOL_SIZE = 40
MAX_YEARS_FORWARD = 10

TITLE_TEMPLATES = [
    "The Next Phase of {theme}",
    "A New Framework for {theme}",
    "Inside the New Politics of {theme}",
    "The Quiet Shift in {theme}",
    "{theme}: From Flashpoint to Policy",
]


def choose_horizon_mix(years_forward: int) -> dict[str, float]:
    """Share of near/mid/long topics wanted for an edition."""
    if years_forward <= 2:
        return {"near": 0.6, "mid": 0.3, "long": 0.1}
    if years_forward <= 5:
        return {"near": 0.3, "mid": 0.5, "long": 0.2}
    return {"near": 0.1, "mid": 0.4, "long": 0.5}


def wanted_counts(mix: dict[str, float], total: int = SLOTS_PER_SECTION) -> dict[str, int]:
    """Slot counts per bucket; the long bucket absorbs the rounding remainder."""
    near = round_half_up(total * mix["near"])
    mid = round_half_up(total * mix["mid"])
    return {"near": near, "mid": mid, "long": max(0, total - near - mid)}


def _hash_order(topics: list[Topic], seed: str) -> list[Topic]:
    return sorted(topics, key=lambda t: stable_hash(f"{seed}|{t.topic_slug}"))


def _take(ordered: list[Topic], selected: list[Topic], used: set[str], limit: int) -> None:
    for topic in ordered:
        if len(selected) >= limit:
            break
        if not topic.topic_slug or topic.topic_slug in used:
            continue
        selected.append(topic)
        used.add(topic.topic_slug)


def allocate_section(
    day: str,
    years_forward: int,
    section: str,
    topics: list[Topic],
    used: set[str],
) -> list[Topic]:
    """
    Pick up to five topics for one section of one edition.

    Args:
        day: Baseline day (YYYY-MM-DD).
        years_forward: Edition offset in years (0..10).
        section: Section name.
        topics: The section's topic pool for the day.
        used: Slugs already placed in this edition; updated in place.

    Returns:
        Selected topics in slot order.
    """
    pool = list(topics)[:MAX_POOL_SIZE]
    want = wanted_counts(choose_horizon_mix(years_forward))

    selected: list[Topic] = []
    for bucket in HORIZON_BUCKETS:
        bucket_pool = [t for t in pool if t.horizon_bucket == bucket]
        ordered = _hash_order(bucket_pool, f"{day}|{years_forward}|{section}|{bucket}")
        _take(ordered, selected, used, len(selected) + want[bucket])

    if len(selected) < SLOTS_PER_SECTION:
        ordered = _hash_order(pool, f"{day}|{years_forward}|{section}|any")
        _take(ordered, selected, used, SLOTS_PER_SECTION)

    return selected[:SLOTS_PER_SECTION]


def allocate_edition(
    day: str,
    years_forward: int,
    topics_by_section: dict[str, list[Topic]],
    section_order: list[str] | None = None,
) -> dict[str, list[Topic]]:
    """Allocate topics for every section; the used-set is local to this edition."""
    used: set[str] = set()
    return {
        section: allocate_section(day, years_forward, section, topics_by_section.get(section, []), used)
        for section in section_order or SECTION_ORDER
    }


def _build_slot(day: str, years_forward: int, edition_date: str, section: str, topic: Topic, idx: int) -> dict:
    theme = topic.theme or topic.label or "A Major Shift"
    template = TITLE_TEMPLATES[stable_hash(f"{day}|{years_forward}|{section}|{topic.topic_slug}|title") % len(TITLE_TEMPLATES)]
    is_lead = idx == 0
    if is_lead:
        dek = f"A future-dated lead built from today's signals, written as if published on {edition_date}."
        outline = [
            f"Lead with a specific event that happens on {edition_date} and sets the stakes around {theme}.",
            f"Use baseline sources only as background (what happened in {day[:4]}).",
            "Explain who wins and who loses.",
            "Describe what changes operationally for the institutions involved.",
            "Close on what comes next.",
        ]
    else:
        dek = (
            "A secondary slot with on-demand rendering directions; grounded in today's evidence "
            f"but written in the voice of {edition_date}."
        )
        outline = [
            "Describe the future event and why it matters.",
            "Anchor the backstory to baseline evidence; avoid copying baseline headlines.",
        ]
    return {
        "rank": idx + 1,
        "topic_slug": topic.topic_slug,
        "angle": ANGLES[idx % len(ANGLES)],
        "title": template.format(theme=theme),
        "dek": clamp_text(dek, 220),
        "future_event": clamp_text(
            f"A concrete development around {theme} lands on the docket in {edition_date}, "
            "forcing institutions to adapt in public.",
            200,
        ),
        "lede_seed": clamp_text(
            f"A new turn in {theme} is reshaping priorities across the system, "
            "with effects that show up first in paperwork and timelines.",
            260,
        ) if is_lead else "",
        "nut_seed": clamp_text(
            "The story now is less about rhetoric and more about implementation: budgets, staffing, "
            "audit trails, and what happens when edge cases hit scale.",
            280,
        ) if is_lead else "",
        "outline": outline,
    }


def pick_hero(day: str, years_forward: int, sections: dict[str, list[dict]]) -> dict | None:
    """U.S. rank-1 slot, or a stable pick across all slots when U.S. is empty."""
    lead = (sections.get("U.S.") or [None])[0]
    if lead is None:
        all_slots = [slot for slots in sections.values() for slot in slots]
        lead = pick_deterministic(all_slots, f"{day}|{years_forward}|hero")
    if lead is None:
        return None
    return {**lead, "section": "U.S.", "rank": 1}


def build_deterministic_edition(
    snapshot: TopicSnapshot,
    years_forward: int,
    section_order: list[str] | None = None,
) -> Edition:
    """Build one edition without any backend call; identical inputs give identical output."""
    order = section_order or SECTION_ORDER
    day = snapshot.day
    edition_date = format_edition_date(day, years_forward)
    allocation = allocate_edition(day, years_forward, snapshot.topics_by_section, order)

    sections = {
        section: [
            _build_slot(day, years_forward, edition_date, section, topic, idx)
            for idx, topic in enumerate(topics)
        ]
        for section, topics in allocation.items()
    }
    raw = {
        "schema": 1,
        "yearsForward": years_forward,
        "editionDate": edition_date,
        "hero": pick_hero(day, years_forward, sections),
        "sections": sections,
    }
    return normalize_edition_plan(raw, years_forward=years_forward, edition_date=edition_date, section_order=order)


def build_day_brief(snapshot: TopicSnapshot, section_order: list[str] | None = None) -> DayBrief:
    """Deterministic day brief listing the dominant themes per section."""
    order = section_order or SECTION_ORDER
    top_themes: list[str] = []
    for section in order:
        for topic in snapshot.topics_by_section.get(section, [])[:10]:
            if topic.theme and topic.theme not in top_themes:
                top_themes.append(topic.theme)

    summary = clamp_text(
        f"Top signals cluster around: {' • '.join(top_themes[:10]) or 'a mixed set of themes'}. "
        "The edition planner uses these to generate future-dated story lines by section.",
        520,
    )
    lines = {}
    for section in order:
        themes = [t.theme for t in snapshot.topics_by_section.get(section, [])[:6] if t.theme]
        line = f"Themes: {' • '.join(themes)}." if themes else "No topics available for this section today."
        lines[section] = clamp_text(line, 220)
    return DayBrief(summary=summary, sections=lines)


def build_mock_curation(snapshot: TopicSnapshot, section_order: list[str] | None = None) -> DailyCuration:
    """Deterministic stand-in for a backend daily curation: brief plus eleven editions."""
    editions = [
        build_deterministic_edition(snapshot, years_forward, section_order)
        for years_forward in range(MAX_YEARS_FORWARD + 1)
    ]
    logger.info("Built %d deterministic editions for %s", len(editions), snapshot.day)
    return DailyCuration(
        day=snapshot.day,
        generated_at=iso_now(),
        provider="mock",
        model="mock-curator",
        day_brief=build_day_brief(snapshot, section_order),
        editions=editions,
        econ=list(snapshot.econ_signals[:8]),
        markets=list(snapshot.market_signals[:10]),
    )


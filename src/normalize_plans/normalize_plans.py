"""Coerce raw edition and story plans into well-formed records, and validate them."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

from allocate_topics.models import Edition, StorySlot
from common.utils import ANGLES, SECTION_ORDER, clamp_text, get_value, iso_now
from generate_curation.models import CurationPlan, DraftArticle, StoryCandidate, StoryCuration

logger = logging.getLogger(__name__)

SLOTS_PER_SECTION = 5
MIN_POPULATED_SLOTS = 3
HERO_BACKFILL_FIELDS = ("topic_slug", "title", "dek", "future_event", "lede_seed", "nut_seed", "outline")


def normalize_angle(value: Any) -> str:
    raw = str(value or "").strip().lower()
    return raw if raw in ANGLES else ""


def normalize_section(value: Any, section_order: list[str] | None = None) -> str:
    """Map loose section labels ("us", "world") onto the canonical names."""
    raw = str(value or "").strip()
    if not raw:
        return ""
    if raw.lower() == "us":
        return "U.S."
    for section in section_order or SECTION_ORDER:
        if section.lower() == raw.lower():
            return section
    return raw


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _outline(value: Any, max_items: int = 10) -> list[str]:
    if not isinstance(value, list):
        return []
    items = [clamp_text(item, 200) for item in value]
    return [item for item in items if item][:max_items]


def normalize_slot(raw: Any, section: str, idx: int, section_order: list[str] | None = None) -> StorySlot:
    """Normalize one slot; the incoming rank is ignored in favour of position."""
    slot = _as_dict(raw)
    return StorySlot(
        rank=idx + 1,
        section=normalize_section(section, section_order),
        topic_slug=str(slot.get("topic_slug") or "").strip(),
        angle=normalize_angle(slot.get("angle")) or ANGLES[idx % len(ANGLES)],
        title=clamp_text(slot.get("title"), 140),
        dek=clamp_text(slot.get("dek"), 260),
        future_event=clamp_text(slot.get("future_event"), 240),
        lede_seed=clamp_text(slot.get("lede_seed"), 520),
        nut_seed=clamp_text(slot.get("nut_seed"), 520),
        outline=_outline(slot.get("outline")),
    )


def _reconcile_hero(hero: StorySlot | None, lead: StorySlot) -> StorySlot:
    if hero is None:
        return replace(lead, section="U.S.", rank=1, outline=list(lead.outline))
    for name in HERO_BACKFILL_FIELDS:
        if not getattr(hero, name):
            value = getattr(lead, name)
            setattr(hero, name, list(value) if isinstance(value, list) else value)
    return hero


def normalize_edition_plan(
    raw: Any,
    years_forward: int,
    edition_date: str,
    section_order: list[str] | None = None,
) -> Edition:
    """
    Force a raw edition plan into a well-formed Edition.

    Every section ends up with exactly five ranked slots, text fields are
    clamped, and the hero is reconciled with the U.S. rank-1 slot.

    Args:
        raw: Parsed backend output (or deterministic builder output); any type.
        years_forward: Edition offset in years.
        edition_date: Formatted edition date.
        section_order: Sections to emit, in order.

    Returns:
        Normalized Edition. Never raises on malformed input.
    """
    order = section_order or SECTION_ORDER
    plan = _as_dict(raw)
    sections_raw = _as_dict(plan.get("sections"))

    sections: dict[str, list[StorySlot]] = {}
    for section in order:
        slots_raw = sections_raw.get(section)
        slots_raw = slots_raw if isinstance(slots_raw, list) else []
        slots = [normalize_slot(slot, section, idx, order) for idx, slot in enumerate(slots_raw[:SLOTS_PER_SECTION])]
        while len(slots) < SLOTS_PER_SECTION:
            slots.append(normalize_slot({}, section, len(slots), order))
        for idx, slot in enumerate(slots):
            slot.rank = idx + 1
        sections[section] = slots

    hero = None
    hero_raw = plan.get("hero")
    if isinstance(hero_raw, dict):
        hero = normalize_slot(hero_raw, hero_raw.get("section") or "U.S.", 0, order)
        hero.section = "U.S."
        hero.rank = 1

    lead = (sections.get("U.S.") or [None])[0]
    if lead is not None:
        hero = _reconcile_hero(hero, lead)
    elif hero is None:
        hero = normalize_slot({}, "U.S.", 0, order)

    return Edition(
        years_forward=years_forward,
        edition_date=edition_date,
        hero=hero,
        sections=sections,
    )


def validate_edition_plan(
    plan: Edition | Mapping[str, Any],
    topic_pools: Mapping[str, Iterable[Any]],
    section_order: list[str] | None = None,
) -> list[str]:
    """
    Report semantic errors in a normalized edition plan without changing it.

    Args:
        plan: Normalized Edition (or an equivalent dict).
        topic_pools: Known topics (or slugs) per section.
        section_order: Sections to check.

    Returns:
        Error strings; an empty list means the plan is valid.
    """
    order = section_order if section_order is not None else SECTION_ORDER
    if not order:
        return ["missing section order"]
    sections = get_value(plan, "sections")
    if not isinstance(sections, Mapping):
        return ["missing sections"]

    errors: list[str] = []
    used: set[str] = set()
    for section in order:
        slots = sections.get(section)
        slots = slots if isinstance(slots, list) else []
        populated = [slot for slot in slots[:SLOTS_PER_SECTION] if str(get_value(slot, "topic_slug") or "").strip()]
        if len(populated) < MIN_POPULATED_SLOTS:
            errors.append(f"section {section} has too few slots")
            continue
        allowed = {_pool_slug(t) for t in topic_pools.get(section, [])} - {""}
        for slot in populated:
            slug = str(get_value(slot, "topic_slug")).strip()
            if slug not in allowed:
                errors.append(f"unknown topic_slug {slug} for section {section}")
            if slug in used:
                errors.append(f"duplicate topic_slug {slug} across edition")
            used.add(slug)
    return errors


def _pool_slug(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    return str(get_value(item, "topic_slug") or "").strip()


def _draft(value: Any) -> DraftArticle | None:
    draft = _as_dict(value)
    body = str(draft.get("body") or "").strip()
    if not body:
        return None
    return DraftArticle(
        title=str(draft.get("title") or "").strip(),
        dek=str(draft.get("dek") or "").strip(),
        body=body,
    )


def normalize_story_plan(
    raw: Any,
    candidates: list[StoryCandidate],
    day: str,
    years_forward: int,
    edition_date: str,
    model: str = "",
    generated_at: str | None = None,
) -> CurationPlan:
    """
    Force a raw story-mode plan into a CurationPlan over the given candidates.

    Entries for unknown story ids are dropped. Exactly one story is marked hero:
    the first flagged hero, else the first key story, else the first candidate.
    Drafts survive only on key stories.
    """
    plan = _as_dict(raw)
    entries: dict[str, dict[str, Any]] = {}
    candidate_ids = {c.story_id for c in candidates}
    dropped = 0
    for entry in plan.get("stories") or []:
        entry = _as_dict(entry)
        story_id = str(get_value(entry, "storyId", "story_id") or "").strip()
        if story_id not in candidate_ids:
            dropped += 1
            continue
        entries.setdefault(story_id, entry)
    if dropped:
        logger.warning("Dropped %d curated stories with unknown ids (day=%s, years_forward=%d)", dropped, day, years_forward)

    key_ids = {str(s or "").strip() for s in (get_value(plan, "keyStoryIds", "key_story_ids") or [])}

    stories: list[StoryCuration] = []
    for candidate in candidates:
        entry = entries.get(candidate.story_id, {})
        topic = candidate.topic
        key = bool(entry.get("key")) or candidate.story_id in key_ids
        stories.append(
            StoryCuration(
                story_id=candidate.story_id,
                section=candidate.section,
                rank=candidate.rank,
                curated_title=clamp_text(get_value(entry, "curatedTitle", "curated_title"), 200) or candidate.title,
                curated_dek=clamp_text(get_value(entry, "curatedDek", "curated_dek"), 400) or candidate.dek,
                topic_title=clamp_text(get_value(entry, "topicTitle", "topic_title", "topicSeed"), 120)
                or (topic.theme or topic.label if topic else ""),
                spark_directions=clamp_text(get_value(entry, "sparkDirections", "spark_directions"), 1200),
                key=key,
                hero=bool(entry.get("hero")),
                future_event_seed=clamp_text(get_value(entry, "futureEventSeed", "future_event_seed"), 400),
                outline=_outline(entry.get("outline"), max_items=8),
                extrapolation_trace=_outline(get_value(entry, "extrapolationTrace", "extrapolation_trace"), max_items=8),
                rationale=_outline(entry.get("rationale"), max_items=8),
                draft_article=_draft(get_value(entry, "draftArticle", "draft_article")) if key else None,
            )
        )

    _enforce_single_hero(stories)

    return CurationPlan(
        day=day,
        years_forward=years_forward,
        edition_date=edition_date,
        generated_at=generated_at or iso_now(),
        model=str(model or plan.get("model") or ""),
        stories=stories,
        key_story_ids=[story.story_id for story in stories if story.key],
        edition_thesis=clamp_text(get_value(plan, "editionThesis", "edition_thesis"), 600),
        thinking_trace=_outline(get_value(plan, "thinkingTrace", "thinking_trace"), max_items=10),
    )


def _enforce_single_hero(stories: list[StoryCuration]) -> None:
    if not stories:
        return
    hero = (
        next((s for s in stories if s.hero), None)
        or next((s for s in stories if s.key), None)
        or stories[0]
    )
    for story in stories:
        story.hero = story is hero

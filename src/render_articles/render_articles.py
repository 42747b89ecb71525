"""Materialize article payloads from story records and curated drafts."""

from __future__ import annotations

import logging

from allocate_topics.models import Signal
from common.utils import clamp_text, iso_now
from generate_curation.models import DraftArticle, StoryRecord
from render_articles.models import Citation, RenderedArticle, SignalItem

logger = logging.getLogger(__name__)

MAX_SIGNALS = 8
MAX_SOURCES = 12
GENERATED_FROM = "curation-engine"


def _inline(value) -> str:
    return clamp_text(value, 2000)


def _signal_items(signals: list[Signal]) -> list[SignalItem]:
    return [SignalItem(label=s.label, value=s.value, prob=s.prob) for s in signals]


def _citations(citations: list[dict[str, str]]) -> list[Citation]:
    return [
        Citation(
            title=_inline(c.get("title")),
            source=_inline(c.get("source")),
            url=_inline(c.get("url")),
        )
        for c in citations
        if isinstance(c, dict)
    ]


def _meta(section: str, edition_date: str) -> str:
    return " • ".join(part for part in (_inline(section), _inline(edition_date)) if part)


def _image_prompt(subject: str, edition_date: str) -> str:
    return f"Editorial photo illustration of: {subject}. Newspaper photography style. Dated {edition_date}."


def build_sources_list(citations: list[Citation]) -> str:
    """Markdown 'Sources' block, or an empty string when there are none."""
    if not citations:
        return ""
    lines = ["Sources", ""]
    for citation in citations[:MAX_SOURCES]:
        title = citation.title or citation.url or "Source"
        suffix = " • ".join(part for part in (citation.source, citation.url) if part)
        lines.append(f"- {title} ({suffix})" if suffix else f"- {title}")
    return "\n".join(lines)


def build_story_body(story: StoryRecord) -> str:
    """Deterministic markdown body built from the story's seeds and evidence."""
    curation = story.curation
    topic = story.topic
    seed = _inline(curation.future_event_seed or curation.spark_directions) if curation else ""
    brief = _inline(topic.brief) if topic else ""
    headline = _inline(story.headline_seed or (topic.label if topic else ""))
    years = story.years_forward

    lines = [f"## {headline or 'A future-dated dispatch'}", ""]
    if seed or brief:
        lines += [seed or brief, ""]

    span = "a year" if years == 1 else f"{years} years"
    lines += [
        f"By {story.edition_date or story.day}, the story has shifted from signal to consequence.",
        f"What began as a baseline item in {story.day} now plays out as policy, markets, "
        f"and institutions adapt over {span}.",
        "",
    ]

    if story.signals:
        lines += ["### Signals", ""]
        for signal in story.signals[:MAX_SIGNALS]:
            value = _inline(signal.value)
            lines.append(f"- {_inline(signal.label)} ({value})" if value else f"- {_inline(signal.label)}")
        lines.append("")

    if story.markets:
        lines += ["### Market snapshot", ""]
        for market in story.markets[:MAX_SIGNALS]:
            prob = _inline(market.prob)
            lines.append(f"- {_inline(market.label)}: {prob}" if prob else f"- {_inline(market.label)}")
        lines.append("")

    sources = build_sources_list(_citations(story.citations))
    if sources:
        lines += [sources, ""]

    return "\n".join(lines)


def build_article_from_story(story: StoryRecord) -> RenderedArticle:
    """
    Build the deterministic article for a story record.

    The article is stamped with the story's curation fingerprint so the
    rendered cache can tell when it has gone stale.
    """
    title = _inline(story.headline_seed) or "Future Times story"
    seed = _inline(story.curation.future_event_seed) if story.curation else ""
    return RenderedArticle(
        id=story.story_id,
        section=story.section,
        title=title,
        dek=_inline(story.dek_seed),
        meta=_meta(story.section, story.edition_date),
        body=build_story_body(story),
        edition_date=story.edition_date,
        years_forward=story.years_forward,
        signals=_signal_items(story.signals),
        markets=_signal_items(story.markets),
        citations=_citations(story.citations),
        image_prompt=_image_prompt(seed or title, story.edition_date),
        generated_from=f"{GENERATED_FROM} / {story.day}",
        generated_at=iso_now(),
        curation_generated_at=story.curation_generated_at,
    )


def article_from_draft(
    story_id: str,
    section: str,
    draft: DraftArticle,
    day: str,
    years_forward: int,
    edition_date: str,
    fingerprint: str | None,
    citations: list[dict[str, str]] | None = None,
) -> RenderedArticle:
    """Wrap a key story's curated draft in the rendered-article payload."""
    title = _inline(draft.title) or "Future Times story"
    return RenderedArticle(
        id=story_id,
        section=section,
        title=title,
        dek=_inline(draft.dek),
        meta=_meta(section, edition_date),
        body=draft.body.strip(),
        edition_date=edition_date,
        years_forward=years_forward,
        citations=_citations(citations or []),
        image_prompt=_image_prompt(title, edition_date),
        generated_from=f"{GENERATED_FROM} draft / {day}",
        generated_at=iso_now(),
        curation_generated_at=fingerprint,
    )

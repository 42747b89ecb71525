"""Curation engine: allocation, generation, normalization and rendered caching."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from allocate_topics.allocate_topics import (
    MAX_YEARS_FORWARD,
    build_day_brief,
    build_deterministic_edition,
    build_mock_curation,
)
from allocate_topics.models import DailyCuration, DayBrief, Edition, Topic, TopicSnapshot
from allocate_topics.sources import TopicSource, load_snapshot
from common.utils import (
    SECTION_ORDER,
    clamp_int,
    clamp_text,
    clamp_years,
    format_edition_date,
    iso_now,
    normalize_day,
    slugify,
)
from generate_curation.client import GenerationClient
from generate_curation.config import CurationConfig
from generate_curation.errors import CurationError, ParseError
from generate_curation.mock_curation import MOCK_MODEL, build_mock_story_plan
from generate_curation.models import CurationPlan, StoryCandidate, StoryRecord
from generate_curation.prompts import (
    build_day_brief_prompt,
    build_edition_plan_prompt,
    build_story_curation_prompt,
)
from generate_curation.providers import build_provider
from normalize_plans.normalize_plans import (
    normalize_edition_plan,
    normalize_story_plan,
    validate_edition_plan,
)
from render_articles.cache import RenderedArticleCache
from render_articles.models import RenderedArticle
from render_articles.render_articles import article_from_draft, build_article_from_story

logger = logging.getLogger(__name__)


def build_story_id(day: str, years_forward: int, section: str, topic_slug: str, angle: str) -> str:
    return f"ft-{day}-y{years_forward}-{slugify(section)}-{topic_slug}-{angle}"


class CurationEngine:
    """
    Long-lived curation service with injected collaborators.

    Call initialize() once before use; it resolves the generation mode and
    builds the generation client unless one was injected.
    """

    def __init__(
        self,
        topic_source: TopicSource,
        config: CurationConfig | None = None,
        client: GenerationClient | None = None,
        cache: RenderedArticleCache | None = None,
    ):
        self.topic_source = topic_source
        self.config = config or CurationConfig()
        self.client = client
        self.cache = cache or RenderedArticleCache()
        self.section_order = list(self.config.section_order or SECTION_ORDER)
        self.mode = ""

    def initialize(self) -> CurationEngine:
        self.mode = self.config.resolve_mode()
        if self.client is None and self.mode in ("anthropic", "openai", "http"):
            self.client = GenerationClient(
                build_provider(self.mode, self.config),
                model=self.config.model,
                max_output_tokens=self.config.max_tokens,
            )
        logger.info("Curation engine initialized (mode=%s, configured=%s)", self.mode, self.config.mode)
        return self

    def _require_initialized(self) -> None:
        if not self.mode:
            raise RuntimeError("CurationEngine.initialize() must be called first")

    @property
    def uses_backend(self) -> bool:
        return self.mode not in ("mock", "disabled")

    def load_snapshot(self, day: str) -> TopicSnapshot:
        normalized = normalize_day(day)
        if not normalized:
            raise ValueError(f"day must be YYYY-MM-DD, got {day!r}")
        return load_snapshot(self.topic_source, normalized)

    def _degrade(self, exc: CurationError, what: str) -> None:
        """Re-raise for a pinned backend; otherwise log and let the caller fall back."""
        if self.config.pinned:
            raise exc
        logger.warning("%s failed (%s); using deterministic fallback", what, exc.__class__.__name__)

    # Edition mode

    def build_deterministic_edition(self, day: str, years_forward: int) -> Edition:
        return build_deterministic_edition(self.load_snapshot(day), clamp_years(years_forward), self.section_order)

    def validate_edition_plan(
        self,
        plan: Edition | Mapping[str, Any],
        topic_pools: Mapping[str, Iterable[Any]],
    ) -> list[str]:
        return validate_edition_plan(plan, topic_pools, self.section_order)

    def generate_daily_curation(self, day: str) -> DailyCuration | None:
        """
        Plan all eleven editions for a day.

        Returns None when curation is disabled. In auto mode backend failures
        and invalid plans degrade to the deterministic builders; with a pinned
        backend failures propagate.
        """
        self._require_initialized()
        if self.mode == "disabled":
            logger.info("Curation disabled; skipping daily curation for %s", day)
            return None

        snapshot = self.load_snapshot(day)
        if not self.uses_backend:
            return build_mock_curation(snapshot, self.section_order)

        try:
            day_brief, model = self._generate_day_brief(snapshot)
        except CurationError as exc:
            self._degrade(exc, f"Day brief for {day}")
            return build_mock_curation(snapshot, self.section_order)

        years = range(MAX_YEARS_FORWARD + 1)
        if self.config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                results = list(executor.map(lambda y: self._plan_edition(snapshot, y, day_brief), years))
        else:
            results = [self._plan_edition(snapshot, y, day_brief) for y in years]

        editions = [edition for edition, _ in results]
        validation_errors = {edition.years_forward: errors for edition, errors in results if errors}
        logger.info(
            "Daily curation for %s complete (provider=%s, editions=%d, with_errors=%d)",
            day, self.client.provider_name, len(editions), len(validation_errors),
        )
        return DailyCuration(
            day=day,
            generated_at=iso_now(),
            provider=self.client.provider_name,
            model=model,
            day_brief=day_brief,
            editions=editions,
            econ=list(snapshot.econ_signals[:8]),
            markets=list(snapshot.market_signals[:10]),
            validation_errors=validation_errors,
        )

    def _generate_day_brief(self, snapshot: TopicSnapshot) -> tuple[DayBrief, str]:
        system, user = build_day_brief_prompt(snapshot, self.section_order)
        result = self.client.generate_json(user, system, timeout=self.config.daily_timeout_s)
        raw = result.data.get("dayBrief") or result.data.get("day_brief")
        if not isinstance(raw, dict):
            raise ParseError("Backend did not return dayBrief", preview=str(result.data)[:400])
        sections = raw.get("sections") if isinstance(raw.get("sections"), dict) else {}
        brief = DayBrief(
            summary=clamp_text(raw.get("summary"), 900),
            sections={str(k): clamp_text(v, 220) for k, v in sections.items()},
        )
        if not brief.summary:
            brief.summary = build_day_brief(snapshot, self.section_order).summary
        return brief, result.model

    def _plan_edition(
        self,
        snapshot: TopicSnapshot,
        years_forward: int,
        day_brief: DayBrief,
    ) -> tuple[Edition, list[str]]:
        edition_date = format_edition_date(snapshot.day, years_forward)
        system, user = build_edition_plan_prompt(
            snapshot, years_forward, edition_date, self.section_order, day_brief
        )
        try:
            result = self.client.generate_json(user, system, timeout=self.config.daily_timeout_s)
        except CurationError as exc:
            self._degrade(exc, f"Edition plan {snapshot.day} +{years_forward}y")
            return build_deterministic_edition(snapshot, years_forward, self.section_order), []

        edition = normalize_edition_plan(result.data, years_forward, edition_date, self.section_order)
        errors = validate_edition_plan(edition, snapshot.topic_pools(), self.section_order)
        if errors:
            logger.warning(
                "Edition plan %s +%dy has %d validation errors", snapshot.day, years_forward, len(errors)
            )
            if not self.config.pinned and self.config.fallback_on_invalid:
                edition = build_deterministic_edition(snapshot, years_forward, self.section_order)
        return edition, errors

    # Story mode

    def generate_edition_curation_plan(
        self,
        candidates: list[StoryCandidate],
        day: str,
        years_forward: int,
        key_count: int | None = None,
    ) -> CurationPlan:
        """Curate existing story candidates: rewrites, one hero, key stories and drafts."""
        self._require_initialized()
        years_forward = clamp_years(years_forward)
        edition_date = format_edition_date(day, years_forward)
        if self.mode == "disabled":
            return CurationPlan(
                day=day, years_forward=years_forward, edition_date=edition_date,
                generated_at=iso_now(), model="off",
            )

        keys = clamp_int(self.config.key_stories_per_edition if key_count is None else key_count, 1, 0, 7)
        raw, model = None, MOCK_MODEL
        if self.uses_backend:
            prompt = build_story_curation_prompt(candidates, day, years_forward, edition_date, keys)
            try:
                result = self.client.generate_json(prompt, self.config.system_prompt, timeout=self.config.timeout_s)
                raw, model = result.data, result.model
            except CurationError as exc:
                self._degrade(exc, f"Story curation {day} +{years_forward}y")

        if raw is None:
            raw = build_mock_story_plan(candidates, day, years_forward, edition_date, keys)
        plan = normalize_story_plan(raw, candidates, day, years_forward, edition_date, model=model)
        logger.info(
            "Curated %d stories for %s +%dy (model=%s, key=%d)",
            len(plan.stories), day, years_forward, plan.model, len(plan.key_story_ids),
        )
        return plan

    def candidates_for_edition(self, edition: Edition, day: str) -> list[StoryCandidate]:
        """Story candidates for every populated slot of an edition, in section order."""
        topics: dict[str, Topic] = {
            topic.topic_slug: topic
            for section_topics in self.load_snapshot(day).topics_by_section.values()
            for topic in section_topics
        }
        candidates = []
        for section in self.section_order:
            for slot in edition.sections.get(section, []):
                if not slot.topic_slug:
                    continue
                candidates.append(
                    StoryCandidate(
                        story_id=build_story_id(day, edition.years_forward, section, slot.topic_slug, slot.angle),
                        section=section,
                        rank=slot.rank,
                        angle=slot.angle,
                        title=slot.title,
                        dek=slot.dek,
                        topic=topics.get(slot.topic_slug),
                    )
                )
        return candidates

    # Rendered content

    def get_rendered_article(self, story_id: str, fingerprint: str | None) -> RenderedArticle | None:
        return self.cache.get(story_id, fingerprint)

    def store_rendered_article(self, story_id: str, fingerprint: str | None, article: RenderedArticle) -> None:
        self.cache.put(story_id, fingerprint, article)

    def render_article(self, story: StoryRecord) -> RenderedArticle:
        """Cached article for the story's fingerprint, building it once if absent."""
        return self.cache.get_or_build(
            story.story_id,
            story.curation_generated_at,
            lambda: build_article_from_story(story),
        )

    def store_draft_articles(self, plan: CurationPlan, candidates: list[StoryCandidate]) -> int:
        """Pre-populate the cache with key-story drafts, stamped with the plan's fingerprint."""
        by_id = {c.story_id: c for c in candidates}
        stored = 0
        for story in plan.stories:
            if story.draft_article is None:
                continue
            candidate = by_id.get(story.story_id)
            article = article_from_draft(
                story.story_id,
                story.section,
                story.draft_article,
                day=plan.day,
                years_forward=plan.years_forward,
                edition_date=plan.edition_date,
                fingerprint=plan.generated_at,
                citations=candidate.citations if candidate else None,
            )
            self.store_rendered_article(story.story_id, plan.generated_at, article)
            stored += 1
        if stored:
            logger.info("Stored %d drafted articles for %s +%dy", stored, plan.day, plan.years_forward)
        return stored

"""Rendered article Pydantic models."""

from pydantic import BaseModel, Field


class SignalItem(BaseModel):
    """Economic or market signal shown alongside an article."""

    label: str
    value: str | None = None
    prob: str | None = None


class Citation(BaseModel):
    """Baseline source cited by an article."""

    title: str = ""
    source: str = ""
    url: str = ""


class RenderedArticle(BaseModel):
    """Fully materialized article for one story id."""

    id: str
    section: str
    title: str
    dek: str = ""
    meta: str = ""
    body: str
    edition_date: str = ""
    years_forward: int = 0
    signals: list[SignalItem] = Field(default_factory=list)
    markets: list[SignalItem] = Field(default_factory=list)
    citations: list[Citation] = Field(default_factory=list)
    image_prompt: str = ""
    generated_from: str = ""
    generated_at: str
    curation_generated_at: str | None = None


class CacheEntry(BaseModel):
    """Persisted cache record: the article plus the fingerprint it was built for."""

    fingerprint: str | None = None
    stored_at: str
    article: RenderedArticle

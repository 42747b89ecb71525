"""Common utility functions."""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any

SECTION_ORDER = ["U.S.", "World", "Business", "Technology", "AI", "Arts", "Lifestyle", "Opinion"]
ANGLES = ["impact", "markets", "policy", "tech", "society"]

_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_PUNCT_RE = re.compile(r"[,\s;:.]+$")


def get_value(obj: Any, key: str, *aliases: str) -> Any:
    """Get value from dict or object attribute, trying aliases in order."""
    for name in (key, *aliases):
        if isinstance(obj, dict):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def iso_now() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_day(value: Any) -> str:
    """Return the day string if it looks like YYYY-MM-DD, else an empty string."""
    raw = str(value or "").strip()
    if not _DAY_RE.match(raw):
        return ""
    return raw


def clamp_years(value: Any, default: int = 5) -> int:
    """Clamp a years-forward value into the 0..10 range."""
    try:
        years = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(years):
        return default
    return max(0, min(10, round_half_up(years)))


def clamp_int(value: Any, default: int, minimum: int, maximum: int) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(minimum, min(maximum, round_half_up(number)))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_text(value: Any, max_len: int = 900) -> str:
    """Collapse whitespace and cut text at max_len.

    Trailing punctuation and whitespace left at the cut point are stripped.
    """
    text = _WHITESPACE_RE.sub(" ", str(value or "")).strip()
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return _TRAILING_PUNCT_RE.sub("", text[:max_len]).strip()


def slugify(value: Any, max_len: int = 60) -> str:
    raw = str(value or "").lower()
    raw = re.sub(r"['\"]", "", raw)
    raw = raw.replace("&", " and ")
    raw = re.sub(r"[^a-z0-9]+", "-", raw).strip("-")
    if not raw:
        return "topic"
    if len(raw) > max_len:
        return raw[:max_len].rstrip("-")
    return raw


def unique_strings(values) -> list[str]:
    """Trimmed, non-empty strings in first-seen order."""
    out: list[str] = []
    seen: set[str] = set()
    for item in values or []:
        text = str(item or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        out.append(text)
    return out


def format_edition_date(day: str, years_forward: int) -> str:
    """Format the edition date for a day shifted by whole years.

    Uses a UTC noon basis so the calendar day never drifts. Feb 29 rolls over to
    Mar 1 when the target year has no leap day.
    """
    base = datetime.fromisoformat(f"{day}T12:00:00+00:00")
    year = base.year + int(years_forward or 0)
    try:
        shifted = base.replace(year=year)
    except ValueError:
        shifted = base.replace(year=year, month=3, day=1)
    return f"{shifted.strftime('%B')} {shifted.day}, {shifted.year}"

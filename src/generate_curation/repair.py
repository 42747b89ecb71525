"""Ordered repair ladder for malformed JSON responses."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from generate_curation.errors import ParseError

logger = logging.getLogger(__name__)

TRUNCATION_SUFFIXES = (']}', '"}]}', '"}]]}', '"}}]}', '"]}}', '"}]}}', '}', ']}}')

_LEADING_FENCE_RE = re.compile(r"^[\s\S]*?```(?:json)?\s*\n?", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\n?\s*```[\s\S]*$")


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def parse_direct(text: str) -> dict[str, Any] | None:
    """Step 1: the response is already a JSON object."""
    return _loads_object(text.strip())


def strip_fences(text: str) -> str:
    """Remove markdown code-fence wrapping, if present."""
    if "```" not in text:
        return text.strip()
    stripped = _LEADING_FENCE_RE.sub("", text, count=1)
    return _TRAILING_FENCE_RE.sub("", stripped, count=1).strip()


def parse_stripped(text: str) -> dict[str, Any] | None:
    """Step 2: JSON wrapped in code fences."""
    if "```" not in text:
        return None
    return _loads_object(strip_fences(text))


def parse_braced(text: str) -> dict[str, Any] | None:
    """Step 3: JSON surrounded by prose; parse first '{' through last '}'."""
    cleaned = strip_fences(text)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start < 0 or end <= start:
        return None
    return _loads_object(cleaned[start:end + 1])


def close_truncated(text: str, suffixes: tuple[str, ...] = TRUNCATION_SUFFIXES) -> dict[str, Any] | None:
    """Step 4: close a size-truncated structure with plausible suffixes."""
    base = strip_fences(text) or text
    for suffix in suffixes:
        parsed = _loads_object(base + suffix)
        if parsed is not None:
            logger.info("Repaired truncated response with suffix %r", suffix)
            return parsed
    return None


class RepairLadder:
    """Try each parsing step in order until one yields a JSON object.

    The truncation-closing step only runs when the backend marked the
    response as cut off by its size budget.
    """

    def __init__(
        self,
        steps: list[Callable[[str], dict[str, Any] | None]] | None = None,
        truncation_step: Callable[[str], dict[str, Any] | None] = close_truncated,
    ):
        self.steps = steps if steps is not None else [parse_direct, parse_stripped, parse_braced]
        self.truncation_step = truncation_step

    def parse(self, text: str, truncated: bool = False) -> dict[str, Any]:
        raw = str(text or "")
        if raw.strip():
            for step in self.steps:
                parsed = step(raw)
                if parsed is not None:
                    return parsed
            if truncated:
                parsed = self.truncation_step(raw)
                if parsed is not None:
                    return parsed
        preview = raw[:400].replace("\n", "\\n")
        raise ParseError(
            f"Response parse failed (truncated={truncated}). Preview: {preview}",
            truncated=truncated,
            preview=preview,
        )

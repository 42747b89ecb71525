"""Local file I/O utilities."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def read_json_local(path: Path) -> Any | None:
    """Read a JSON document, returning None when the file does not exist."""
    if not path.exists():
        return None
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def write_json_local(payload: Any, path: Path) -> Path:
    """Write a JSON document atomically (temp file + rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(payload, f, default=str, ensure_ascii=False)
    os.replace(tmp, path)
    logger.debug("Wrote %s", path)
    return path

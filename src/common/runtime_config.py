"""Persisted runtime configuration (~/.futurenews/runtime.json)."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from common.utils import iso_now

logger = logging.getLogger(__name__)

DEFAULT_DIR = ".futurenews"
DEFAULT_FILE = "runtime.json"
CURATOR_KEY = "curator"


def get_runtime_config_path() -> Path:
    """Resolve the runtime config file, honouring FUTURENEWS_RUNTIME_CONFIG_FILE."""
    override = os.environ.get("FUTURENEWS_RUNTIME_CONFIG_FILE", "").strip()
    if override:
        return Path(override)
    base = Path.home() if str(Path.home()) else Path.cwd()
    return (base / DEFAULT_DIR / DEFAULT_FILE).resolve()


def read_runtime_config(path: Path | None = None) -> dict[str, Any] | None:
    """Read the runtime config document, or None if missing or unreadable."""
    path = path or get_runtime_config_path()
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable runtime config %s: %s", path, exc)
        return None
    return data if isinstance(data, dict) else None


def write_runtime_config(payload: dict[str, Any], path: Path | None = None) -> Path:
    """Write the runtime config atomically with owner-only permissions."""
    path = path or get_runtime_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.chmod(path.parent, 0o700)
    except OSError as exc:
        logger.debug("Could not restrict permissions on %s: %s", path.parent, exc)

    tmp = path.with_name(f"{path.name}.tmp")
    fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    os.replace(tmp, path)
    os.chmod(path, 0o600)
    return path


def read_curator_runtime_config(path: Path | None = None) -> dict[str, Any]:
    """Return the curator section of the runtime config (empty dict if absent)."""
    config = read_runtime_config(path) or {}
    curator = config.get(CURATOR_KEY)
    return curator if isinstance(curator, dict) else {}


def _apply_patch(target: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    result = dict(target)
    for key, value in patch.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            result.pop(key, None)
            continue
        result[key] = value
    return result


def update_curator_runtime_config(patch: dict[str, Any], path: Path | None = None) -> dict[str, Any]:
    """Merge a patch into the curator section; None or blank values remove keys."""
    existing = read_runtime_config(path) or {"schema": 1}
    current = existing.get(CURATOR_KEY)
    updated = {
        **existing,
        "schema": 1,
        "updatedAt": iso_now(),
        CURATOR_KEY: _apply_patch(current if isinstance(current, dict) else {}, patch),
    }
    written = write_runtime_config(updated, path)
    logger.info("Updated runtime config %s (keys=%s)", written, sorted(updated[CURATOR_KEY]))
    return updated

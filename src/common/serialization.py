"""Serialization utilities."""

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any


def _convert(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _convert(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_convert(v) for v in value]
    return value


def serialize_dataclass(obj) -> dict:
    """Serialize a dataclass to dict, converting datetimes to ISO strings."""
    data = asdict(obj)
    return {key: _convert(value) for key, value in data.items()}


def to_json(obj: Any) -> str:
    """Dump a dataclass (or plain data) as canonical JSON with sorted keys."""
    data = serialize_dataclass(obj) if is_dataclass(obj) and not isinstance(obj, type) else _convert(obj)
    return json.dumps(data, ensure_ascii=False, sort_keys=True, separators=(",", ":"))

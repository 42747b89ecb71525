"""Topic and signal sources consumed from the collection layer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from allocate_topics.models import Signal, Topic, TopicSnapshot
from common.local_io import read_json_local
from common.utils import get_value

logger = logging.getLogger(__name__)


class TopicSource(Protocol):
    def get_topics_by_section(self, day: str) -> dict[str, list[Topic]]: ...

    def get_econ_signals(self, day: str) -> list[Signal]: ...

    def get_market_signals(self, day: str) -> list[Signal]: ...


def load_snapshot(source: TopicSource, day: str) -> TopicSnapshot:
    """Collect everything the engine needs for one day from a source."""
    return TopicSnapshot(
        day=day,
        topics_by_section=source.get_topics_by_section(day),
        econ_signals=source.get_econ_signals(day),
        market_signals=source.get_market_signals(day),
    )


class InMemoryTopicSource:
    """Source backed by snapshots held in memory, keyed by day."""

    def __init__(self, snapshots: list[TopicSnapshot] | None = None):
        self._snapshots = {s.day: s for s in snapshots or []}

    def add(self, snapshot: TopicSnapshot) -> None:
        self._snapshots[snapshot.day] = snapshot

    def _get(self, day: str) -> TopicSnapshot | None:
        return self._snapshots.get(day)

    def get_topics_by_section(self, day: str) -> dict[str, list[Topic]]:
        snapshot = self._get(day)
        return dict(snapshot.topics_by_section) if snapshot else {}

    def get_econ_signals(self, day: str) -> list[Signal]:
        snapshot = self._get(day)
        return list(snapshot.econ_signals) if snapshot else []

    def get_market_signals(self, day: str) -> list[Signal]:
        snapshot = self._get(day)
        return list(snapshot.market_signals) if snapshot else []


def snapshot_from_dict(data: dict[str, Any], day: str = "") -> TopicSnapshot:
    """Parse a snapshot document; accepts snake_case or camelCase keys."""
    sections = get_value(data, "topics_by_section", "topicsBySection") or {}
    return TopicSnapshot(
        day=str(data.get("day") or day),
        topics_by_section={
            section: [Topic.from_dict(t) for t in topics if isinstance(t, dict)]
            for section, topics in sections.items()
            if isinstance(topics, list)
        },
        econ_signals=[
            Signal.from_dict(s) for s in get_value(data, "econ_signals", "econSignals") or [] if isinstance(s, dict)
        ],
        market_signals=[
            Signal.from_dict(s) for s in get_value(data, "market_signals", "marketSignals") or [] if isinstance(s, dict)
        ],
    )


class JsonSnapshotTopicSource:
    """Reads `<directory>/<day>.json` snapshot files written by the collection layer."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        self._cache: dict[str, TopicSnapshot] = {}

    def _get(self, day: str) -> TopicSnapshot:
        if day not in self._cache:
            data = read_json_local(self.directory / f"{day}.json")
            if data is None:
                logger.warning("No topic snapshot for %s in %s", day, self.directory)
                data = {}
            self._cache[day] = snapshot_from_dict(data, day)
        return self._cache[day]

    def get_topics_by_section(self, day: str) -> dict[str, list[Topic]]:
        return dict(self._get(day).topics_by_section)

    def get_econ_signals(self, day: str) -> list[Signal]:
        return list(self._get(day).econ_signals)

    def get_market_signals(self, day: str) -> list[Signal]:
        return list(self._get(day).market_signals)

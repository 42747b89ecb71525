"""Rendered-content cache keyed by story id and curation fingerprint."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Protocol

from common.hashing import fingerprint_digest
from common.local_io import read_json_local, write_json_local
from common.utils import iso_now, slugify
from render_articles.models import CacheEntry, RenderedArticle

logger = logging.getLogger(__name__)

EDITION_TTL_S = 60 * 60
ARTICLE_TTL_S = 20 * 60


class KeyValueStore(Protocol):
    """Durable key-value persistence for JSON documents."""

    def get(self, key: str) -> dict[str, Any] | None: ...

    def put(self, key: str, value: dict[str, Any]) -> None: ...


class InMemoryStore:
    """Process-local store; used in tests and single-process runs."""

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: dict[str, Any]) -> None:
        with self._lock:
            self._data[key] = value


class LocalFileStore:
    """One JSON file per key under a directory."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{slugify(key, max_len=80)}-{fingerprint_digest(key)}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        value = read_json_local(self._path(key))
        return value if isinstance(value, dict) else None

    def put(self, key: str, value: dict[str, Any]) -> None:
        write_json_local(value, self._path(key))


def fingerprint_matches(stored: str | None, expected: str | None) -> bool:
    """A caller without a stamp accepts any entry; otherwise stamps must be equal."""
    if not expected:
        return True
    return stored == expected


def inflight_key(story_id: str, fingerprint: str | None) -> str:
    """In-flight builds are shared only between callers asking for the same stamp."""
    return f"{story_id}|{fingerprint or ''}"


class InflightBuilds:
    """
    Share one build per key between concurrent callers.

    The first caller runs the builder; later callers wait on the same Future.
    The key is removed once the build settles, successfully or not.
    """

    def __init__(self):
        self._futures: dict[str, Future] = {}
        self._lock = threading.Lock()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._futures

    def run(self, key: str, builder: Callable[[], Any]) -> Any:
        with self._lock:
            future = self._futures.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._futures[key] = future

        if not owner:
            return future.result()

        try:
            future.set_result(builder())
        except Exception as exc:
            future.set_exception(exc)
        finally:
            with self._lock:
                self._futures.pop(key, None)
        return future.result()


class RenderedArticleCache:
    """
    At most one fresh rendered article per story id.

    Entries are superseded by writes for the same id and never deleted; a read
    whose fingerprint differs from the stored one is a miss.
    """

    def __init__(self, store: KeyValueStore | None = None):
        self.store = store if store is not None else InMemoryStore()
        self.inflight = InflightBuilds()
        self._lock = threading.Lock()

    @staticmethod
    def _key(story_id: str) -> str:
        return f"rendered:{story_id}"

    def get(self, story_id: str, fingerprint: str | None = None) -> RenderedArticle | None:
        with self._lock:
            raw = self.store.get(self._key(story_id))
        if raw is None:
            return None
        entry = CacheEntry.model_validate(raw)
        if not fingerprint_matches(entry.fingerprint, fingerprint):
            logger.debug("Rendered cache miss for %s: fingerprint changed", story_id)
            return None
        return entry.article

    def put(self, story_id: str, fingerprint: str | None, article: RenderedArticle) -> None:
        entry = CacheEntry(fingerprint=fingerprint or None, stored_at=iso_now(), article=article)
        with self._lock:
            self.store.put(self._key(story_id), entry.model_dump(mode="json"))

    def get_or_build(
        self,
        story_id: str,
        fingerprint: str | None,
        builder: Callable[[], RenderedArticle],
    ) -> RenderedArticle:
        """Return the cached article or build, store and return it once per (story id, fingerprint).

        The owner of an in-flight build re-reads the cache first, so a caller that
        missed while an earlier build was finishing reuses its stored article.
        """
        cached = self.get(story_id, fingerprint)
        if cached is not None:
            return cached

        def build_and_store() -> RenderedArticle:
            stored = self.get(story_id, fingerprint)
            if stored is not None:
                return stored
            article = builder()
            self.put(story_id, fingerprint, article)
            logger.info("Rendered article %s", story_id)
            return article

        return self.inflight.run(inflight_key(story_id, fingerprint), build_and_store)


def edition_key(day: str | None, years_forward: int) -> str:
    return f"{day or 'latest'}|{years_forward}"


def article_key(story_id: str, day: str | None, years_forward: int) -> str:
    return f"{story_id}|{day or 'latest'}|{years_forward}"


class TtlCache:
    """
    Client-side mirror with wall-clock expiry.

    An entry is served only while its TTL is running and its fingerprint still
    matches; otherwise it is evicted and the caller refetches.
    """

    def __init__(self, ttl_s: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_s = ttl_s
        self.clock = clock
        self._entries: dict[str, tuple[float, str | None, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, fingerprint: str | None = None) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, stored_fingerprint, value = entry
            if not fingerprint_matches(stored_fingerprint, fingerprint) or self.clock() - stored_at >= self.ttl_s:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any, fingerprint: str | None = None) -> None:
        with self._lock:
            self._entries[key] = (self.clock(), fingerprint, value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def edition_ttl_cache(clock: Callable[[], float] = time.monotonic) -> TtlCache:
    return TtlCache(EDITION_TTL_S, clock)


def article_ttl_cache(clock: Callable[[], float] = time.monotonic) -> TtlCache:
    return TtlCache(ARTICLE_TTL_S, clock)

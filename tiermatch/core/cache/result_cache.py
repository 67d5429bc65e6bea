"""Result Cache - tiered scan results keyed by a job fingerprint.

Entries older than the TTL are treated as absent. Storage problems never
escape this module: a failed read is a miss and a failed write is dropped.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timedelta
from typing import Callable

from ..models.base import utc_now
from ..models.job import Job
from ..models.results import CacheEntry, TieredResultSet
from ..storage.kv_store import KeyValueStore
from ...observability.logger import get_logger

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "match-cache-"
DEFAULT_TTL = timedelta(hours=24)
DESCRIPTION_FINGERPRINT_CHARS = 100


def job_cache_key(job: Job) -> str:
    """Deterministic fingerprint of a job's identity.

    Covers the title, the required skills (order-independent) and the first
    100 characters of the description. Later description edits do not change
    the key.

    Args:
        job: Job to fingerprint

    Returns:
        Opaque store key
    """
    key_data = {
        "title": job.title,
        "skills": sorted(job.required_skills),
        "description": job.description[:DESCRIPTION_FINGERPRINT_CHARS],
    }
    digest = hashlib.sha256(json.dumps(key_data, sort_keys=True).encode()).hexdigest()
    return f"{CACHE_KEY_PREFIX}{digest}"


class ResultCache:
    """TTL-bounded cache of tiered results over a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
        evict_stale: bool = False,
    ):
        self.store = store
        self.ttl = ttl
        self.clock = clock
        self.evict_stale = evict_stale

    def get(self, key: str) -> CacheEntry | None:
        """Return a fresh entry for ``key`` or None."""
        try:
            raw = self.store.get(key)
            if raw is None:
                return None
            entry = CacheEntry.model_validate_json(raw)
        except Exception as exc:
            logger.warning("cache_read_failed", cache_key=key, error=str(exc))
            return None

        if entry.is_stale(self.clock(), self.ttl):
            logger.info(
                "cache_entry_stale",
                cache_key=key,
                created_at=entry.timestamp.isoformat(),
                evicted=self.evict_stale,
            )
            if self.evict_stale:
                self.invalidate(key)
            return None

        return entry

    def put(self, key: str, results: TieredResultSet, ai_analyzed_count: int) -> None:
        """Store ``results`` under ``key``; failures are logged and dropped."""
        entry = CacheEntry(
            results=results,
            timestamp=self.clock(),
            ai_analyzed_count=ai_analyzed_count,
        )
        try:
            self.store.set(key, entry.model_dump_json())
        except Exception as exc:
            logger.warning("cache_write_failed", cache_key=key, error=str(exc))
            return

        logger.info("cache_entry_saved", cache_key=key, ai_analyzed_count=ai_analyzed_count)

    def invalidate(self, key: str) -> None:
        try:
            self.store.remove(key)
        except Exception as exc:
            logger.warning("cache_invalidate_failed", cache_key=key, error=str(exc))

"""Candidate pool source: the packaged demo database and helpers over it."""

from __future__ import annotations

import asyncio
import json
import random
from collections import Counter
from pathlib import Path
from typing import Callable

from ..models.candidate import CandidateProfile
from ..models.results import PoolStats, ScanProgress
from ...observability.logger import get_logger

logger = get_logger(__name__)

DEFAULT_POOL_PATH = Path(__file__).resolve().parents[2] / "data" / "demo_candidates.json"

ProgressCallback = Callable[[ScanProgress], None]


def load_candidate_pool(path: str | Path | None = None) -> list[CandidateProfile]:
    """Load an ordered candidate pool from a JSON list of records.

    Records without an ``id`` get a stable ``demo-<index>`` id so repeated
    loads produce identical candidates.

    Args:
        path: JSON file (defaults to the packaged demo database)

    Returns:
        Candidates in file order
    """
    pool_path = Path(path) if path else DEFAULT_POOL_PATH
    records = json.loads(pool_path.read_text(encoding="utf-8"))

    pool = [
        CandidateProfile(**{"id": f"demo-{index}", **record})
        for index, record in enumerate(records)
    ]
    logger.info("candidate_pool_loaded", path=str(pool_path), total_candidates=len(pool))
    return pool


async def load_demo_candidates(
    pool: list[CandidateProfile],
    on_progress: ProgressCallback | None = None,
    min_delay: float = 0.05,
    random_delay: float = 0.1,
) -> list[CandidateProfile]:
    """Walk the pool with per-record progress and a small pacing delay.

    Args:
        pool: Candidates to load
        on_progress: Optional progress callback
        min_delay: Minimum pause per record in seconds
        random_delay: Extra random pause per record in seconds

    Returns:
        A copy of the pool
    """
    loaded: list[CandidateProfile] = []
    total = len(pool)

    for index, candidate in enumerate(pool):
        if on_progress:
            try:
                on_progress(
                    ScanProgress(current=index + 1, total=total, candidate_name=candidate.name)
                )
            except Exception as exc:
                logger.warning(
                    "progress_callback_failed",
                    current=index + 1,
                    total=total,
                    error=str(exc),
                )
        loaded.append(candidate)
        await asyncio.sleep(min_delay + random.random() * random_delay)

    return loaded


def get_top_skills(pool: list[CandidateProfile], count: int = 5) -> list[str]:
    """Most common skills across the pool, ties in first-seen order."""
    counts = Counter(skill for candidate in pool for skill in candidate.skills)
    return [skill for skill, _ in counts.most_common(count)]


def get_pool_stats(pool: list[CandidateProfile]) -> PoolStats:
    total = len(pool)
    average = sum(c.experience_years for c in pool) / total if total else 0.0
    locations = {c.location for c in pool if c.location}

    return PoolStats(
        total_candidates=total,
        unique_skills_count=len({skill for c in pool for skill in c.skills}),
        average_experience=round(average, 1),
        locations_count=len(locations),
        top_skills=get_top_skills(pool, 5),
    )


def get_sample_candidate(
    pool: list[CandidateProfile],
    rng: random.Random | None = None,
) -> CandidateProfile | None:
    if not pool:
        return None
    return (rng or random).choice(pool)

"""ScanOrchestrator - tiered-budget screening of a candidate pool for one job.

Pipeline per scan:
1. Return a fresh cached result for the job fingerprint, if any
2. Quick-score the whole pool and sort best first (stable)
3. Send the top ``budget`` candidates to the fit oracle, one at a time,
   falling back to the quick score when a call fails
4. Keep quick scores for everyone else
5. Bucket into tiers and write through to the cache
"""

import asyncio
import time
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Awaitable, Callable

from ..agents.fit_analysis import FitAnalysisAgent
from ..cache.result_cache import ResultCache, job_cache_key
from ..models.base import AgentResult
from ..models.candidate import CandidateProfile, ScoredCandidate
from ..models.enums import ScoringMethod
from ..models.job import Job
from ..models.results import FitAnalysis, ScanProgress, TieredResultSet
from ..scoring.quick_scorer import fallback_rationale, quick_match_score, quick_rationale
from ..scoring.tiers import build_tiered_results
from ..storage.kv_store import KeyValueStore
from ...integrations.openai_client import get_openai_client, is_test_mode
from ...observability.logger import get_logger

logger = get_logger(__name__)

FitScorer = Callable[[Job, CandidateProfile], Awaitable[Any]]
ProgressCallback = Callable[[ScanProgress], None]

DEFAULT_BUDGET = 10
DEFAULT_AI_DELAY_SECONDS = 0.5
DEFAULT_UI_DELAY_SECONDS = 0.05


class ScanOrchestrator:
    """Screens a candidate pool against a job within an oracle-call budget."""

    def __init__(
        self,
        scorer: FitScorer,
        cache: ResultCache | None = None,
        ai_delay_seconds: float = DEFAULT_AI_DELAY_SECONDS,
        ui_delay_seconds: float = DEFAULT_UI_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.scorer = scorer
        self.cache = cache
        self.ai_delay_seconds = ai_delay_seconds
        self.ui_delay_seconds = ui_delay_seconds
        self.sleep = sleep
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_refs: dict[str, int] = {}

    async def scan(
        self,
        job: Job,
        pool: list[CandidateProfile],
        budget: int = DEFAULT_BUDGET,
        on_progress: ProgressCallback | None = None,
    ) -> TieredResultSet:
        """Score every candidate in ``pool`` for ``job`` and bucket into tiers.

        Args:
            job: Job to screen for
            pool: Candidate pool (not modified)
            budget: Max candidates sent to the oracle; clamped to [0, len(pool)]
            on_progress: Optional progress callback

        Returns:
            TieredResultSet containing every pool candidate exactly once
        """
        cache_key = job_cache_key(job)

        # Concurrent scans of the same job wait here and then hit the cache
        lock = self._acquire_lock_ref(cache_key)
        try:
            async with lock:
                return await self._scan_locked(job, pool, budget, on_progress, cache_key)
        finally:
            self._release_lock_ref(cache_key)

    async def _scan_locked(
        self,
        job: Job,
        pool: list[CandidateProfile],
        budget: int,
        on_progress: ProgressCallback | None,
        cache_key: str,
    ) -> TieredResultSet:
        if self.cache is not None:
            entry = self.cache.get(cache_key)
            if entry is not None:
                logger.info(
                    "scan_cache_hit",
                    job_id=job.id,
                    cache_key=cache_key,
                    calls_saved=entry.ai_analyzed_count,
                )
                return entry.results

        results, ai_count = await self._run_scan(job, pool, budget, on_progress)

        # Only reached when the scan ran to completion
        if self.cache is not None:
            self.cache.put(cache_key, results, ai_count)
        return results

    def _acquire_lock_ref(self, cache_key: str) -> asyncio.Lock:
        lock = self._locks.get(cache_key)
        if lock is None:
            lock = self._locks[cache_key] = asyncio.Lock()
        self._lock_refs[cache_key] = self._lock_refs.get(cache_key, 0) + 1
        return lock

    def _release_lock_ref(self, cache_key: str) -> None:
        # Drop the lock once no scan of this job holds or waits on it
        self._lock_refs[cache_key] -= 1
        if not self._lock_refs[cache_key]:
            del self._lock_refs[cache_key]
            del self._locks[cache_key]

    async def _run_scan(
        self,
        job: Job,
        pool: list[CandidateProfile],
        budget: int,
        on_progress: ProgressCallback | None,
    ) -> tuple[TieredResultSet, int]:
        start_time = time.time()
        total = len(pool)
        budget = max(0, min(budget, total))

        logger.info("scan_started", job_id=job.id, pool_size=total, budget=budget)

        # sorted() is stable, so ties keep pool order
        prescreened = sorted(
            ((candidate, quick_match_score(job, candidate)) for candidate in pool),
            key=lambda pair: pair[1],
            reverse=True,
        )

        if prescreened:
            top_candidate, top_score = prescreened[0]
            logger.info(
                "prescreen_completed",
                job_id=job.id,
                top_candidate=top_candidate.name,
                top_quick_score=top_score,
            )

        scored: list[ScoredCandidate] = []
        ai_count = 0

        for index, (candidate, quick_score) in enumerate(prescreened):
            use_oracle = index < budget
            self._emit(
                on_progress,
                ScanProgress(
                    current=index + 1,
                    total=total,
                    candidate_name=candidate.name,
                    is_ai_analysis=use_oracle,
                ),
            )

            if use_oracle:
                outcome = await self._analyze(job, candidate)
                if outcome.success and outcome.data is not None:
                    ai_count += 1
                    scored.append(
                        ScoredCandidate(
                            candidate=candidate,
                            match_score=outcome.data.score,
                            match_rationale=outcome.data.rationale,
                            method=ScoringMethod.AI,
                        )
                    )
                    self._emit(
                        on_progress,
                        ScanProgress(
                            current=index + 1,
                            total=total,
                            candidate_name=candidate.name,
                            current_score=outcome.data.score,
                            is_ai_analysis=True,
                        ),
                    )
                    await self.sleep(self.ai_delay_seconds)
                else:
                    scored.append(
                        ScoredCandidate(
                            candidate=candidate,
                            match_score=quick_score,
                            match_rationale=fallback_rationale(job, candidate),
                            method=ScoringMethod.HEURISTIC,
                        )
                    )
            else:
                scored.append(
                    ScoredCandidate(
                        candidate=candidate,
                        match_score=quick_score,
                        match_rationale=quick_rationale(job, candidate),
                        method=ScoringMethod.HEURISTIC,
                    )
                )
                self._emit(
                    on_progress,
                    ScanProgress(
                        current=index + 1,
                        total=total,
                        candidate_name=candidate.name,
                        current_score=quick_score,
                        is_ai_analysis=False,
                    ),
                )
                await self.sleep(self.ui_delay_seconds)

        results = build_tiered_results(scored)

        logger.info(
            "scan_completed",
            job_id=job.id,
            ai_analyzed=ai_count,
            calls_saved=total - ai_count,
            tiers=results.counts(),
            duration_seconds=round(time.time() - start_time, 3),
        )
        return results, ai_count

    async def _analyze(self, job: Job, candidate: CandidateProfile) -> AgentResult[FitAnalysis]:
        """Call the oracle once, folding any failure into the result."""
        start_time = time.time()
        try:
            reply = await self.scorer(job, candidate)
            analysis = reply if isinstance(reply, FitAnalysis) else self._coerce_reply(reply)
        except Exception as exc:
            logger.warning(
                "oracle_analysis_failed",
                job_id=job.id,
                candidate_id=candidate.id,
                candidate_name=candidate.name,
                error=str(exc),
            )
            return AgentResult(success=False, data=None, error=str(exc))

        return AgentResult(
            success=True,
            data=analysis,
            duration_ms=int((time.time() - start_time) * 1000),
        )

    @staticmethod
    def _coerce_reply(reply: Any) -> FitAnalysis:
        if isinstance(reply, Mapping):
            return FitAnalysis.model_validate(dict(reply))
        return FitAnalysis.model_validate(reply, from_attributes=True)

    @staticmethod
    def _emit(on_progress: ProgressCallback | None, progress: ScanProgress) -> None:
        if on_progress is None:
            return
        try:
            on_progress(progress)
        except Exception as exc:
            logger.warning(
                "progress_callback_failed",
                current=progress.current,
                total=progress.total,
                error=str(exc),
            )


def build_scan_orchestrator(
    config: dict[str, Any],
    store: KeyValueStore,
    scorer: FitScorer | None = None,
) -> ScanOrchestrator:
    """Wire an orchestrator from configuration.

    Args:
        config: Loaded configuration
        store: Key-value store for the result cache
        scorer: Oracle override (defaults to the OpenAI fit-analysis agent)

    Returns:
        Configured ScanOrchestrator
    """
    scan_cfg = config.get("scan", {})
    cache_cfg = config.get("cache", {})

    if scorer is None:
        client = None if is_test_mode() else get_openai_client(config)
        scorer = FitAnalysisAgent(client=client, model=config.get("openai", {}).get("model")).analyze

    cache = None
    if cache_cfg.get("enabled", True):
        cache = ResultCache(
            store,
            ttl=timedelta(hours=cache_cfg.get("ttl_hours", 24)),
            evict_stale=cache_cfg.get("evict_stale", False),
        )

    return ScanOrchestrator(
        scorer=scorer,
        cache=cache,
        ai_delay_seconds=scan_cfg.get("ai_rate_limit_delay_ms", 500) / 1000,
        ui_delay_seconds=scan_cfg.get("ui_smoothness_delay_ms", 50) / 1000,
    )

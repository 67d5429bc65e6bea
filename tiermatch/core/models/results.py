"""Scan result, cache and progress models (Pydantic only)."""

from datetime import datetime, timedelta
from typing import Iterator

from pydantic import AwareDatetime, Field

from .base import FrozenModel, TierMatchBaseModel, utc_now
from .candidate import ScoredCandidate
from .enums import MatchTier


# =============================================================================
# Pydantic Schemas
# =============================================================================


class TieredResultSet(FrozenModel):
    """Scored candidates bucketed into the five tiers, each sorted best first."""

    excellent: list[ScoredCandidate] = Field(default_factory=list, description="Score >= 80")
    good: list[ScoredCandidate] = Field(default_factory=list, description="65 <= score < 80")
    moderate: list[ScoredCandidate] = Field(default_factory=list, description="50 <= score < 65")
    low: list[ScoredCandidate] = Field(default_factory=list, description="30 <= score < 50")
    poor: list[ScoredCandidate] = Field(default_factory=list, description="Score < 30")

    def tier(self, name: MatchTier | str) -> list[ScoredCandidate]:
        """Return the candidates in one tier.

        Raises:
            ValueError: If ``name`` is not a tier name
        """
        return getattr(self, MatchTier(name).value)

    def iter_candidates(self) -> Iterator[ScoredCandidate]:
        """Yield every scored candidate, best tier first."""
        for tier in MatchTier:
            yield from self.tier(tier)

    def counts(self) -> dict[str, int]:
        return {tier.value: len(self.tier(tier)) for tier in MatchTier}

    @property
    def total(self) -> int:
        return sum(self.counts().values())


class CacheEntry(TierMatchBaseModel):
    """Persisted scan result for one job fingerprint."""

    results: TieredResultSet = Field(..., description="Cached tiered results")
    timestamp: AwareDatetime = Field(default_factory=utc_now, description="Creation time (UTC)")
    ai_analyzed_count: int = Field(0, ge=0, description="Successful oracle calls in the scan")

    def is_stale(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.timestamp >= ttl


class ScanProgress(TierMatchBaseModel):
    """One progress step emitted during a scan or pool load."""

    current: int = Field(..., ge=1, description="1-based position in the run")
    total: int = Field(..., ge=0, description="Number of steps in the run")
    candidate_name: str = Field(..., description="Candidate being processed")
    current_score: float | None = Field(None, description="Score once known")
    is_ai_analysis: bool | None = Field(None, description="True on the oracle path")


class FitAnalysis(TierMatchBaseModel):
    """Reply from the fit-scoring oracle."""

    score: float = Field(..., allow_inf_nan=False, description="Fit score from 0 to 100")
    rationale: str = Field(..., description="Explanation of the score")
    confidence: float = Field(0.7, ge=0.0, le=1.0, description="Confidence level")
    reasons: list[str] = Field(default_factory=list, description="Key reasons for the score")


class PoolStats(TierMatchBaseModel):
    """Summary statistics for a candidate pool."""

    total_candidates: int = Field(..., ge=0)
    unique_skills_count: int = Field(..., ge=0)
    average_experience: float = Field(..., ge=0)
    locations_count: int = Field(..., ge=0)
    top_skills: list[str] = Field(default_factory=list)

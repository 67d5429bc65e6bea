"""tiermatch data models for jobs, candidates, scans and caching."""

from .base import (
    AgentResult,
    FrozenModel,
    TierMatchBaseModel,
    generate_id,
    utc_now,
)
from .candidate import CandidateProfile, ScoredCandidate
from .enums import MatchTier, ScoringMethod
from .job import Job
from .results import (
    CacheEntry,
    FitAnalysis,
    PoolStats,
    ScanProgress,
    TieredResultSet,
)

__all__ = [
    # Base
    "TierMatchBaseModel",
    "FrozenModel",
    "AgentResult",
    "generate_id",
    "utc_now",
    # Enums
    "MatchTier",
    "ScoringMethod",
    # Job / candidates
    "Job",
    "CandidateProfile",
    "ScoredCandidate",
    # Results
    "TieredResultSet",
    "CacheEntry",
    "ScanProgress",
    "FitAnalysis",
    "PoolStats",
]

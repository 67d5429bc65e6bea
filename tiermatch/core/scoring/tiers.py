"""Tier Classifier - buckets scored candidates into the fixed match tiers."""

from typing import Iterable

from ..models.candidate import ScoredCandidate
from ..models.enums import MatchTier
from ..models.results import TieredResultSet

# Lower bounds (inclusive), scanned best first; anything below the last is poor
TIER_THRESHOLDS: tuple[tuple[float, MatchTier], ...] = (
    (80, MatchTier.EXCELLENT),
    (65, MatchTier.GOOD),
    (50, MatchTier.MODERATE),
    (30, MatchTier.LOW),
)


def classify_score(score: float) -> MatchTier:
    """Map a score to its tier.

    Out-of-range scores are clamped to [0, 100] for bucketing only.
    """
    bucket_score = max(0.0, min(100.0, score))
    for lower_bound, tier in TIER_THRESHOLDS:
        if bucket_score >= lower_bound:
            return tier
    return MatchTier.POOR


def build_tiered_results(scored: Iterable[ScoredCandidate]) -> TieredResultSet:
    """Partition scored candidates into tiers, each sorted by score descending.

    Sorting is stable, so equal scores keep their incoming order.
    """
    buckets: dict[MatchTier, list[ScoredCandidate]] = {tier: [] for tier in MatchTier}
    for item in scored:
        buckets[classify_score(item.match_score)].append(item)

    return TieredResultSet(
        **{
            tier.value: sorted(items, key=lambda sc: sc.match_score, reverse=True)
            for tier, items in buckets.items()
        }
    )

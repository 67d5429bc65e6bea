"""Import Selector - materializes candidates from chosen tiers of a scan."""

from typing import Iterable

from ..models.candidate import CandidateProfile
from ..models.enums import MatchTier
from ..models.job import Job
from ..models.results import TieredResultSet

# Tiers offered for import by convention. ``poor`` is still accepted when a
# caller asks for it explicitly; filtering is the caller's responsibility.
SELECTABLE_TIERS: tuple[MatchTier, ...] = (
    MatchTier.EXCELLENT,
    MatchTier.GOOD,
    MatchTier.MODERATE,
    MatchTier.LOW,
)


def materialize(
    results: TieredResultSet,
    job: Job,
    tiers: Iterable[MatchTier | str],
) -> list[CandidateProfile]:
    """Concatenate the chosen tiers, attaching this job's score and rationale.

    Tiers are emitted in the order given with no re-sorting across them. Scores
    the candidate already carries for other jobs are kept.

    Args:
        results: Tiered scan results
        job: Job the results belong to
        tiers: Tier names in output order

    Returns:
        New candidate records with per-job attribution

    Raises:
        ValueError: If a tier name is unknown
    """
    candidates: list[CandidateProfile] = []
    for tier in tiers:
        for match in results.tier(tier):
            source = match.candidate
            candidates.append(
                source.model_copy(
                    update={
                        "match_scores": {**source.match_scores, job.id: match.match_score},
                        "match_rationales": {
                            **source.match_rationales,
                            job.id: match.match_rationale,
                        },
                    }
                )
            )
    return candidates


def parse_tiers(value: str) -> list[MatchTier]:
    """Parse a comma-separated tier list such as ``"excellent,good"``.

    Raises:
        ValueError: If any name is not a tier
    """
    names = [part.strip().lower() for part in value.split(",") if part.strip()]
    return [MatchTier(name) for name in names]

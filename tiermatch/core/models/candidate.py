"""Candidate models: source profiles and their scored form (Pydantic only)."""

from pydantic import Field

from .base import FrozenModel, generate_id
from .enums import ScoringMethod


# =============================================================================
# Pydantic Schemas
# =============================================================================


class CandidateProfile(FrozenModel):
    """Read-only candidate record from the pool."""

    id: str = Field(default_factory=lambda: generate_id("cand_"), description="Candidate identifier")
    name: str = Field(..., description="Full name")
    email: str = Field("", description="Email address")
    skills: list[str] = Field(default_factory=list, description="Listed skills")
    experience_years: float = Field(0, ge=0, description="Years of experience")
    summary: str = Field("", description="Free-text profile summary")
    file_name: str = Field("", description="Source file the record came from")
    location: str | None = Field(None, description="Location text")

    # Per-job attribution, written by the import selector
    match_scores: dict[str, float] = Field(
        default_factory=dict, description="Match score per job id"
    )
    match_rationales: dict[str, str] = Field(
        default_factory=dict, description="Match rationale per job id"
    )


class ScoredCandidate(FrozenModel):
    """A candidate with the final score and rationale from one scan.

    The score is deliberately not range-validated; classification clamps it
    for bucketing only.
    """

    candidate: CandidateProfile = Field(..., description="Source candidate")
    match_score: float = Field(..., allow_inf_nan=False, description="Final match score, nominally 0-100")
    match_rationale: str = Field("", description="Human-readable explanation")
    method: ScoringMethod = Field(ScoringMethod.HEURISTIC, description="Scoring method used")

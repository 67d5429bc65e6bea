"""Fit Analysis Agent - the expensive candidate/job scoring oracle."""

import math
import time

from ..models.candidate import CandidateProfile
from ..models.job import Job
from ..models.results import FitAnalysis
from ..scoring.quick_scorer import matched_skills
from ...integrations.openai_client import OpenAIClient, is_test_mode
from ...observability.logger import get_logger

SUMMARY_PROMPT_CHARS = 800
DESCRIPTION_PROMPT_CHARS = 1200


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def heuristic_fit(job: Job, candidate: CandidateProfile) -> FitAnalysis:
    """Deterministic offline fit: skill coverage plus a small experience boost."""
    matches = matched_skills(job, candidate)
    required = job.normalized_skills
    skill_part = 70 * len(matches) / len(required) if required else 0.0
    experience_part = _clamp(candidate.experience_years * 2, 0, 10)
    score = _clamp(math.floor(skill_part + experience_part + 0.5))

    reasons = [f"Matched skills: {', '.join(matches[:6])}"] if matches else []
    rationale = (
        ". ".join(reasons) + "."
        if reasons
        else "Heuristic match based on available skills and metadata."
    )
    return FitAnalysis(score=score, rationale=rationale, confidence=0.45, reasons=reasons)


class FitAnalysisAgent:
    """Scores one candidate against one job with an LLM.

    Transport errors are retried inside the client; anything still failing
    propagates so the caller can fall back.
    """

    def __init__(self, client: OpenAIClient | None = None, model: str | None = None):
        self.client = client
        self.model = model
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    async def analyze(self, job: Job, candidate: CandidateProfile) -> FitAnalysis:
        """Return a fit score in [0, 100] with rationale."""
        if is_test_mode() or self.client is None:
            return heuristic_fit(job, candidate)

        start_time = time.time()
        output, metadata = await self.client.create_response(
            input_text=self._build_prompt(job, candidate),
            response_model=FitAnalysis,
            model=self.model,
            metadata={"job_id": job.id, "candidate_id": candidate.id},
        )

        score = _clamp(math.floor(output.score + 0.5))
        rationale = output.rationale.strip() or heuristic_fit(job, candidate).rationale

        self.logger.info(
            "fit_analysis_complete",
            job_id=job.id,
            candidate_id=candidate.id,
            score=score,
            tokens_total=metadata.get("tokens_total", 0),
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return output.model_copy(update={"score": score, "rationale": rationale})

    __call__ = analyze

    def _build_prompt(self, job: Job, candidate: CandidateProfile) -> str:
        """Build fit-scoring prompt."""
        return f"""You are an expert recruiter. Score candidate fit for the job on a 0-100 scale based ONLY on factual skill overlap, experience, and role alignment.

**JOB:**
- Title: {job.title}
- Required skills: {', '.join(job.required_skills) or 'None listed'}
- Description: {job.description[:DESCRIPTION_PROMPT_CHARS]}

**CANDIDATE:**
- Name: {candidate.name}
- Experience (years): {candidate.experience_years:g}
- Skills: {', '.join(candidate.skills) or 'None listed'}
- Summary: {candidate.summary[:SUMMARY_PROMPT_CHARS]}

Return:
- **score** (0-100): overall fit
- **rationale**: 1-3 sentences explaining the score
- **confidence** (0.0-1.0): how confident you are
- **reasons**: up to 5 short supporting points"""

"""Quick Scorer - cheap heuristic match score used to pre-screen the pool.

The score has two parts:
- skill overlap, worth up to 70 points
- job keywords found in the candidate summary, 3 points each, capped at 30

No I/O and no failure mode: malformed input degrades to zero contributions.
"""

import math

from ..models.candidate import CandidateProfile
from ..models.job import Job

SKILL_WEIGHT = 70
KEYWORD_POINTS = 3
KEYWORD_CAP = 30
DESCRIPTION_KEYWORD_LIMIT = 10
DESCRIPTION_KEYWORD_MIN_LENGTH = 5
RATIONALE_SKILL_LIMIT = 3


def matched_skills(job: Job, candidate: CandidateProfile) -> list[str]:
    """Candidate skills (original spelling) that the job requires.

    Matching is exact after lowercasing; repeated skills are reported once.
    """
    required = job.normalized_skills
    seen: set[str] = set()
    matches: list[str] = []
    for skill in candidate.skills:
        key = skill.lower()
        if key in required and key not in seen:
            seen.add(key)
            matches.append(skill)
    return matches


def job_keywords(job: Job) -> list[str]:
    """Lowercase keywords: title, required skills, then early long description words."""
    description_words = [
        word
        for word in job.description.lower().split()
        if len(word) >= DESCRIPTION_KEYWORD_MIN_LENGTH
    ][:DESCRIPTION_KEYWORD_LIMIT]

    keywords = [job.title.lower(), *(s.lower() for s in job.required_skills), *description_words]
    # dict.fromkeys keeps first-seen order
    return [kw for kw in dict.fromkeys(keywords) if kw]


def skill_score(job: Job, candidate: CandidateProfile) -> float:
    if not job.required_skills:
        return 0.0
    return SKILL_WEIGHT * len(matched_skills(job, candidate)) / len(job.normalized_skills)


def keyword_score(job: Job, candidate: CandidateProfile) -> int:
    summary = (candidate.summary or "").lower()
    if not summary:
        return 0
    hits = sum(1 for keyword in job_keywords(job) if keyword in summary)
    return min(KEYWORD_CAP, hits * KEYWORD_POINTS)


def quick_match_score(job: Job, candidate: CandidateProfile) -> int:
    """Heuristic match score in [0, 100], rounded half up.

    Args:
        job: Job to score against
        candidate: Candidate profile

    Returns:
        Integer score
    """
    raw = skill_score(job, candidate) + keyword_score(job, candidate)
    return max(0, min(100, math.floor(raw + 0.5)))


def _format_years(years: float) -> str:
    return f"{years:g}"


def quick_rationale(job: Job, candidate: CandidateProfile) -> str:
    """Rationale for candidates scored on the heuristic path."""
    matches = matched_skills(job, candidate)
    years = _format_years(candidate.experience_years)
    if not matches:
        return f"General profile match. {years} years experience in related field."

    shown = ", ".join(matches[:RATIONALE_SKILL_LIMIT])
    more = "..." if len(matches) > RATIONALE_SKILL_LIMIT else ""
    return f"Quick match based on skills: {shown}{more}. {years} years experience."


def fallback_rationale(job: Job, candidate: CandidateProfile) -> str:
    """Rationale used when the oracle call for a candidate failed."""
    matches = ", ".join(matched_skills(job, candidate)) or "None"
    return f"Skills match: {matches}. {_format_years(candidate.experience_years)} years experience."

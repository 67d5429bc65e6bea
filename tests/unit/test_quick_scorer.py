"""Quick scorer: heuristic skill and keyword scoring."""

from tiermatch.core.models.candidate import CandidateProfile
from tiermatch.core.models.job import Job
from tiermatch.core.scoring.quick_scorer import (
    fallback_rationale,
    job_keywords,
    quick_match_score,
    quick_rationale,
    skill_score,
)


def test_data_engineer_scenario(data_job):
    candidate = CandidateProfile(
        name="Candidate A",
        skills=["python", "sql", "aws"],
        experience_years=6,
        summary="Python and SQL developer building data pipelines for analytics teams.",
    )

    # 70 for skills + 5 keyword hits: python, sql, build, pipelines, analytics
    assert quick_match_score(data_job, candidate) == 85
    assert quick_match_score(data_job, candidate) > 65


def test_keywords_are_title_skills_then_long_description_words(data_job):
    assert job_keywords(data_job) == [
        "data engineer",
        "python",
        "sql",
        "build",
        "pipelines",
        "analytics",
        "reporting",
    ]


def test_description_keywords_limited_to_first_ten():
    job = Job(
        title="T",
        description=" ".join(f"word{i:02d}x" for i in range(15)),
        required_skills=[],
    )
    keywords = job_keywords(job)
    assert keywords[1:] == [f"word{i:02d}x" for i in range(10)]


def test_no_required_skills_gives_zero_skill_score():
    job = Job(title="Analyst", description="", required_skills=[])
    candidate = CandidateProfile(name="X", skills=["Python"], summary="")
    assert skill_score(job, candidate) == 0
    assert quick_match_score(job, candidate) == 0


def test_empty_summary_gives_no_keyword_credit(data_job):
    candidate = CandidateProfile(name="X", skills=["Python"], summary="")
    assert quick_match_score(data_job, candidate) == 35


def test_skill_matching_is_exact_and_case_insensitive(data_job):
    candidate = CandidateProfile(name="X", skills=["PYTHON", "PostgreSQL", "Python3"])
    # Only PYTHON matches; no partial credit for PostgreSQL or Python3
    assert quick_match_score(data_job, candidate) == 35


def test_repeated_candidate_skills_count_once():
    job = Job(title="Dev", required_skills=["Python"])
    candidate = CandidateProfile(name="X", skills=["Python", "python", "PYTHON"])
    assert quick_match_score(job, candidate) == 70


def test_keyword_contribution_capped_at_thirty():
    skills = [f"tool{i}" for i in range(12)]
    job = Job(title="Toolsmith", required_skills=skills)
    candidate = CandidateProfile(name="X", skills=[], summary=" ".join(skills))
    assert quick_match_score(job, candidate) == 30


def test_rounds_half_up():
    job = Job(title="Dev", required_skills=["a", "b", "c", "d"])
    candidate = CandidateProfile(name="X", skills=["a", "b", "c"])
    # 70 * 3 / 4 = 52.5
    assert quick_match_score(job, candidate) == 53


def test_score_is_bounded_integer_and_deterministic(data_job):
    candidate = CandidateProfile(
        name="X",
        skills=["Python", "SQL"],
        summary="data engineer python sql build pipelines analytics reporting " * 3,
    )
    first = quick_match_score(data_job, candidate)
    assert first == quick_match_score(data_job, candidate)
    assert isinstance(first, int)
    assert 0 <= first <= 100


def test_quick_rationale_lists_first_three_matches():
    job = Job(title="Dev", required_skills=["a", "b", "c", "d"])
    candidate = CandidateProfile(name="X", skills=["a", "b", "c", "d"], experience_years=4)
    assert quick_rationale(job, candidate) == (
        "Quick match based on skills: a, b, c.... 4 years experience."
    )


def test_quick_rationale_without_matches(data_job):
    candidate = CandidateProfile(name="X", skills=["Go"], experience_years=2.5)
    assert quick_rationale(data_job, candidate) == (
        "General profile match. 2.5 years experience in related field."
    )


def test_fallback_rationale(data_job):
    matched = CandidateProfile(name="X", skills=["sql", "Python"], experience_years=3)
    unmatched = CandidateProfile(name="Y", skills=["Go"], experience_years=1)
    assert fallback_rationale(data_job, matched) == "Skills match: sql, Python. 3 years experience."
    assert fallback_rationale(data_job, unmatched) == "Skills match: None. 1 years experience."

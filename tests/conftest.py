"""Shared fixtures: jobs, candidate pools and fake fit oracles."""

from datetime import datetime, timedelta, timezone

import pytest

from tiermatch.core.models.candidate import CandidateProfile
from tiermatch.core.models.job import Job
from tiermatch.core.models.results import FitAnalysis


class RecordingScorer:
    """Fake oracle that records calls and can fail for chosen candidates."""

    def __init__(self, score: float = 90, fail_for: set[str] | None = None):
        self.score = score
        self.fail_for = fail_for or set()
        self.calls: list[str] = []

    async def __call__(self, job: Job, candidate: CandidateProfile) -> FitAnalysis:
        self.calls.append(candidate.name)
        if candidate.name in self.fail_for:
            raise RuntimeError(f"oracle unavailable for {candidate.name}")
        return FitAnalysis(score=self.score, rationale=f"AI says {candidate.name} fits")


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


async def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def data_job() -> Job:
    return Job(
        id="job-data-eng",
        title="Data Engineer",
        description="Build data pipelines for analytics and reporting",
        required_skills=["Python", "SQL"],
    )


@pytest.fixture
def ladder_job() -> Job:
    """Job whose 20 required skills give each ladder candidate a distinct score."""
    return Job(
        id="job-ladder",
        title="Ladder Role",
        description="",
        required_skills=[f"skill{i}" for i in range(20)],
    )


@pytest.fixture
def ladder_pool() -> list[CandidateProfile]:
    """Candidate i holds skills 0..i, so later candidates score higher."""
    return [
        CandidateProfile(
            id=f"cand-{i}",
            name=f"Candidate {i}",
            skills=[f"skill{j}" for j in range(i + 1)],
            experience_years=i % 7,
        )
        for i in range(20)
    ]


@pytest.fixture
def scorer() -> RecordingScorer:
    return RecordingScorer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_scorer():
    return RecordingScorer


@pytest.fixture
def sleep_stub():
    return no_sleep

"""Job model screened against the candidate pool."""

from pydantic import Field

from .base import FrozenModel, generate_id


class Job(FrozenModel):
    """A job opening and the skills it requires.

    Required skills keep their original spelling; matching against candidates
    is case-insensitive.
    """

    id: str = Field(default_factory=lambda: generate_id("job_"), description="Job identifier")
    title: str = Field(..., min_length=1, description="Job title")
    description: str = Field("", description="Free-text job description")
    required_skills: list[str] = Field(
        default_factory=list, description="Ordered required skill names"
    )

    @property
    def normalized_skills(self) -> set[str]:
        """Required skills lowercased for matching."""
        return {skill.lower() for skill in self.required_skills}

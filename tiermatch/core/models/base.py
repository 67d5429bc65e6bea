"""Base Pydantic schemas and helpers for tiermatch models."""

import uuid
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar('T')


# =============================================================================
# Pydantic Base Classes
# =============================================================================


class TierMatchBaseModel(BaseModel):
    """Base Pydantic model for all schemas with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        # Use enum values instead of enum members
        use_enum_values=True,
        str_strip_whitespace=True,
    )


class FrozenModel(TierMatchBaseModel):
    """Base for records that must not change once created."""

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Common Response Models
# =============================================================================


class AgentResult(TierMatchBaseModel, Generic[T]):
    """Standardized result wrapper for a single collaborator call.

    Success and failure share one shape so callers can merge outcomes back
    into an aggregate without branching on exceptions.
    """

    success: bool = Field(..., description="Whether execution succeeded")
    data: T | None = Field(None, description="Result data")
    error: str | None = Field(None, description="Error message if failed")
    duration_ms: int = Field(0, ge=0, description="Execution duration in milliseconds")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


# =============================================================================
# Utility Functions
# =============================================================================


def generate_id(prefix: str = "") -> str:
    """Generate a prefixed UUID.

    Args:
        prefix: Optional prefix for the ID (e.g., "job_", "cand_")

    Returns:
        Prefixed UUID string
    """
    uid = str(uuid.uuid4())
    return f"{prefix}{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)

"""Enumeration types for tiermatch models."""

from enum import Enum


class MatchTier(str, Enum):
    """Fixed match-quality bands, best first."""

    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    LOW = "low"
    POOR = "poor"


class ScoringMethod(str, Enum):
    """How a candidate's final score was produced."""

    AI = "ai"
    HEURISTIC = "heuristic"

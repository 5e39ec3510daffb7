"""
Data Contracts for the Matching Engine

Defines the Profile (input), the oracle's scoring reply, the per-opportunity
MatchResult and the AnnotatedOpportunity handed to the presentation layer,
plus the request/response bodies of the matching endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, StrictStr, field_validator

from models.models import CamelModel, Opportunity
from .constants import (
    ALL_TYPES,
    DEFAULT_MATCH_PERCENTAGE,
    DEFAULT_SORT,
    MAX_MATCH_PERCENTAGE,
    MIN_MATCH_PERCENTAGE,
    SortKey,
)


def _dedupe(values: List[str]) -> List[str]:
    """Drop blanks and case-insensitive repeats, keeping the first spelling."""
    seen = set()
    result = []
    for value in values:
        cleaned = value.strip()
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class Profile(CamelModel):
    """
    A user's career-relevant attributes.

    Every field is always present: collections default to empty and
    education to "". Immutable once built.
    """
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    education: str = ""

    class Config:
        frozen = True

    @field_validator("skills", "interests", "goals", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value

    @field_validator("skills", "interests", "goals")
    @classmethod
    def _as_set(cls, value: List[str]) -> List[str]:
        return _dedupe(value)

    @field_validator("education", mode="before")
    @classmethod
    def _education_default(cls, value):
        return "" if value is None else value

    @field_validator("education")
    @classmethod
    def _education_strip(cls, value: str) -> str:
        return value.strip()


class ProfileIn(CamelModel):
    """Profile as sent by a client; any field may be missing."""
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    goals: Optional[List[str]] = None
    education: Optional[str] = None


# =============================================================================
# ORACLE CONTRACTS
# =============================================================================

class OracleMatch(CamelModel):
    opportunity_id: int = Field(strict=True)
    match_percentage: int = Field(strict=True, ge=MIN_MATCH_PERCENTAGE, le=MAX_MATCH_PERCENTAGE)
    reasons: List[StrictStr] = Field(default_factory=list)


class OracleMatchResponse(CamelModel):
    """The oracle's scoring reply: ``{"matches": [...]}``."""
    matches: List[OracleMatch]


class CVAnalysis(CamelModel):
    skills: List[StrictStr] = Field(default_factory=list)
    experience_level: StrictStr = ""
    interests: List[StrictStr] = Field(default_factory=list)
    recommended_types: List[StrictStr] = Field(default_factory=list)

    @field_validator("skills", "interests", "recommended_types", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value

    @field_validator("experience_level", mode="before")
    @classmethod
    def _level_default(cls, value):
        return "" if value is None else value


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class MatchResult(CamelModel):
    """Resolved score for one (profile, opportunity) pair."""
    opportunity_id: int
    match_percentage: int = Field(
        default=DEFAULT_MATCH_PERCENTAGE, ge=MIN_MATCH_PERCENTAGE, le=MAX_MATCH_PERCENTAGE
    )
    reasons: List[str] = Field(default_factory=list)

    @classmethod
    def unscored(cls, opportunity_id: int) -> "MatchResult":
        return cls(opportunity_id=opportunity_id)


class AnnotatedOpportunity(Opportunity):
    """An Opportunity merged with its MatchResult."""
    match_percentage: int = Field(ge=MIN_MATCH_PERCENTAGE, le=MAX_MATCH_PERCENTAGE)
    match_reasons: List[str] = Field(default_factory=list)

    @classmethod
    def build(cls, opportunity: Opportunity, result: MatchResult) -> "AnnotatedOpportunity":
        return cls(
            **opportunity.model_dump(),
            match_percentage=result.match_percentage,
            match_reasons=list(result.reasons),
        )


# =============================================================================
# HTTP BODIES
# =============================================================================

class AnalyzeCVRequest(CamelModel):
    cv_text: Optional[str] = None


class AnalyzeCVResponse(CamelModel):
    analysis: CVAnalysis
    profile: Profile
    message: str = "CV analyzed successfully"


class MatchFilters(CamelModel):
    query: str = ""
    type: str = ALL_TYPES
    sort_by: SortKey = DEFAULT_SORT


class GetMatchesRequest(CamelModel):
    user_id: Optional[int] = None
    user_profile: Optional[ProfileIn] = None
    filters: Optional[MatchFilters] = None


class GetMatchesResponse(CamelModel):
    opportunities: List[AnnotatedOpportunity]
    total_matches: int
    high_matches: int


class ChatRequest(CamelModel):
    message: Optional[str] = None
    context: Optional[Any] = None


class ChatResponse(CamelModel):
    response: str
    timestamp: str


class QuestionnaireRequest(CamelModel):
    answers: Dict[int, Any] = Field(default_factory=dict)


class ProfileResponse(CamelModel):
    profile: Profile

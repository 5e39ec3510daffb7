"""
Profile Builder

Turns a CV analysis, questionnaire answers, a stored user record or a raw
client payload into a Profile. Every path fills all four fields; goals are
normalized onto the catalog's opportunity types.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError as SchemaValidationError

from errors import ValidationError
from models.models import OPPORTUNITY_TYPES
from models.models_user import User
from .constants import (
    QUESTION_EDUCATION,
    QUESTION_GOALS,
    QUESTION_INTERESTS,
    QUESTIONNAIRE,
    TYPE_SYNONYMS,
)
from .contracts import CVAnalysis, Profile, ProfileIn

logger = logging.getLogger(__name__)


def normalize_opportunity_type(label: str) -> Optional[str]:
    """Map a loose label ("Study Abroad", "Internships") to a catalog type."""
    key = " ".join(label.strip().lower().replace("_", " ").split())
    if key in OPPORTUNITY_TYPES:
        return key
    if key in TYPE_SYNONYMS:
        return TYPE_SYNONYMS[key]
    return TYPE_SYNONYMS.get(key.replace("-", " "))


def normalize_goals(goals: Iterable[str]) -> List[str]:
    normalized = []
    for goal in goals:
        mapped = normalize_opportunity_type(goal)
        if mapped is None:
            logger.debug(f"Dropping goal with no matching opportunity type: {goal!r}")
            continue
        if mapped not in normalized:
            normalized.append(mapped)
    return normalized


def profile_from_analysis(analysis: CVAnalysis) -> Profile:
    return Profile(
        skills=analysis.skills,
        interests=analysis.interests,
        goals=normalize_goals(analysis.recommended_types),
        education=analysis.experience_level,
    )


def profile_from_user(user: User) -> Profile:
    return Profile(
        skills=user.skills,
        interests=user.interests,
        goals=normalize_goals(user.goals),
        education=user.education or "",
    )


def profile_from_payload(payload: Any) -> Profile:
    """Build a Profile from a client-sent dict or ProfileIn; missing fields become empty."""
    if payload is None:
        raise ValidationError("Profile is required")
    try:
        data = payload if isinstance(payload, ProfileIn) else ProfileIn.model_validate(payload)
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid profile: {e.errors()[0].get('msg')}")
    return Profile(
        skills=data.skills or [],
        interests=data.interests or [],
        goals=normalize_goals(data.goals or []),
        education=data.education or "",
    )


def _answer_list(question_id: int, answer: Any) -> List[str]:
    if answer is None:
        return []
    if isinstance(answer, str):
        return [answer]
    if isinstance(answer, list) and all(isinstance(a, str) for a in answer):
        return answer
    raise ValidationError(f"Answer to question {question_id} must be a list of strings")


def profile_from_answers(answers: Mapping[int, Any]) -> Profile:
    """
    Build a Profile from questionnaire answers keyed by question id.

    Question 1 fills education, 2 interests, 3 goals. The questionnaire
    does not ask about skills, so skills stay empty.
    """
    known_ids = {q["id"] for q in QUESTIONNAIRE}
    unknown = set(answers) - known_ids
    if unknown:
        raise ValidationError(f"Unknown question id(s): {', '.join(str(i) for i in sorted(unknown))}")

    education = answers.get(QUESTION_EDUCATION)
    if education is not None and not isinstance(education, str):
        raise ValidationError(f"Answer to question {QUESTION_EDUCATION} must be a string")

    return Profile(
        skills=[],
        interests=_answer_list(QUESTION_INTERESTS, answers.get(QUESTION_INTERESTS)),
        goals=normalize_goals(_answer_list(QUESTION_GOALS, answers.get(QUESTION_GOALS))),
        education=education or "",
    )


def profile_to_user_fields(profile: Profile) -> Dict[str, Any]:
    """Fields to write back onto a user record. Empty fields are left out so
    they never overwrite what the user already has."""
    fields = {
        "skills": list(profile.skills),
        "interests": list(profile.interests),
        "goals": list(profile.goals),
        "education": profile.education,
    }
    return {k: v for k, v in fields.items() if v}

from typing import Any, Dict, List, Optional, Sequence
import json

from models.models import Opportunity
from ..logic.contracts import Profile
from .prompts import (
    CHAT_SYSTEM_PROMPT,
    CV_ANALYSIS_OUTPUT_FORMAT_INSTRUCTION,
    CV_ANALYSIS_SYSTEM_PROMPT,
    MATCHING_OUTPUT_FORMAT_INSTRUCTION,
    MATCHING_SYSTEM_PROMPT,
)

NOT_SPECIFIED = "Not specified"


def _joined(values: Sequence[str]) -> str:
    return ", ".join(values) if values else NOT_SPECIFIED


def build_matching_system_prompt() -> str:
    return f"""{MATCHING_SYSTEM_PROMPT.strip()}

OUTPUT FORMAT:
{MATCHING_OUTPUT_FORMAT_INSTRUCTION.strip()}
"""


def build_matching_user_prompt(profile: Profile, catalog: Sequence[Opportunity]) -> str:
    """
    Constructs the scoring prompt from a profile and the catalog.
    Only the fields relevant to scoring are sent for each opportunity.
    """
    minimized = _minimize_opportunities(catalog)

    return f"""
User Profile:
- Skills: {_joined(profile.skills)}
- Interests: {_joined(profile.interests)}
- Goals: {_joined(profile.goals)}
- Education: {profile.education or NOT_SPECIFIED}

Opportunities:
{json.dumps(minimized, indent=2)}

TASK:
Calculate match percentages (0-100) for each opportunity based on skills alignment, interests, and goals.
Return JSON with an array "matches" of {{opportunityId, matchPercentage, reasons}}.
"""


def build_cv_analysis_system_prompt() -> str:
    return CV_ANALYSIS_SYSTEM_PROMPT.strip()


def build_cv_analysis_user_prompt(cv_text: str) -> str:
    return f"""Analyze this CV and extract key information:

{cv_text}

{CV_ANALYSIS_OUTPUT_FORMAT_INSTRUCTION.strip()}
"""


def build_chat_system_prompt(context: Optional[Any] = None) -> str:
    if not context:
        return CHAT_SYSTEM_PROMPT
    return f"{CHAT_SYSTEM_PROMPT}\n\nUser Context: {json.dumps(context, default=str)}"


def _minimize_opportunities(catalog: Sequence[Opportunity]) -> List[Dict[str, Any]]:
    """Helper to reduce opportunity records to what the scorer needs."""
    return [
        {
            "id": opp.id,
            "title": opp.title,
            "type": opp.type,
            "requirements": list(opp.requirements),
            "tags": list(opp.tags),
        }
        for opp in catalog
    ]

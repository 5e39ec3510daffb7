"""
Matching Constants

Thresholds, sort keys, opportunity-type vocabulary and the fixed
questionnaire used to build profiles without a CV.
"""

from enum import Enum
from typing import Dict, List, Any

# =============================================================================
# SCORING
# =============================================================================

MIN_MATCH_PERCENTAGE = 0
MAX_MATCH_PERCENTAGE = 100

# Score assigned to catalog entries the oracle did not score
DEFAULT_MATCH_PERCENTAGE = 0

# A match at or above this counts towards "highMatches"
HIGH_MATCH_THRESHOLD = 80


# =============================================================================
# FILTERING / SORTING
# =============================================================================

ALL_TYPES = "all"


class SortKey(str, Enum):
    BEST_MATCH = "best-match"
    DEADLINE_SOON = "deadline-soon"
    RECENTLY_ADDED = "recently-added"
    HIGHEST_SALARY = "highest-salary"


DEFAULT_SORT = SortKey.BEST_MATCH


# =============================================================================
# OPPORTUNITY TYPE VOCABULARY
# =============================================================================

# Loose labels (from CV analysis or UI copy) -> catalog type
TYPE_SYNONYMS: Dict[str, str] = {
    "internship": "internship",
    "internships": "internship",
    "tech internship": "internship",
    "tech internships": "internship",
    "fellowship": "fellowship",
    "fellowships": "fellowship",
    "study abroad": "study-abroad",
    "study-abroad": "study-abroad",
    "exchange program": "study-abroad",
    "exchange programs": "study-abroad",
    "grant": "grant",
    "grants": "grant",
    "research grant": "grant",
    "research grants": "grant",
    "scholarship": "grant",
    "scholarships": "grant",
}


# =============================================================================
# QUESTIONNAIRE
# =============================================================================

QUESTION_EDUCATION = 1
QUESTION_INTERESTS = 2
QUESTION_GOALS = 3

QUESTIONNAIRE: List[Dict[str, Any]] = [
    {
        "id": QUESTION_EDUCATION,
        "title": "What's your educational background?",
        "subtitle": "Help us understand your academic foundation",
        "type": "select",
        "options": [
            "High School",
            "Bachelor's Degree",
            "Master's Degree",
            "PhD",
            "Professional Certification",
        ],
    },
    {
        "id": QUESTION_INTERESTS,
        "title": "What are your main areas of interest?",
        "subtitle": "Select all that apply",
        "type": "multi-select",
        "options": [
            "Technology & Programming",
            "Data Science & AI",
            "Business & Management",
            "Research & Academia",
            "Arts & Design",
            "Healthcare & Medicine",
            "Environmental Science",
            "International Relations",
        ],
    },
    {
        "id": QUESTION_GOALS,
        "title": "What type of opportunities interest you most?",
        "subtitle": "Select your preferred opportunity types",
        "type": "card-select",
        "options": [
            {"id": "internship", "title": "Tech Internships", "description": "Software, AI, Data Science"},
            {"id": "study-abroad", "title": "Study Abroad", "description": "Exchange programs, degrees"},
            {"id": "grant", "title": "Research Grants", "description": "Funding for research projects"},
            {"id": "fellowship", "title": "Fellowships", "description": "Professional development"},
        ],
    },
]

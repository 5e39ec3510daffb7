"""
Matching API Routes

Exposes the profile builder, the matching engine and the chat assistant.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from errors import AppError, NotFoundError, ValidationError
from store import MemoryStore, get_store
from utils.auth_utils import session_user_id
from .ai.oracle import ReasoningOracle, get_oracle
from .logic.constants import QUESTIONNAIRE
from .logic.contracts import (
    AnalyzeCVRequest,
    AnalyzeCVResponse,
    ChatRequest,
    ChatResponse,
    GetMatchesRequest,
    GetMatchesResponse,
    ProfileResponse,
    QuestionnaireRequest,
)
from .logic.engine import MatchingEngine
from .logic.filters import filter_opportunities
from .logic.profile_builder import (
    profile_from_analysis,
    profile_from_answers,
    profile_from_payload,
    profile_from_user,
    profile_to_user_fields,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["matching"])


# =============================================================================
# PROFILE
# =============================================================================

@router.post("/analyze-cv", response_model=AnalyzeCVResponse, summary="Extract a profile from CV text")
def analyze_cv(
    request: AnalyzeCVRequest,
    store: MemoryStore = Depends(get_store),
    oracle: ReasoningOracle = Depends(get_oracle),
    user_id: Optional[int] = Depends(session_user_id),
):
    """
    Ask the oracle for skills, experience level, interests and recommended
    opportunity types. A signed-in caller gets the result saved onto their
    user record.
    """
    if not request.cv_text or not request.cv_text.strip():
        raise ValidationError("CV text is required")

    analysis = oracle.analyze_cv(request.cv_text)
    profile = profile_from_analysis(analysis)

    if user_id is not None:
        try:
            store.update_user(user_id, {"cv_text": request.cv_text, **profile_to_user_fields(profile)})
        except NotFoundError:
            logger.warning(f"Session user {user_id} no longer exists; analysis not saved")

    return AnalyzeCVResponse(analysis=analysis, profile=profile)


@router.get("/questionnaire", summary="Questionnaire used to build a profile without a CV")
def get_questionnaire():
    return {"questions": QUESTIONNAIRE}


@router.post("/profile/questionnaire", response_model=ProfileResponse, summary="Build a profile from questionnaire answers")
def build_profile_from_questionnaire(request: QuestionnaireRequest):
    return ProfileResponse(profile=profile_from_answers(request.answers))


# =============================================================================
# MATCHING
# =============================================================================

@router.post("/get-matches", response_model=GetMatchesResponse, summary="Score the catalog against a profile")
def get_matches(
    request: GetMatchesRequest,
    store: MemoryStore = Depends(get_store),
    oracle: ReasoningOracle = Depends(get_oracle),
    session_uid: Optional[int] = Depends(session_user_id),
):
    """
    Generate ranked, annotated opportunities for a user or an ad-hoc profile.

    **Request Body:**
    - `userId`: registered user to score (defaults to the session user)
    - `userProfile`: profile to score when no user is known
    - `filters`: optional `{query, type, sortBy}` applied after ranking

    **Response:**
    - `opportunities`: every catalog entry with `matchPercentage` and `matchReasons`
    - `totalMatches` / `highMatches`: counts over the unfiltered list
    """
    user_id = request.user_id if request.user_id is not None else session_uid
    if user_id is None and request.user_profile is None:
        raise ValidationError("User ID or profile is required")

    try:
        user = store.get_user(user_id) if user_id is not None else None
        profile = profile_from_user(user) if user else profile_from_payload(request.user_profile)

        engine = MatchingEngine(oracle, store)
        ranked = engine.compute_matches(
            profile,
            store.get_all_opportunities(),
            user_id=user.id if user else None,
        )
        summary = engine.summarize(ranked)

        if request.filters is not None:
            ranked = filter_opportunities(
                ranked,
                query=request.filters.query,
                type_filter=request.filters.type,
                sort_by=request.filters.sort_by,
            )

        return GetMatchesResponse(opportunities=ranked, **summary)

    except AppError:
        raise
    except Exception as e:
        logger.exception("Matching error")
        return JSONResponse(
            status_code=500,
            content={"message": "Failed to calculate matches. Please try again.", "error": str(e)},
        )


# =============================================================================
# CHAT
# =============================================================================

@router.post("/chat", response_model=ChatResponse, summary="Ask the career assistant")
def chat(request: ChatRequest, oracle: ReasoningOracle = Depends(get_oracle)):
    if not request.message or not request.message.strip():
        raise ValidationError("Message is required")

    reply = oracle.chat(request.message, request.context)
    return ChatResponse(response=reply, timestamp=datetime.now(timezone.utc).isoformat())

"""
Profile API Routes

Endpoints to fetch/update user profiles and their recorded matches.
"""

from typing import List

from fastapi import APIRouter, Depends

from errors import ValidationError
from models.models import MatchSaveRequest, UserMatch
from models.schemas_user import UserOut, UserUpdate
from store import MemoryStore, get_store
from utils.crud_user import to_public

router = APIRouter(prefix="/api", tags=["profile"])


# ─────────────────────────────────────────────
# GET /api/users/{user_id}
# ─────────────────────────────────────────────
@router.get("/users/{user_id}", response_model=UserOut, summary="Fetch user profile")
def get_user(user_id: int, store: MemoryStore = Depends(get_store)):
    return to_public(store.get_user(user_id))


# ─────────────────────────────────────────────
# PUT /api/users/{user_id}
# ─────────────────────────────────────────────
@router.put("/users/{user_id}", response_model=UserOut, summary="Update user profile")
def update_user(user_id: int, payload: UserUpdate, store: MemoryStore = Depends(get_store)):
    """
    Partial update. Fields left out of the body keep their current value.
    """
    changes = payload.model_dump(exclude_unset=True)
    # Remove None values so partial updates don't overwrite with null
    changes = {k: v for k, v in changes.items() if v is not None}
    return to_public(store.update_user(user_id, changes))


# ─────────────────────────────────────────────
# GET /api/users/{user_id}/matches
# ─────────────────────────────────────────────
@router.get("/users/{user_id}/matches", response_model=List[UserMatch], summary="Recorded matches for a user")
def get_user_matches(user_id: int, store: MemoryStore = Depends(get_store)):
    store.get_user(user_id)
    return store.get_user_matches(user_id)


# ─────────────────────────────────────────────
# PUT /api/matches/{match_id}/save
# ─────────────────────────────────────────────
@router.put("/matches/{match_id}/save", response_model=UserMatch, summary="Save or unsave a match")
def save_match(match_id: int, payload: MatchSaveRequest, store: MemoryStore = Depends(get_store)):
    if payload.is_saved is None:
        raise ValidationError("isSaved is required")
    return store.set_match_saved(match_id, payload.is_saved)

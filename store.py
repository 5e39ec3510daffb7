"""
In-memory data store.

One ``MemoryStore`` is built at startup and kept on ``app.state``; request
handlers receive it through the ``get_store`` dependency. The store owns its
id counters and serializes every write behind a single lock, so ids are never
reused even when seeding runs concurrently.
"""

import logging
import secrets
import threading
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from fastapi import Request

import config
from errors import NotFoundError, PersistenceError, ValidationError
from models.models import Opportunity, OpportunityCreate, UserMatch
from models.models_user import User

logger = logging.getLogger(__name__)


DEMO_OPPORTUNITIES = [
    OpportunityCreate(
        title="Software Engineering Internship",
        organization="Google",
        type="internship",
        location="Mountain View, CA",
        duration="3 months",
        salary="$8,000/month",
        deadline="Deadline passed",
        status="deadline-passed",
        description="Work on cutting-edge technology projects with experienced engineers. Contribute to products used by billions of users worldwide.",
        requirements=["JavaScript", "Python", "Computer Science"],
        tags=["tech", "software", "internship"],
        url="https://careers.google.com",
        is_remote=False,
    ),
    OpportunityCreate(
        title="Remote Data Science Fellowship",
        organization="Microsoft",
        type="fellowship",
        location="Remote",
        duration="6 months",
        salary="$6,000/month",
        deadline="Deadline passed",
        status="deadline-passed",
        description="Work on AI/ML projects with Microsoft Research team. Focus on responsible AI and social impact applications.",
        requirements=["Python", "Machine Learning", "Data Science"],
        tags=["data-science", "ai", "remote"],
        url="https://careers.microsoft.com",
        is_remote=True,
    ),
    OpportunityCreate(
        title="Erasmus+ Study Abroad Program",
        organization="European Union",
        type="study-abroad",
        location="Various EU Countries",
        duration="1-2 semesters",
        salary="",
        deadline="Deadline passed",
        status="deadline-passed",
        description="Study at top European universities while experiencing different cultures. Full academic credit transfer guaranteed.",
        requirements=["Academic Excellence", "Language Skills"],
        tags=["europe", "study-abroad", "education"],
        url="https://erasmus-plus.ec.europa.eu",
    ),
    OpportunityCreate(
        title="UN Sustainable Development Internship",
        organization="United Nations",
        type="internship",
        location="New York, NY",
        duration="6 months",
        salary="",
        deadline="Open",
        status="open",
        description="Contribute to global sustainability initiatives. Work with international teams on climate change and development projects.",
        requirements=["International Relations", "Environmental Science"],
        tags=["sustainability", "international", "policy"],
        url="https://careers.un.org",
    ),
    OpportunityCreate(
        title="Fulbright Research Grant",
        organization="Fulbright Commission",
        type="grant",
        location="Global",
        duration="9-12 months",
        salary="",
        deadline="Open",
        status="open",
        description="Conduct independent research abroad. Full funding for living expenses, travel, and research costs included.",
        requirements=["Research Experience", "Academic Excellence"],
        tags=["research", "grant", "global"],
        url="https://fulbrightscholars.org",
    ),
    OpportunityCreate(
        title="Singapore Exchange Program",
        organization="National University of Singapore",
        type="study-abroad",
        location="Singapore",
        duration="1 semester",
        salary="",
        deadline="Open",
        status="open",
        description="Experience Asian culture while studying at one of the world's top universities. Focus on technology and innovation.",
        requirements=["Academic Standing", "English Proficiency"],
        tags=["singapore", "technology", "asia"],
        url="https://nus.edu.sg",
    ),
]

# Fields a profile update may touch
USER_UPDATABLE_FIELDS = {"name", "country", "education", "cv_text", "skills", "interests", "goals"}


class MemoryStore:
    def __init__(
        self,
        seed: Optional[Iterable[OpportunityCreate]] = None,
        session_ttl_seconds: Optional[int] = None,
    ):
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._opportunities: Dict[int, Opportunity] = {}
        self._matches: Dict[int, UserMatch] = {}
        self._match_index: Dict[Tuple[int, int], int] = {}
        self._sessions: Dict[str, Tuple[int, datetime]] = {}
        self._session_ttl = timedelta(
            seconds=session_ttl_seconds if session_ttl_seconds is not None else config.SESSION_MAX_AGE_SECONDS
        )
        self._next_user_id = 1
        self._next_opportunity_id = 1
        self._next_match_id = 1

        for data in seed or ():
            self.create_opportunity(data)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_all_opportunities(self) -> List[Opportunity]:
        with self._lock:
            return list(self._opportunities.values())

    def get_opportunity(self, opportunity_id: int) -> Opportunity:
        opportunity = self._opportunities.get(opportunity_id)
        if opportunity is None:
            raise NotFoundError("Opportunity not found")
        return opportunity

    def create_opportunity(self, data: OpportunityCreate) -> Opportunity:
        with self._lock:
            opportunity_id = self._next_opportunity_id
            self._next_opportunity_id += 1
            opportunity = Opportunity(id=opportunity_id, **data.model_dump())
            self._opportunities[opportunity_id] = opportunity
        logger.debug(f"Opportunity {opportunity_id} created: {opportunity.title}")
        return opportunity

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user.model_copy(deep=True)

    def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user.model_copy(deep=True)
        return None

    def create_user(self, *, email: str, name: str, password_hash: str, **fields) -> User:
        email = email.strip().lower()
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise ValidationError("Email already registered")
            user_id = self._next_user_id
            self._next_user_id += 1
            user = User(id=user_id, email=email, name=name, password_hash=password_hash, **fields)
            self._users[user_id] = user
        return user.model_copy(deep=True)

    def update_user(self, user_id: int, changes: dict) -> User:
        unknown = set(changes) - USER_UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError("User not found")
            updated = user.model_copy(update=changes, deep=True)
            self._users[user_id] = updated
        return updated.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Match records
    # ------------------------------------------------------------------

    def upsert_user_match(
        self,
        user_id: int,
        opportunity_id: int,
        match_percentage: int,
        reasons: List[str],
    ) -> UserMatch:
        """Insert or refresh the record for (user_id, opportunity_id).

        An existing record keeps its id, creation time and saved flag.
        """
        now = datetime.utcnow()
        with self._lock:
            if user_id not in self._users:
                raise PersistenceError(f"Cannot record match for unknown user {user_id}")
            if opportunity_id not in self._opportunities:
                raise PersistenceError(f"Cannot record match for unknown opportunity {opportunity_id}")

            key = (user_id, opportunity_id)
            existing_id = self._match_index.get(key)
            if existing_id is not None:
                match = self._matches[existing_id].model_copy(
                    update={"match_percentage": match_percentage, "reasons": list(reasons), "updated_at": now}
                )
            else:
                match = UserMatch(
                    id=self._next_match_id,
                    user_id=user_id,
                    opportunity_id=opportunity_id,
                    match_percentage=match_percentage,
                    reasons=list(reasons),
                    created_at=now,
                    updated_at=now,
                )
                self._next_match_id += 1
                self._match_index[key] = match.id
            self._matches[match.id] = match
        return match.model_copy(deep=True)

    def get_user_matches(self, user_id: int) -> List[UserMatch]:
        with self._lock:
            return [m.model_copy(deep=True) for m in self._matches.values() if m.user_id == user_id]

    def set_match_saved(self, match_id: int, is_saved: bool) -> UserMatch:
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                raise NotFoundError("Match not found")
            match = match.model_copy(update={"is_saved": is_saved, "updated_at": datetime.utcnow()})
            self._matches[match_id] = match
        return match.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, user_id: int) -> str:
        session_id = secrets.token_urlsafe(32)
        now = datetime.utcnow()
        with self._lock:
            self._purge_expired_sessions(now)
            self._sessions[session_id] = (user_id, now + self._session_ttl)
        return session_id

    def get_session_user_id(self, session_id: Optional[str]) -> Optional[int]:
        """User id for a live session; expired sessions are dropped on lookup."""
        if not session_id:
            return None
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            user_id, expires_at = entry
            if expires_at <= datetime.utcnow():
                del self._sessions[session_id]
                return None
            return user_id

    def _purge_expired_sessions(self, now: datetime) -> None:
        # Caller holds the lock
        expired = [sid for sid, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug(f"Purged {len(expired)} expired session(s)")

    def delete_session(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)


def get_store(request: Request) -> MemoryStore:
    return request.app.state.store

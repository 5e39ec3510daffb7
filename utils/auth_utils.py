from typing import Optional

import bcrypt
from fastapi import Depends, Request, Response

import config
from errors import AuthError, NotFoundError
from models.models_user import User
from store import MemoryStore, get_store


def hash_password(raw: str) -> str:
    return bcrypt.hashpw(raw.encode(), bcrypt.gensalt()).decode()


def verify_password(raw: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(raw.encode(), hashed.encode())
    except ValueError:
        return False


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=config.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=config.SESSION_COOKIE_NAME)


def session_id_from(request: Request) -> Optional[str]:
    return request.cookies.get(config.SESSION_COOKIE_NAME)


def session_user_id(request: Request, store: MemoryStore = Depends(get_store)) -> Optional[int]:
    """User id bound to the request's session cookie, or None."""
    return store.get_session_user_id(session_id_from(request))


def auth_user(
    user_id: Optional[int] = Depends(session_user_id),
    store: MemoryStore = Depends(get_store),
) -> User:
    if user_id is None:
        raise AuthError("Not authenticated")
    try:
        return store.get_user(user_id)
    except NotFoundError:
        # Session outlived its user
        raise AuthError("Not authenticated")

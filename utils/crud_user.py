from typing import Optional

from errors import AuthError
from models.models_user import User
from models.schemas_user import UserLogin, UserOut, UserRegister
from store import MemoryStore
from utils.auth_utils import hash_password, verify_password


def get_user_by_email(store: MemoryStore, email: str) -> Optional[User]:
    return store.get_user_by_email(email)


def create_user(store: MemoryStore, payload: UserRegister) -> User:
    return store.create_user(
        email=payload.email,
        name=payload.name,
        password_hash=hash_password(payload.password),
        country=payload.country,
        education=payload.education,
    )


def authenticate(store: MemoryStore, payload: UserLogin) -> User:
    user = get_user_by_email(store, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise AuthError("Invalid credentials")
    return user


def to_public(user: User) -> UserOut:
    return UserOut.model_validate(user)

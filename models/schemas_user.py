from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, constr

from models.models import CamelModel


class UserRegister(CamelModel):
    email: EmailStr
    password: constr(min_length=6)
    name: constr(min_length=1)
    country: Optional[str] = None
    education: Optional[str] = None


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class UserUpdate(CamelModel):
    """Partial profile update; unset fields are left untouched."""
    name: Optional[constr(min_length=1)] = None
    country: Optional[str] = None
    education: Optional[str] = None
    cv_text: Optional[str] = None
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    goals: Optional[List[str]] = None


class UserOut(CamelModel):
    id: int
    email: str
    name: str
    country: Optional[str] = None
    education: Optional[str] = None
    cv_text: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True

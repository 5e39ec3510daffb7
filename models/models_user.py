from datetime import datetime
from typing import List, Optional

from pydantic import Field

from models.models import CamelModel


class User(CamelModel):
    id: int
    email: str
    name: str
    country: Optional[str] = None
    education: Optional[str] = None
    cv_text: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    password_hash: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

OpportunityType = Literal["internship", "fellowship", "study-abroad", "grant"]
OpportunityStatus = Literal["open", "closed", "deadline-passed"]

OPPORTUNITY_TYPES = ("internship", "fellowship", "study-abroad", "grant")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class OpportunityCreate(CamelModel):
    title: str
    organization: str
    type: OpportunityType
    location: str
    duration: Optional[str] = None
    salary: Optional[str] = None
    deadline: str = ""
    status: OpportunityStatus = "open"
    description: str
    requirements: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    url: Optional[str] = None
    is_remote: bool = False


class Opportunity(OpportunityCreate):
    id: int

    class Config:
        frozen = True


class UserMatch(CamelModel):
    id: int
    user_id: int
    opportunity_id: int
    match_percentage: int = Field(ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)
    is_saved: bool = False
    created_at: datetime
    updated_at: datetime


class MatchSaveRequest(CamelModel):
    is_saved: Optional[bool] = None

"""Portfolio workflow and settings schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class PortfolioResponse(BaseModel):
    id: str
    user_id: str
    slug: Optional[str] = None
    status: str
    rejection_reason: Optional[str] = None
    is_public: bool
    approved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PendingPortfolioResponse(PortfolioResponse):
    """Review-queue entry with the owner's identity."""
    owner_email: str
    owner_name: Optional[str] = None


class PendingCountResponse(BaseModel):
    count: int


class RejectRequest(BaseModel):
    reason: str = Field(..., description="Why the portfolio was rejected")


class PublicFlagUpdate(BaseModel):
    is_public: bool


class SectionIntrosUpdate(BaseModel):
    """Only provided fields change; blank strings reset to the default."""
    skills_intro: Optional[str] = None
    projects_intro: Optional[str] = None
    experience_intro: Optional[str] = None
    architecture_intro: Optional[str] = None


class SectionIntrosResponse(BaseModel):
    skills_intro: str
    projects_intro: str
    experience_intro: str
    architecture_intro: str

"""
Club Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime, date
from uuid import UUID


class CreateClubRequest(BaseModel):
    """Request to create a new club"""
    name: str = Field(..., min_length=1, max_length=100, description="Club name")
    category: str = Field(..., min_length=1, max_length=50, description="Club category")
    description: Optional[str] = None
    objectives: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=50)

    class Config:
        example = {
            "name": "Robotics Club",
            "category": "Technical",
            "description": "Build and race robots",
        }


class UpdateClubRequest(BaseModel):
    """Request to update club details"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    objectives: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=50)


class ReviewClubRequest(BaseModel):
    """Admin decision on a club"""
    status: Literal["active", "inactive"] = "active"


class ClubResponse(BaseModel):
    """Club details response"""
    id: UUID
    name: str
    description: Optional[str] = None
    objectives: Optional[str] = None
    category: str
    icon: Optional[str] = None
    color: Optional[str] = None
    status: str
    member_count: int = 0
    rating: float = 0
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClubListItem(ClubResponse):
    events_count: int = 0


class ClubMemberResponse(BaseModel):
    """Approved member as shown on a club page"""
    user_id: UUID
    name: str
    email: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None
    profile_image: Optional[str] = None
    role: str
    joined_at: Optional[datetime] = None


class ClubEventSummary(BaseModel):
    id: UUID
    title: str
    event_date: date
    venue: Optional[str] = None
    status: str


class ClubDetailResponse(ClubResponse):
    """Club with members, upcoming events and the caller's membership"""
    members: List[ClubMemberResponse]
    upcoming_events: List[ClubEventSummary]
    user_membership: Optional[dict] = None


class ClubMutationResponse(BaseModel):
    message: str
    club: ClubResponse

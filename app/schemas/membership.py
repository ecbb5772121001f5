"""
Membership Request/Response Models
"""

from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime
from uuid import UUID


class MembershipDecisionRequest(BaseModel):
    """Lead/co-lead/admin decision on a join request"""
    status: Literal["approved", "rejected"]


class AssignRoleRequest(BaseModel):
    role: Literal["member", "co_lead", "lead"]


class MembershipResponse(BaseModel):
    """One (user, club) membership row"""
    id: UUID
    user_id: UUID
    club_id: UUID
    role: str
    status: str
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PendingRequestResponse(BaseModel):
    """Pending join request with the requester's profile"""
    id: UUID
    user_id: UUID
    name: str
    email: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None
    profile_image: Optional[str] = None
    joined_at: Optional[datetime] = None


class MyMembershipResponse(BaseModel):
    id: UUID
    club_id: UUID
    club_name: str
    category: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    member_count: int = 0
    rating: float = 0
    role: str
    status: str
    joined_at: Optional[datetime] = None


class MembershipMutationResponse(BaseModel):
    message: str
    membership: MembershipResponse

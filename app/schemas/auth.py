"""
Auth Request/Response Models
Registration, login, profile and email verification
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class SendCodeRequest(BaseModel):
    """Request a one-time email verification code"""
    email: EmailStr


class VerifyCodeRequest(BaseModel):
    """Check a one-time email verification code"""
    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=10)


class RegisterRequest(BaseModel):
    """New student account"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    year: Optional[str] = Field(None, max_length=20)
    college_id: Optional[str] = Field(None, max_length=50)

    class Config:
        example = {
            "email": "asha@college.edu",
            "password": "s3cret!",
            "name": "Asha Rao",
            "department": "CSE",
            "year": "2"
        }


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UpdateProfileRequest(BaseModel):
    """Profile fields a user may change"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    year: Optional[str] = Field(None, max_length=20)
    profile_image: Optional[str] = None


class UserResponse(BaseModel):
    """User without credentials"""
    id: UUID
    email: str
    name: str
    department: Optional[str] = None
    year: Optional[str] = None
    college_id: Optional[str] = None
    profile_image: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuthUserResponse(UserResponse):
    admin_club_id: Optional[UUID] = None


class AuthResponse(BaseModel):
    """Token plus the signed-in user"""
    message: str
    token: str
    user: AuthUserResponse


class MembershipClubSummary(BaseModel):
    club_id: UUID
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    category: Optional[str] = None
    role: str
    joined_at: Optional[datetime] = None


class MeResponse(AuthUserResponse):
    """Current user with activity counters"""
    clubs: List[MembershipClubSummary]
    events_registered: int
    certificates: int

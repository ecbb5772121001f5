"""
Event Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime, date
from uuid import UUID


class CreateEventRequest(BaseModel):
    """Request to create an event for a club"""
    club_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    event_date: date
    start_time: str = Field(..., pattern=r"^\d{1,2}:\d{2}$", description="HH:MM")
    end_time: str = Field(..., pattern=r"^\d{1,2}:\d{2}$", description="HH:MM")
    venue: Optional[str] = Field(None, max_length=200)
    event_type: str = Field("workshop", max_length=50)
    max_participants: int = Field(100, ge=1)
    price: float = Field(0, ge=0)
    icon: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=50)
    registration_deadline: Optional[datetime] = None

    class Config:
        example = {
            "club_id": "uuid-here",
            "title": "Intro to ROS",
            "event_date": "2026-11-02",
            "start_time": "10:00",
            "end_time": "13:00",
            "venue": "Lab 3",
            "max_participants": 40
        }


class EventStatusRequest(BaseModel):
    """Terminal status transition"""
    status: Literal["cancelled", "completed"]


class CheckInRequest(BaseModel):
    """Self check-in carries a code, staff check-in names a user"""
    user_id: Optional[UUID] = None
    code: Optional[str] = Field(None, max_length=20)


class EventResponse(BaseModel):
    """Event details"""
    id: UUID
    club_id: UUID
    title: str
    description: Optional[str] = None
    event_date: date
    start_time: str
    end_time: str
    venue: Optional[str] = None
    event_type: str
    max_participants: int
    price: float = 0
    icon: Optional[str] = None
    color: Optional[str] = None
    registration_deadline: Optional[datetime] = None
    status: str
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventListItem(EventResponse):
    club_name: Optional[str] = None
    registered_count: int = 0
    is_full: bool = False


class RegistrationResponse(BaseModel):
    id: UUID
    event_id: UUID
    user_id: UUID
    status: str
    registered_at: Optional[datetime] = None
    checked_in_at: Optional[datetime] = None


class FeedbackSummary(BaseModel):
    average_rating: Optional[float] = None
    total_reviews: int = 0


class EventDetailResponse(EventListItem):
    user_registration: Optional[RegistrationResponse] = None
    feedback_summary: FeedbackSummary


class EventMutationResponse(BaseModel):
    message: str
    event: EventResponse


class RegisterResponse(BaseModel):
    message: str
    registered_count: int
    max_participants: int
    registration: RegistrationResponse


class CheckInResponse(BaseModel):
    message: str
    registration: RegistrationResponse


class CheckInCodeResponse(BaseModel):
    event_id: UUID
    checkin_code: str
    qr_data: str
    expires_at: datetime


class CheckInAttendee(BaseModel):
    user_id: UUID
    name: Optional[str] = None
    department: Optional[str] = None
    status: str
    checked_in_at: Optional[datetime] = None


class CheckInStatusResponse(BaseModel):
    total_registered: int
    checked_in: int
    pending: int
    check_in_rate: str
    attendees: List[CheckInAttendee]

"""
Pydantic schemas for request/response validation
"""

from app.schemas.club import (
    CreateClubRequest,
    UpdateClubRequest,
    ClubResponse,
    ClubDetailResponse,
)
from app.schemas.event import (
    CreateEventRequest,
    EventResponse,
    EventDetailResponse,
)

__all__ = [
    "CreateClubRequest",
    "UpdateClubRequest",
    "ClubResponse",
    "ClubDetailResponse",
    "CreateEventRequest",
    "EventResponse",
    "EventDetailResponse",
]

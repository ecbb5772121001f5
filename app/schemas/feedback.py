"""
Feedback Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID


class FeedbackRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class FeedbackResponse(BaseModel):
    id: UUID
    event_id: UUID
    user_id: UUID
    rating: int
    comment: Optional[str] = None
    submitted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FeedbackMutationResponse(BaseModel):
    message: str
    feedback: FeedbackResponse


class ReviewResponse(FeedbackResponse):
    user_name: Optional[str] = None
    profile_image: Optional[str] = None


class FeedbackSummaryResponse(BaseModel):
    average_rating: float
    total_reviews: int
    distribution: Dict[int, int]


class EventFeedbackResponse(BaseModel):
    reviews: List[ReviewResponse]
    summary: FeedbackSummaryResponse

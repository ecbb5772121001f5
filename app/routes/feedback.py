"""
Feedback Routes
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from app.auth import get_current_user
from app.services.feedback_service import feedback_service
from app.schemas.feedback import FeedbackRequest, FeedbackMutationResponse, EventFeedbackResponse

router = APIRouter()


@router.post("/{event_id}", response_model=FeedbackMutationResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    event_id: UUID,
    request: FeedbackRequest,
    response: Response,
    current_user: dict = Depends(get_current_user)
):
    """
    Rate an event you registered for

    Submitting again replaces your earlier feedback (200 instead of 201).
    """
    feedback, created = await feedback_service.submit(
        str(event_id), current_user, request.rating, request.comment
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return {
        "message": "Thanks for your feedback!" if created else "Feedback updated.",
        "feedback": feedback
    }


@router.get("/{event_id}", response_model=EventFeedbackResponse)
async def list_feedback(event_id: UUID):
    return await feedback_service.list_feedback(str(event_id))

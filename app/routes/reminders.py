"""
Reminder Routes
Staff reminders and club broadcasts, delivered as in-app notifications
"""

from fastapi import APIRouter, Depends
from app.auth import get_current_user
from app.services.reminder_service import reminder_service
from app.schemas.notification import ReminderRequest, BroadcastRequest, FanOutResponse

router = APIRouter()


@router.post("/reminder", response_model=FanOutResponse)
async def send_reminder(
    request: ReminderRequest,
    current_user: dict = Depends(get_current_user)
):
    """Remind everyone registered for an event (club staff)"""
    return await reminder_service.send_reminder(str(request.event_id), current_user)


@router.post("/broadcast", response_model=FanOutResponse)
async def broadcast(
    request: BroadcastRequest,
    current_user: dict = Depends(get_current_user)
):
    """Announcement to all approved club members (club staff)"""
    return await reminder_service.broadcast(str(request.club_id), request.title, request.message, current_user)

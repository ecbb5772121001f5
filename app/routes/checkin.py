"""
Check-in Routes
Check-in codes, attendance marking and live status
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from app.auth import get_current_user
from app.services.event_service import event_service
from app.schemas.event import (
    CheckInRequest,
    CheckInResponse,
    CheckInCodeResponse,
    CheckInStatusResponse,
)

router = APIRouter()


@router.post("/{event_id}/generate", response_model=CheckInCodeResponse)
async def generate_code(
    event_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    """New self check-in code and QR payload (club staff)"""
    return await event_service.generate_checkin_code(str(event_id), current_user)


@router.post("/{event_id}", response_model=CheckInResponse)
async def check_in(
    event_id: UUID,
    request: CheckInRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Mark attendance

    - **code**: the event's check-in code, for checking yourself in
    - **user_id**: attendee to check in (club staff only)
    """
    return await event_service.check_in(
        str(event_id),
        current_user,
        user_id=str(request.user_id) if request.user_id else None,
        code=request.code
    )


@router.get("/{event_id}/status", response_model=CheckInStatusResponse)
async def checkin_status(
    event_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    return await event_service.checkin_status(str(event_id), current_user)

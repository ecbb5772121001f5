"""
Notification Routes
The signed-in user's inbox
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from app.auth import get_current_user
from app.services.notification_service import notification_service
from app.schemas.notification import NotificationListResponse

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    current_user: dict = Depends(get_current_user)
):
    return await notification_service.list_notifications(
        current_user["id"], limit=limit, unread_only=unread_only
    )


@router.put("/read-all")
async def mark_all_read(current_user: dict = Depends(get_current_user)):
    await notification_service.mark_all_read(current_user["id"])
    return {"message": "All notifications marked as read."}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    await notification_service.mark_read(str(notification_id), current_user["id"])
    return {"message": "Notification marked as read."}

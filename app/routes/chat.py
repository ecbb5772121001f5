"""
Chat Routes
Club chat rooms, polled by clients
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from app.auth import get_current_user
from app.services.chat_service import chat_service
from app.schemas.notification import SendMessageRequest, ChatMessageResponse, ChatChannelResponse

router = APIRouter()


@router.get("/channels", response_model=List[ChatChannelResponse])
async def channels(current_user: dict = Depends(get_current_user)):
    """Clubs the user can chat in, with their latest message"""
    return await chat_service.channels(current_user)


@router.get("/{club_id}", response_model=List[ChatMessageResponse])
async def list_messages(
    club_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    before: Optional[datetime] = Query(None, description="Only messages sent before this time"),
    current_user: dict = Depends(get_current_user)
):
    return await chat_service.list_messages(str(club_id), current_user, limit=limit, before=before)


@router.post("/{club_id}", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    club_id: UUID,
    request: SendMessageRequest,
    current_user: dict = Depends(get_current_user)
):
    return await chat_service.send_message(str(club_id), current_user, request.message, request.message_type)

"""
Notification, Chat and Broadcast Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: Optional[str] = None
    icon: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class ReminderRequest(BaseModel):
    event_id: UUID


class BroadcastRequest(BaseModel):
    club_id: UUID
    title: str = Field(..., min_length=1, max_length=150)
    message: str = Field(..., min_length=1, max_length=2000)


class FanOutResponse(BaseModel):
    message: str
    sent: int


class SendMessageRequest(BaseModel):
    message: str = Field(..., max_length=4000)
    message_type: str = Field("text", max_length=20)


class ChatMessageResponse(BaseModel):
    id: UUID
    club_id: UUID
    sender_id: UUID
    sender_name: Optional[str] = None
    profile_image: Optional[str] = None
    message: str
    message_type: str
    sent_at: Optional[datetime] = None


class LastMessage(BaseModel):
    text: str
    sender: Optional[str] = None
    time: Optional[datetime] = None


class ChatChannelResponse(BaseModel):
    club_id: UUID
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    last_message: Optional[LastMessage] = None

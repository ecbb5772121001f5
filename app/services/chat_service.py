"""
Chat Service
Club chat rooms, delivered by polling
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from fastapi import HTTPException, status

from app.database import database, utcnow
from app.services.membership_service import membership_service

logger = logging.getLogger(__name__)

MEMBER_ROLES = ("member", "co_lead", "lead")


class ChatService:

    @staticmethod
    async def _require_member(club_id: str, user: dict) -> None:
        if not await membership_service.can_manage_club(user, club_id, MEMBER_ROLES):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Join this club to use its chat."
            )

    @staticmethod
    async def list_messages(club_id: str, user: dict, limit: int = 50, before: Optional[datetime] = None) -> list:
        """Latest ``limit`` messages (older than ``before``), oldest first"""
        await ChatService._require_member(str(club_id), user)

        query = """
            SELECT m.*, u.name AS sender_name, u.profile_image
            FROM chat_messages m
            JOIN users u ON u.id = m.sender_id
            WHERE m.club_id = :club_id
        """
        values = {"club_id": str(club_id), "limit": limit}
        if before:
            query += " AND m.sent_at < :before"
            values["before"] = before
        query += " ORDER BY m.sent_at DESC LIMIT :limit"

        rows = await database.fetch_all(query, values)
        return [dict(r) for r in reversed(rows)]

    @staticmethod
    async def send_message(club_id: str, user: dict, message: str, message_type: str = "text") -> dict:
        text = (message or "").strip()
        if not text:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Message cannot be empty."
            )

        await ChatService._require_member(str(club_id), user)

        message_id = str(uuid4())
        await database.execute(
            """
            INSERT INTO chat_messages (id, club_id, sender_id, message, message_type, sent_at)
            VALUES (:id, :club_id, :sender_id, :message, :message_type, :sent_at)
            """,
            {
                "id": message_id,
                "club_id": str(club_id),
                "sender_id": user["id"],
                "message": text,
                "message_type": message_type or "text",
                "sent_at": utcnow()
            }
        )

        row = await database.fetch_one(
            """
            SELECT m.*, u.name AS sender_name, u.profile_image
            FROM chat_messages m
            JOIN users u ON u.id = m.sender_id
            WHERE m.id = :id
            """,
            {"id": message_id}
        )
        return dict(row)

    @staticmethod
    async def channels(user: dict) -> list:
        """The user's approved clubs, each with its most recent message"""
        clubs = await database.fetch_all(
            """
            SELECT c.id AS club_id, c.name, c.icon, c.color
            FROM club_memberships m
            JOIN clubs c ON c.id = m.club_id
            WHERE m.user_id = :user_id AND m.status = 'approved'
            ORDER BY c.name
            """,
            {"user_id": user["id"]}
        )

        channels = []
        for club in clubs:
            last = await database.fetch_one(
                """
                SELECT m.message, m.sent_at, u.name AS sender_name
                FROM chat_messages m
                JOIN users u ON u.id = m.sender_id
                WHERE m.club_id = :club_id
                ORDER BY m.sent_at DESC
                LIMIT 1
                """,
                {"club_id": str(club["club_id"])}
            )
            channel = dict(club)
            channel["last_message"] = {
                "text": last["message"],
                "sender": last["sender_name"],
                "time": last["sent_at"],
            } if last else None
            channels.append(channel)
        return channels


# Create singleton instance
chat_service = ChatService()

"""
Notification Service
In-app notification fan-out and the owner's inbox operations
"""

import logging
import uuid
from typing import Iterable, Optional

from fastapi import HTTPException, status

from app.database import database, utcnow

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Writes notification rows as a side effect of other state changes.

    Delivery is best-effort: each row is inserted on its own, failures are
    logged and dropped, and nothing is retried or rolled back.
    """

    @staticmethod
    async def notify(
        user_id,
        notification_type: str,
        title: str,
        message: Optional[str] = None,
        icon: Optional[str] = None
    ) -> bool:
        """Insert one notification. Returns False instead of raising."""
        try:
            await database.execute(
                """
                INSERT INTO notifications (id, user_id, type, title, message, icon, is_read, created_at)
                VALUES (:id, :user_id, :type, :title, :message, :icon, FALSE, :created_at)
                """,
                {
                    "id": str(uuid.uuid4()),
                    "user_id": str(user_id),
                    "type": notification_type,
                    "title": title,
                    "message": message,
                    "icon": icon,
                    "created_at": utcnow()
                }
            )
            return True
        except Exception as e:
            logger.warning("Notification %s for user %s not written: %s", notification_type, user_id, e)
            return False

    @staticmethod
    async def fan_out(
        user_ids: Iterable,
        notification_type: str,
        title: str,
        message: Optional[str] = None,
        icon: Optional[str] = None
    ) -> int:
        """
        Notify every recipient once

        Returns:
            Number of notifications actually written
        """
        recipients = []
        for user_id in user_ids:
            key = str(user_id)
            if key not in recipients:
                recipients.append(key)

        written = 0
        for user_id in recipients:
            if await NotificationService.notify(user_id, notification_type, title, message, icon):
                written += 1

        if written < len(recipients):
            logger.warning("Fan-out %s wrote %d of %d notifications", notification_type, written, len(recipients))
        return written

    @staticmethod
    async def list_notifications(user_id: str, limit: int = 20, unread_only: bool = False) -> dict:
        """Newest-first notifications for the owner, plus unread count"""
        query = "SELECT * FROM notifications WHERE user_id = :user_id"
        if unread_only:
            query += " AND is_read = FALSE"
        query += " ORDER BY created_at DESC LIMIT :limit"

        rows = await database.fetch_all(query, {"user_id": user_id, "limit": limit})
        unread = await database.fetch_val(
            "SELECT COUNT(*) FROM notifications WHERE user_id = :user_id AND is_read = FALSE",
            {"user_id": user_id}
        )

        return {
            "notifications": [dict(r) for r in rows],
            "unread_count": unread or 0
        }

    @staticmethod
    async def mark_read(notification_id: str, user_id: str) -> None:
        """Mark one of the owner's notifications read"""
        notification = await database.fetch_one(
            "SELECT id FROM notifications WHERE id = :id AND user_id = :user_id",
            {"id": notification_id, "user_id": user_id}
        )
        if not notification:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found."
            )

        await database.execute(
            "UPDATE notifications SET is_read = TRUE WHERE id = :id AND user_id = :user_id",
            {"id": notification_id, "user_id": user_id}
        )

    @staticmethod
    async def mark_all_read(user_id: str) -> None:
        await database.execute(
            "UPDATE notifications SET is_read = TRUE WHERE user_id = :user_id AND is_read = FALSE",
            {"user_id": user_id}
        )


# Create singleton instance
notification_service = NotificationService()

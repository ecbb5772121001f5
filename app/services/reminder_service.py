"""
Reminder Service
Staff-initiated reminders and club broadcasts
"""

import logging

from fastapi import HTTPException, status

from app.database import database
from app.services.membership_service import membership_service
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)


class ReminderService:

    @staticmethod
    async def send_reminder(event_id: str, actor: dict) -> dict:
        """Remind everyone still registered for an event"""
        event = await database.fetch_one(
            "SELECT id, club_id, title, event_date, start_time, venue FROM events WHERE id = :id",
            {"id": str(event_id)}
        )
        if not event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Event not found."
            )

        await membership_service.require_club_staff(
            actor, str(event["club_id"]), detail="Only club staff can send reminders."
        )

        rows = await database.fetch_all(
            "SELECT user_id FROM event_registrations WHERE event_id = :event_id AND status = 'registered'",
            {"event_id": str(event_id)}
        )

        where = f" at {event['venue']}" if event["venue"] else ""
        sent = await notification_service.fan_out(
            [r["user_id"] for r in rows],
            "event_reminder",
            f"Reminder: {event['title']}",
            f"See you on {event['event_date']} at {event['start_time']}{where}.",
            "⏰"
        )

        logger.info("Reminder for event %s sent to %d of %d registrants", event_id, sent, len(rows))
        return {"message": f"Reminder sent to {sent} registrants.", "sent": sent}

    @staticmethod
    async def broadcast(club_id: str, title: str, message: str, actor: dict) -> dict:
        """Announcement to every approved member of the club"""
        club = await database.fetch_one(
            "SELECT id, name FROM clubs WHERE id = :id",
            {"id": str(club_id)}
        )
        if not club:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Club not found."
            )

        await membership_service.require_club_staff(
            actor, str(club_id), detail="Only club staff can broadcast to members."
        )

        members = await membership_service.member_user_ids(str(club_id))
        sent = await notification_service.fan_out(
            [m for m in members if m != actor["id"]],
            "club_broadcast",
            f"{club['name']}: {title}",
            message,
            "📢"
        )

        logger.info("Broadcast to club %s reached %d members", club_id, sent)
        return {"message": f"Broadcast sent to {sent} members.", "sent": sent}


# Create singleton instance
reminder_service = ReminderService()

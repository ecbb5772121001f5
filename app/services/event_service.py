"""
Event Service
Event creation, capacity-gated registration, check-in and status changes
"""

import logging
import secrets
from datetime import timedelta, timezone
from typing import Optional
from urllib.parse import quote
from uuid import uuid4

from fastapi import HTTPException, status

from app.config import settings
from app.database import database, utcnow, parse_timestamp
from app.schemas.event import CreateEventRequest
from app.services.locks import admission_locks
from app.services.membership_service import membership_service
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("cancelled", "completed")
QR_PREFIX = "CAMPUSHUB-CHECKIN"

EVENT_LIST_QUERY = """
    SELECT e.*, c.name AS club_name,
           (SELECT COUNT(*) FROM event_registrations r
            WHERE r.event_id = e.id AND r.status != 'cancelled') AS registered_count
    FROM events e
    JOIN clubs c ON c.id = e.club_id
"""


def _with_capacity(row) -> dict:
    event = dict(row)
    event["registered_count"] = event.get("registered_count") or 0
    event["is_full"] = event["registered_count"] >= event["max_participants"]
    return event


class EventService:
    """Service for the event and registration lifecycle"""

    @staticmethod
    async def get_event_row(event_id: str) -> dict:
        event = await database.fetch_one(
            "SELECT * FROM events WHERE id = :id",
            {"id": str(event_id)}
        )
        if not event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Event not found."
            )
        return dict(event)

    @staticmethod
    async def get_registration(event_id: str, user_id: str) -> Optional[dict]:
        row = await database.fetch_one(
            "SELECT * FROM event_registrations WHERE event_id = :event_id AND user_id = :user_id",
            {"event_id": str(event_id), "user_id": str(user_id)}
        )
        return dict(row) if row else None

    @staticmethod
    async def count_active_registrations(event_id: str) -> int:
        count = await database.fetch_val(
            """
            SELECT COUNT(*) FROM event_registrations
            WHERE event_id = :event_id AND status != 'cancelled'
            """,
            {"event_id": str(event_id)}
        )
        return count or 0

    @staticmethod
    async def require_event_staff(event: dict, actor: dict, detail: str = "Only club staff can manage this event.") -> None:
        await membership_service.require_club_staff(actor, str(event["club_id"]), detail=detail)

    @staticmethod
    async def create_event(data: CreateEventRequest, actor: dict) -> dict:
        """
        Create an event and tell the club's members about it

        Raises:
            HTTPException: 404 unknown club, 403 actor is not club staff
        """
        club_id = str(data.club_id)
        club = await database.fetch_one(
            "SELECT id, name FROM clubs WHERE id = :id",
            {"id": club_id}
        )
        if not club:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Club not found."
            )

        await membership_service.require_club_staff(
            actor, club_id, detail="Only club leads, co-leads or admins can create events."
        )

        deadline = data.registration_deadline
        if deadline is not None:
            if deadline.tzinfo is None:
                deadline = deadline.replace(tzinfo=timezone.utc)
            deadline = deadline.astimezone(timezone.utc)

        event_id = str(uuid4())
        await database.execute(
            """
            INSERT INTO events (id, club_id, title, description, event_date, start_time, end_time,
                                venue, event_type, max_participants, price, icon, color,
                                registration_deadline, status, created_by, created_at)
            VALUES (:id, :club_id, :title, :description, :event_date, :start_time, :end_time,
                    :venue, :event_type, :max_participants, :price, :icon, :color,
                    :registration_deadline, 'upcoming', :created_by, :created_at)
            """,
            {
                "id": event_id,
                "club_id": club_id,
                "title": data.title.strip(),
                "description": data.description,
                "event_date": data.event_date,
                "start_time": data.start_time,
                "end_time": data.end_time,
                "venue": data.venue,
                "event_type": data.event_type or "workshop",
                "max_participants": data.max_participants,
                "price": data.price,
                "icon": data.icon or "📅",
                "color": data.color or "#6C5CE7",
                "registration_deadline": deadline,
                "created_by": actor["id"],
                "created_at": utcnow()
            }
        )

        members = await membership_service.member_user_ids(club_id)
        await notification_service.fan_out(
            [m for m in members if m != actor["id"]],
            "new_event",
            f"New Event: {data.title}",
            f"{club['name']} is hosting \"{data.title}\" on {data.event_date.isoformat()}",
            "📅"
        )

        logger.info("Event %s created in club %s by %s", event_id, club_id, actor["id"])
        return await EventService.get_event_row(event_id)

    @staticmethod
    async def list_events(
        club_id: Optional[str] = None,
        event_status: Optional[str] = None,
        upcoming: bool = False,
        search: Optional[str] = None,
        limit: int = 50
    ) -> list:
        query = EVENT_LIST_QUERY + " WHERE 1 = 1"
        values = {"limit": limit}

        if club_id:
            query += " AND e.club_id = :club_id"
            values["club_id"] = str(club_id)
        if event_status:
            query += " AND e.status = :status"
            values["status"] = event_status
        if upcoming:
            query += " AND e.status = 'upcoming' AND e.event_date >= :today"
            values["today"] = utcnow().date()
        if search:
            query += " AND (LOWER(e.title) LIKE :search OR LOWER(COALESCE(e.description, '')) LIKE :search)"
            values["search"] = f"%{search.strip().lower()}%"

        query += " ORDER BY e.event_date, e.start_time LIMIT :limit"

        rows = await database.fetch_all(query, values)
        return [_with_capacity(r) for r in rows]

    @staticmethod
    async def get_event(event_id: str, principal: Optional[dict] = None) -> dict:
        """Event with capacity, the caller's registration and a feedback summary"""
        row = await database.fetch_one(
            EVENT_LIST_QUERY + " WHERE e.id = :id",
            {"id": str(event_id)}
        )
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Event not found."
            )
        event = _with_capacity(row)

        event["user_registration"] = None
        if principal:
            event["user_registration"] = await EventService.get_registration(event_id, principal["id"])

        summary = await database.fetch_one(
            "SELECT AVG(rating) AS average_rating, COUNT(*) AS total_reviews FROM feedback WHERE event_id = :event_id",
            {"event_id": str(event_id)}
        )
        average = summary["average_rating"] if summary else None
        event["feedback_summary"] = {
            "average_rating": round(float(average), 1) if average is not None else None,
            "total_reviews": summary["total_reviews"] if summary else 0,
        }
        return event

    @staticmethod
    async def register(event_id: str, user: dict) -> dict:
        """
        Admit the user to the event if there is room

        The read-count-write sequence runs under the event's admission lock.

        Raises:
            HTTPException: 404 unknown event, 400 closed/past deadline/full,
                409 already registered
        """
        event_id = str(event_id)

        async with admission_locks.hold(event_id):
            event = await EventService.get_event_row(event_id)

            if event["status"] in TERMINAL_STATUSES:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Event is {event['status']}."
                )

            deadline = parse_timestamp(event.get("registration_deadline"))
            if deadline and utcnow() > deadline:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Registration deadline has passed."
                )

            existing = await EventService.get_registration(event_id, user["id"])
            if existing and existing["status"] != "cancelled":
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="You are already registered for this event."
                )

            count = await EventService.count_active_registrations(event_id)
            if count >= event["max_participants"]:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Event is full."
                )

            if existing:
                await database.execute(
                    """
                    UPDATE event_registrations
                    SET status = 'registered', registered_at = :registered_at, checked_in_at = NULL
                    WHERE id = :id
                    """,
                    {"id": str(existing["id"]), "registered_at": utcnow()}
                )
                registration_id = str(existing["id"])
            else:
                registration_id = str(uuid4())
                await database.execute(
                    """
                    INSERT INTO event_registrations (id, event_id, user_id, status, registered_at)
                    VALUES (:id, :event_id, :user_id, 'registered', :registered_at)
                    ON CONFLICT (event_id, user_id) DO NOTHING
                    """,
                    {
                        "id": registration_id,
                        "event_id": event_id,
                        "user_id": user["id"],
                        "registered_at": utcnow()
                    }
                )

            registration = await EventService.get_registration(event_id, user["id"])
            if not registration or str(registration["id"]) != registration_id:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="You are already registered for this event."
                )

        await notification_service.notify(
            user["id"], "event_registered", "Registration Confirmed",
            f"You're registered for \"{event['title']}\" on {event['event_date']}", "✅"
        )

        logger.info("User %s registered for event %s (%d/%d)",
                    user["id"], event_id, count + 1, event["max_participants"])
        return {
            "message": "Successfully registered!",
            "registered_count": count + 1,
            "max_participants": event["max_participants"],
            "registration": registration,
        }

    @staticmethod
    async def cancel_registration(event_id: str, user: dict) -> dict:
        """Flip the caller's registration to cancelled; the row is kept"""
        event_id = str(event_id)

        async with admission_locks.hold(event_id):
            registration = await EventService.get_registration(event_id, user["id"])
            if registration and registration["status"] == "attended":
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Attendance already recorded; registration cannot be cancelled."
                )

            await database.execute(
                """
                UPDATE event_registrations SET status = 'cancelled'
                WHERE event_id = :event_id AND user_id = :user_id AND status = 'registered'
                """,
                {"event_id": event_id, "user_id": user["id"]}
            )
        return {"message": "Registration cancelled."}

    @staticmethod
    async def check_in(event_id: str, actor: dict, user_id: Optional[str] = None, code: Optional[str] = None) -> dict:
        """
        Mark a registration attended

        Checking in someone else needs club staff. Checking yourself in
        needs the event's current check-in code unless you are staff.
        """
        event = await EventService.get_event_row(event_id)

        if event["status"] == "cancelled":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Event has been cancelled."
            )

        target_id = str(user_id) if user_id else actor["id"]
        is_staff = await membership_service.can_manage_club(actor, str(event["club_id"]))

        if target_id != actor["id"] and not is_staff:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only club staff can check in other attendees."
            )

        if not is_staff:
            EventService._check_code(event, code)

        # Serialized with register and cancel for this event
        async with admission_locks.hold(str(event_id)):
            registration = await EventService.get_registration(event_id, target_id)
            if not registration or registration["status"] == "cancelled":
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="User is not registered for this event."
                )

            if registration["status"] == "attended":
                return {"message": "Already checked in.", "registration": registration}

            await database.execute(
                """
                UPDATE event_registrations SET status = 'attended', checked_in_at = :now
                WHERE id = :id AND status = 'registered'
                """,
                {"now": utcnow(), "id": str(registration["id"])}
            )

        await notification_service.notify(
            target_id, "checked_in", "Checked In!",
            f"You're checked in to \"{event['title']}\". Enjoy!", "📍"
        )

        logger.info("User %s checked in to event %s by %s", target_id, event_id, actor["id"])
        return {
            "message": "Checked in successfully!",
            "registration": await EventService.get_registration(event_id, target_id),
        }

    @staticmethod
    def _check_code(event: dict, code: Optional[str]) -> None:
        expected = event.get("checkin_code")
        if not code or not expected or not secrets.compare_digest(expected, code.strip().upper()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid check-in code."
            )
        expires_at = parse_timestamp(event.get("checkin_code_expires_at"))
        if expires_at and utcnow() > expires_at:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Check-in code expired. Ask the organiser for a new one."
            )

    @staticmethod
    async def generate_checkin_code(event_id: str, actor: dict) -> dict:
        """Fresh self check-in code for the event (club staff)"""
        event = await EventService.get_event_row(event_id)
        await EventService.require_event_staff(event, actor, "Only club staff can generate check-in codes.")

        code = secrets.token_hex(6).upper()
        expires_at = utcnow() + timedelta(hours=settings.CHECKIN_CODE_TTL_HOURS)

        await database.execute(
            "UPDATE events SET checkin_code = :code, checkin_code_expires_at = :expires_at WHERE id = :id",
            {"code": code, "expires_at": expires_at, "id": str(event_id)}
        )

        return {
            "event_id": str(event_id),
            "checkin_code": code,
            "qr_data": f"{QR_PREFIX}:{event_id}:{code}",
            "expires_at": expires_at,
        }

    @staticmethod
    async def update_status(event_id: str, new_status: str, actor: dict) -> dict:
        """
        Move an upcoming event to cancelled or completed

        Cancellation notifies everyone still registered.
        """
        if new_status not in TERMINAL_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Status must be 'cancelled' or 'completed'."
            )

        event = await EventService.get_event_row(event_id)
        await EventService.require_event_staff(event, actor)

        if event["status"] != "upcoming":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Event is already {event['status']}."
            )

        await database.execute(
            "UPDATE events SET status = :status WHERE id = :id",
            {"status": new_status, "id": str(event_id)}
        )

        if new_status == "cancelled":
            rows = await database.fetch_all(
                "SELECT user_id FROM event_registrations WHERE event_id = :event_id AND status = 'registered'",
                {"event_id": str(event_id)}
            )
            await notification_service.fan_out(
                [r["user_id"] for r in rows],
                "event_cancelled",
                "Event Cancelled",
                f"\"{event['title']}\" on {event['event_date']} has been cancelled.",
                "❌"
            )

        logger.info("Event %s set to %s by %s", event_id, new_status, actor["id"])
        return await EventService.get_event_row(event_id)

    @staticmethod
    async def checkin_status(event_id: str, actor: dict) -> dict:
        """Live attendance counts for club staff"""
        event = await EventService.get_event_row(event_id)
        await EventService.require_event_staff(event, actor)

        rows = await database.fetch_all(
            """
            SELECT r.user_id, r.status, r.checked_in_at, u.name, u.department
            FROM event_registrations r
            JOIN users u ON u.id = r.user_id
            WHERE r.event_id = :event_id AND r.status != 'cancelled'
            ORDER BY r.checked_in_at DESC, u.name
            """,
            {"event_id": str(event_id)}
        )
        attendees = [dict(r) for r in rows]
        total = len(attendees)
        checked_in = sum(1 for a in attendees if a["status"] == "attended")

        return {
            "total_registered": total,
            "checked_in": checked_in,
            "pending": total - checked_in,
            "check_in_rate": f"{round(checked_in / total * 100) if total else 0}%",
            "attendees": attendees,
        }

    @staticmethod
    async def share_links(event_id: str) -> dict:
        """Prefilled share URLs for the event page"""
        event = await database.fetch_one(
            """
            SELECT e.id, e.title, e.event_date, e.venue, c.name AS club_name
            FROM events e JOIN clubs c ON c.id = e.club_id
            WHERE e.id = :id
            """,
            {"id": str(event_id)}
        )
        if not event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Event not found."
            )

        url = f"{settings.APP_URL.rstrip('/')}/events/{event['id']}"
        text = f"Join me at \"{event['title']}\" by {event['club_name']} on {event['event_date']}"
        if event["venue"]:
            text += f" at {event['venue']}"

        return {
            "url": url,
            "text": text,
            "links": {
                "whatsapp": f"https://wa.me/?text={quote(text + ' ' + url)}",
                "twitter": f"https://twitter.com/intent/tweet?text={quote(text)}&url={quote(url)}",
                "linkedin": f"https://www.linkedin.com/sharing/share-offsite/?url={quote(url)}",
                "telegram": f"https://t.me/share/url?url={quote(url)}&text={quote(text)}",
                "email": f"mailto:?subject={quote(event['title'])}&body={quote(text + chr(10) + url)}",
            },
        }


# Create singleton instance
event_service = EventService()

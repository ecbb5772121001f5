"""
Export Service
Attendee and member lists as JSON or CSV
"""

import csv
import io

from fastapi import HTTPException, status

from app.database import database
from app.services.membership_service import membership_service

ATTENDEE_COLUMNS = ["sr_no", "name", "email", "department", "year", "status", "registered_at", "checked_in_at"]
MEMBER_COLUMNS = ["sr_no", "name", "email", "department", "year", "role", "joined_at"]


def rows_to_csv(rows: list, columns: list) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: "" if row.get(k) is None else row.get(k) for k in columns})
    return buffer.getvalue()


def safe_filename(name: str) -> str:
    cleaned = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in (name or "export"))
    return cleaned.strip("_") or "export"


class ExportService:

    @staticmethod
    async def event_attendees(event_id: str, actor: dict) -> dict:
        event = await database.fetch_one(
            "SELECT id, club_id, title FROM events WHERE id = :id",
            {"id": str(event_id)}
        )
        if not event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Event not found."
            )
        await membership_service.require_club_staff(
            actor, str(event["club_id"]), detail="Only club staff can export attendees."
        )

        registrations = await database.fetch_all(
            """
            SELECT r.status, r.registered_at, r.checked_in_at,
                   u.name, u.email, u.department, u.year
            FROM event_registrations r JOIN users u ON u.id = r.user_id
            WHERE r.event_id = :event_id
            ORDER BY r.registered_at
            """,
            {"event_id": str(event_id)}
        )
        rows = [{"sr_no": i, **dict(r)} for i, r in enumerate(registrations, start=1)]
        return {"event": event["title"], "total": len(rows), "attendees": rows}

    @staticmethod
    async def club_members(club_id: str, actor: dict) -> dict:
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
            actor, str(club_id), detail="Only club staff can export members."
        )

        members = await membership_service.list_members(str(club_id))
        rows = [{"sr_no": i, **m} for i, m in enumerate(members, start=1)]
        return {"club": club["name"], "total": len(rows), "members": rows}


# Create singleton instance
export_service = ExportService()

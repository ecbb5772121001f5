"""
Club Service
Business logic for club management
"""

import logging
from uuid import uuid4
from typing import Optional

from fastapi import HTTPException, status

from app.auth import ROLE_ADMIN, has_role
from app.database import database, utcnow
from app.schemas.club import CreateClubRequest, UpdateClubRequest
from app.services.membership_service import membership_service
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "members": "c.member_count DESC, c.name",
    "rating": "c.rating DESC, c.name",
    "newest": "c.created_at DESC",
}


class ClubService:
    """Service for club management operations"""

    @staticmethod
    async def get_club_by_id(club_id: str) -> dict:
        """Get club by ID"""
        club = await database.fetch_one(
            "SELECT * FROM clubs WHERE id = :id",
            {"id": str(club_id)}
        )

        if not club:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Club not found."
            )

        return dict(club)

    @staticmethod
    async def list_clubs(category: Optional[str] = None, search: Optional[str] = None, sort: str = "members") -> list:
        """Active clubs with their event counts"""
        query = """
            SELECT c.*,
                   (SELECT COUNT(*) FROM events e WHERE e.club_id = c.id) AS events_count
            FROM clubs c
            WHERE c.status = 'active'
        """
        values = {}

        if category and category.lower() != "all":
            query += " AND c.category = :category"
            values["category"] = category
        if search:
            query += " AND (LOWER(c.name) LIKE :search OR LOWER(COALESCE(c.description, '')) LIKE :search)"
            values["search"] = f"%{search.strip().lower()}%"

        query += f" ORDER BY {SORT_ORDERS.get(sort, SORT_ORDERS['members'])}"

        clubs = await database.fetch_all(query, values)
        return [dict(club) for club in clubs]

    @staticmethod
    async def get_club(club_id: str, principal: Optional[dict] = None) -> dict:
        """Club with members, upcoming events and the caller's own membership"""
        club = await ClubService.get_club_by_id(club_id)

        members = await membership_service.list_members(club_id)

        events = await database.fetch_all(
            """
            SELECT id, title, event_date, venue, status FROM events
            WHERE club_id = :club_id AND status = 'upcoming' AND event_date >= :today
            ORDER BY event_date
            LIMIT 5
            """,
            {"club_id": str(club_id), "today": utcnow().date()}
        )

        user_membership = None
        if principal:
            membership = await membership_service.get_membership(principal["id"], club_id)
            if membership:
                user_membership = {
                    "id": str(membership["id"]),
                    "role": membership["role"],
                    "status": membership["status"],
                }

        return {
            **club,
            "members": members,
            "upcoming_events": [dict(e) for e in events],
            "user_membership": user_membership,
        }

    @staticmethod
    async def create_club(data: CreateClubRequest, creator: dict) -> dict:
        """
        Create a club; admins create active clubs, everyone else files a request

        The creator always becomes the club's approved lead.
        """
        club_id = str(uuid4())
        is_admin = has_role(creator, (ROLE_ADMIN,))
        club_status = "active" if is_admin else "pending"
        now = utcnow()

        await database.execute(
            """
            INSERT INTO clubs (id, name, description, objectives, category, icon, color,
                               status, member_count, rating, created_by, created_at, updated_at)
            VALUES (:id, :name, :description, :objectives, :category, :icon, :color,
                    :status, 0, 0, :created_by, :created_at, :updated_at)
            """,
            {
                "id": club_id,
                "name": data.name.strip(),
                "description": data.description,
                "objectives": data.objectives,
                "category": data.category,
                "icon": data.icon or "🏛️",
                "color": data.color or "#6C5CE7",
                "status": club_status,
                "created_by": creator["id"],
                "created_at": now,
                "updated_at": now
            }
        )

        await membership_service.add_lead(creator["id"], club_id)
        await membership_service.refresh_member_count(club_id)

        if club_status == "pending":
            admins = await database.fetch_all("SELECT id FROM users WHERE role = 'admin'")
            await notification_service.fan_out(
                [a["id"] for a in admins],
                "club_request",
                "New Club Request",
                f"{creator['name']} wants to create \"{data.name}\"",
                "🏛️"
            )

        logger.info("Club %s created by %s (%s)", club_id, creator["id"], club_status)
        return await ClubService.get_club_by_id(club_id)

    @staticmethod
    async def update_club(club_id: str, data: UpdateClubRequest, actor: dict) -> dict:
        """Update club details (club lead or admin)"""
        await ClubService.get_club_by_id(club_id)
        await membership_service.require_club_staff(
            actor, club_id, roles=("lead",),
            detail="Only the club lead or an admin can edit this club."
        )

        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if updates:
            assignments = ", ".join(f"{field} = :{field}" for field in updates)
            await database.execute(
                f"UPDATE clubs SET {assignments}, updated_at = :updated_at WHERE id = :id",
                {**updates, "updated_at": utcnow(), "id": str(club_id)}
            )

        return await ClubService.get_club_by_id(club_id)

    @staticmethod
    async def review_club(club_id: str, new_status: str, admin: dict) -> dict:
        """
        Activate or deactivate a club (admin only)

        Activation promotes a student creator to club_lead.
        """
        if new_status not in ("active", "inactive"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Status must be 'active' or 'inactive'."
            )

        club = await ClubService.get_club_by_id(club_id)

        await database.execute(
            "UPDATE clubs SET status = :status, updated_at = :updated_at WHERE id = :id",
            {"status": new_status, "updated_at": utcnow(), "id": str(club_id)}
        )

        creator_id = club.get("created_by")
        if new_status == "active" and creator_id:
            await database.execute(
                "UPDATE users SET role = 'club_lead' WHERE id = :id AND role = 'student'",
                {"id": str(creator_id)}
            )
            await notification_service.notify(
                creator_id, "club_approved", "Club Approved!",
                f"\"{club['name']}\" is now active. You are its lead.", "🎉"
            )

        logger.info("Club %s set to %s by %s", club_id, new_status, admin["id"])
        return await ClubService.get_club_by_id(club_id)

    @staticmethod
    async def public_club_list() -> list:
        """Minimal list of active clubs for sign-up forms"""
        rows = await database.fetch_all(
            "SELECT id, name, icon, category FROM clubs WHERE status = 'active' ORDER BY name"
        )
        return [dict(r) for r in rows]


# Create singleton instance
club_service = ClubService()

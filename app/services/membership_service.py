"""
Membership Service
Join requests, approvals, leaving and club-level roles
"""

import logging
import uuid
from typing import Iterable, Optional

from fastapi import HTTPException, status

from app.auth import ROLE_ADMIN, has_role
from app.database import database, utcnow
from app.services.locks import row_locks
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

CLUB_ROLES = ("member", "co_lead", "lead")
STAFF_ROLES = ("lead", "co_lead")
DECISIONS = ("approved", "rejected")


class MembershipService:
    """Service for the per-(user, club) membership lifecycle"""

    @staticmethod
    async def get_membership(user_id: str, club_id: str) -> Optional[dict]:
        row = await database.fetch_one(
            "SELECT * FROM club_memberships WHERE user_id = :user_id AND club_id = :club_id",
            {"user_id": str(user_id), "club_id": str(club_id)}
        )
        return dict(row) if row else None

    @staticmethod
    async def club_role(user_id: str, club_id: str) -> Optional[str]:
        """Role held in the club through an approved membership, else None"""
        row = await database.fetch_one(
            """
            SELECT role FROM club_memberships
            WHERE user_id = :user_id AND club_id = :club_id AND status = 'approved'
            """,
            {"user_id": str(user_id), "club_id": str(club_id)}
        )
        return row["role"] if row else None

    @staticmethod
    async def can_manage_club(principal: Optional[dict], club_id: str, roles: Iterable[str] = STAFF_ROLES) -> bool:
        """
        Club-level capability check

        True for a global admin, or when the principal holds one of ``roles``
        in the club through an approved membership.
        """
        if not principal:
            return False
        if has_role(principal, (ROLE_ADMIN,)):
            return True
        role = await MembershipService.club_role(principal["id"], club_id)
        return role in set(roles)

    @staticmethod
    async def require_club_staff(
        principal: dict,
        club_id: str,
        roles: Iterable[str] = STAFF_ROLES,
        detail: str = "Only club leads, co-leads or admins can do this."
    ) -> None:
        if not await MembershipService.can_manage_club(principal, club_id, roles):
            logger.info("User %s denied staff action on club %s", principal["id"], club_id)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail
            )

    @staticmethod
    async def refresh_member_count(club_id: str) -> None:
        """Recompute the club's cached count of approved memberships"""
        await database.execute(
            """
            UPDATE clubs SET member_count = (
                SELECT COUNT(*) FROM club_memberships
                WHERE club_id = :club_id AND status = 'approved'
            )
            WHERE id = :club_id
            """,
            {"club_id": str(club_id)}
        )

    @staticmethod
    async def staff_user_ids(club_id: str) -> list:
        rows = await database.fetch_all(
            """
            SELECT user_id FROM club_memberships
            WHERE club_id = :club_id AND status = 'approved' AND role IN ('lead', 'co_lead')
            """,
            {"club_id": str(club_id)}
        )
        return [str(r["user_id"]) for r in rows]

    @staticmethod
    async def member_user_ids(club_id: str) -> list:
        rows = await database.fetch_all(
            "SELECT user_id FROM club_memberships WHERE club_id = :club_id AND status = 'approved'",
            {"club_id": str(club_id)}
        )
        return [str(r["user_id"]) for r in rows]

    @staticmethod
    async def add_lead(user_id: str, club_id: str) -> None:
        """Creator membership inserted directly as an approved lead"""
        await database.execute(
            """
            INSERT INTO club_memberships (id, user_id, club_id, role, status, joined_at)
            VALUES (:id, :user_id, :club_id, 'lead', 'approved', :joined_at)
            ON CONFLICT (user_id, club_id) DO NOTHING
            """,
            {
                "id": str(uuid.uuid4()),
                "user_id": str(user_id),
                "club_id": str(club_id),
                "joined_at": utcnow()
            }
        )

    @staticmethod
    async def request_join(user: dict, club_id: str) -> dict:
        """
        Ask to join an active club

        Raises:
            HTTPException: 404 unknown or non-active club, 409 already a
                member or already pending
        """
        club_id = str(club_id)
        club = await database.fetch_one(
            "SELECT id, name FROM clubs WHERE id = :id AND status = 'active'",
            {"id": club_id}
        )
        if not club:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Club not found."
            )

        async with row_locks.hold(("club_memberships", user["id"], club_id)):
            existing = await MembershipService.get_membership(user["id"], club_id)

            if existing and existing["status"] == "approved":
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="You are already a member of this club."
                )
            if existing and existing["status"] == "pending":
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Your request is already pending."
                )

            if existing:
                # rejected -> pending on the same row
                await database.execute(
                    """
                    UPDATE club_memberships
                    SET status = 'pending', role = 'member', joined_at = :joined_at
                    WHERE id = :id
                    """,
                    {"id": str(existing["id"]), "joined_at": utcnow()}
                )
                membership_id = str(existing["id"])
            else:
                membership_id = str(uuid.uuid4())
                await database.execute(
                    """
                    INSERT INTO club_memberships (id, user_id, club_id, role, status, joined_at)
                    VALUES (:id, :user_id, :club_id, 'member', 'pending', :joined_at)
                    ON CONFLICT (user_id, club_id) DO NOTHING
                    """,
                    {
                        "id": membership_id,
                        "user_id": user["id"],
                        "club_id": club_id,
                        "joined_at": utcnow()
                    }
                )

            membership = await MembershipService.get_membership(user["id"], club_id)
            if not membership or str(membership["id"]) != membership_id:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Your request is already pending."
                )

        await notification_service.fan_out(
            await MembershipService.staff_user_ids(club_id),
            "membership_request",
            "New Join Request",
            f"{user['name']} wants to join {club['name']}",
            "👋"
        )

        logger.info("User %s requested to join club %s", user["id"], club_id)
        return membership

    @staticmethod
    async def decide(membership_id: str, decision: str, actor: dict) -> dict:
        """
        Approve or reject a pending request

        Raises:
            HTTPException: 400 bad decision or not pending, 404 unknown
                membership, 403 actor is not club staff
        """
        if decision not in DECISIONS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Status must be 'approved' or 'rejected'."
            )

        membership = await database.fetch_one(
            """
            SELECT m.*, c.name AS club_name
            FROM club_memberships m
            JOIN clubs c ON c.id = m.club_id
            WHERE m.id = :id
            """,
            {"id": str(membership_id)}
        )
        if not membership:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Membership not found."
            )

        club_id = str(membership["club_id"])
        await MembershipService.require_club_staff(
            actor, club_id, detail="Only club leads, co-leads or admins can review requests."
        )

        if membership["status"] != "pending":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Request already {membership['status']}."
            )

        await database.execute(
            "UPDATE club_memberships SET status = :status WHERE id = :id",
            {"status": decision, "id": str(membership_id)}
        )
        await MembershipService.refresh_member_count(club_id)

        if decision == "approved":
            await notification_service.notify(
                membership["user_id"], "membership_approved", "Welcome to the club!",
                f"Your request to join {membership['club_name']} was approved.", "🎉"
            )
        else:
            await notification_service.notify(
                membership["user_id"], "membership_rejected", "Membership Update",
                f"Your request to join {membership['club_name']} was not approved.", "📋"
            )

        logger.info("Membership %s %s by %s", membership_id, decision, actor["id"])
        updated = await database.fetch_one(
            "SELECT * FROM club_memberships WHERE id = :id",
            {"id": str(membership_id)}
        )
        return dict(updated)

    @staticmethod
    async def leave(user: dict, club_id: str) -> None:
        """Delete the caller's membership row; leaving twice is fine"""
        await database.execute(
            "DELETE FROM club_memberships WHERE user_id = :user_id AND club_id = :club_id",
            {"user_id": user["id"], "club_id": str(club_id)}
        )
        await MembershipService.refresh_member_count(str(club_id))
        logger.info("User %s left club %s", user["id"], club_id)

    @staticmethod
    async def assign_role(membership_id: str, role: str, actor: dict) -> dict:
        """
        Change an approved member's club role (lead or admin only)
        """
        if role not in CLUB_ROLES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Role must be one of member, co_lead, lead."
            )

        membership = await database.fetch_one(
            """
            SELECT m.*, c.name AS club_name
            FROM club_memberships m
            JOIN clubs c ON c.id = m.club_id
            WHERE m.id = :id
            """,
            {"id": str(membership_id)}
        )
        if not membership:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Membership not found."
            )

        await MembershipService.require_club_staff(
            actor, str(membership["club_id"]), roles=("lead",),
            detail="Only the club lead or an admin can assign roles."
        )

        if membership["status"] != "approved":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only approved members can be given a role."
            )

        await database.execute(
            "UPDATE club_memberships SET role = :role WHERE id = :id",
            {"role": role, "id": str(membership_id)}
        )

        await notification_service.notify(
            membership["user_id"], "role_changed", "Role Updated",
            f"You are now {role.replace('_', '-')} of {membership['club_name']}.", "⭐"
        )

        updated = await database.fetch_one(
            "SELECT * FROM club_memberships WHERE id = :id",
            {"id": str(membership_id)}
        )
        return dict(updated)

    @staticmethod
    async def list_pending(club_id: str, actor: dict) -> list:
        await MembershipService.require_club_staff(
            actor, str(club_id), detail="Only club leads, co-leads or admins can view requests."
        )
        rows = await database.fetch_all(
            """
            SELECT m.id, m.user_id, m.joined_at,
                   u.name, u.email, u.department, u.year, u.profile_image
            FROM club_memberships m
            JOIN users u ON u.id = m.user_id
            WHERE m.club_id = :club_id AND m.status = 'pending'
            ORDER BY m.joined_at
            """,
            {"club_id": str(club_id)}
        )
        return [dict(r) for r in rows]

    @staticmethod
    async def list_members(club_id: str) -> list:
        """Approved members, leads first"""
        rows = await database.fetch_all(
            """
            SELECT m.user_id, m.role, m.joined_at,
                   u.name, u.email, u.department, u.year, u.profile_image
            FROM club_memberships m
            JOIN users u ON u.id = m.user_id
            WHERE m.club_id = :club_id AND m.status = 'approved'
            ORDER BY CASE m.role WHEN 'lead' THEN 0 WHEN 'co_lead' THEN 1 ELSE 2 END, m.joined_at
            """,
            {"club_id": str(club_id)}
        )
        return [dict(r) for r in rows]

    @staticmethod
    async def my_memberships(user_id: str) -> list:
        rows = await database.fetch_all(
            """
            SELECT m.id, m.club_id, m.role, m.status, m.joined_at,
                   c.name AS club_name, c.category, c.icon, c.color, c.member_count, c.rating
            FROM club_memberships m
            JOIN clubs c ON c.id = m.club_id
            WHERE m.user_id = :user_id
            ORDER BY m.joined_at DESC
            """,
            {"user_id": str(user_id)}
        )
        return [dict(r) for r in rows]


# Create singleton instance
membership_service = MembershipService()

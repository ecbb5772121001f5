"""
Auth Service
Account registration, login and profile
"""

import logging
from uuid import uuid4

from fastapi import HTTPException, status

from app.auth import (
    ROLE_STUDENT,
    MIN_PASSWORD_LENGTH,
    hash_password,
    verify_password,
    is_acceptable_password,
    create_user_token,
)
from app.config import settings
from app.database import database, utcnow
from app.schemas.auth import RegisterRequest, UpdateProfileRequest
from app.services.email_service import email_service
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

PUBLIC_USER_COLUMNS = "id, email, name, department, year, college_id, profile_image, role, created_at"


def public_user(user) -> dict:
    """Users row without the password hash"""
    data = dict(user)
    data.pop("password_hash", None)
    return data


class AuthService:

    @staticmethod
    async def admin_club_id(user_id: str):
        """First club the user leads, if any"""
        row = await database.fetch_one(
            """
            SELECT club_id FROM club_memberships
            WHERE user_id = :user_id AND role = 'lead' AND status = 'approved'
            ORDER BY joined_at
            LIMIT 1
            """,
            {"user_id": str(user_id)}
        )
        return row["club_id"] if row else None

    @staticmethod
    async def register(data: RegisterRequest) -> dict:
        """
        Create a student account and sign it in

        Raises:
            HTTPException: 400 weak password, 409 email already registered
        """
        if not is_acceptable_password(data.password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
            )

        email = data.email.strip().lower()
        existing = await database.fetch_one(
            "SELECT id FROM users WHERE email = :email",
            {"email": email}
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered."
            )

        user_id = str(uuid4())
        await database.execute(
            """
            INSERT INTO users (id, email, password_hash, name, department, year, college_id, role, created_at)
            VALUES (:id, :email, :password_hash, :name, :department, :year, :college_id, :role, :created_at)
            ON CONFLICT (email) DO NOTHING
            """,
            {
                "id": user_id,
                "email": email,
                "password_hash": hash_password(data.password),
                "name": data.name.strip(),
                "department": data.department,
                "year": data.year,
                "college_id": data.college_id,
                "role": ROLE_STUDENT,
                "created_at": utcnow()
            }
        )

        user = await database.fetch_one(
            f"SELECT {PUBLIC_USER_COLUMNS} FROM users WHERE email = :email",
            {"email": email}
        )
        if not user or str(user["id"]) != user_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered."
            )

        await notification_service.notify(
            user_id, "welcome", f"Welcome to {settings.APP_NAME}!",
            "Explore clubs and register for events to get started.", "🎉"
        )
        email_service.dispatch(email_service.send_welcome_email(email, user["name"]))

        logger.info("Registered user %s", user_id)
        user = public_user(user)
        user["admin_club_id"] = None
        return {
            "message": "Registration successful!",
            "token": create_user_token(user),
            "user": user,
        }

    @staticmethod
    async def login(email: str, password: str) -> dict:
        user = await database.fetch_one(
            "SELECT * FROM users WHERE email = :email",
            {"email": email.strip().lower()}
        )

        if not user or not verify_password(password, user["password_hash"]):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password."
            )

        user = public_user(user)
        user["admin_club_id"] = await AuthService.admin_club_id(user["id"])

        logger.info("User %s logged in", user["id"])
        return {
            "message": "Login successful!",
            "token": create_user_token(user),
            "user": user,
        }

    @staticmethod
    async def me(principal: dict) -> dict:
        """Current user with approved clubs and activity counters"""
        user = public_user(principal)

        clubs = await database.fetch_all(
            """
            SELECT m.club_id, m.role, m.joined_at, c.name, c.icon, c.color, c.category
            FROM club_memberships m JOIN clubs c ON c.id = m.club_id
            WHERE m.user_id = :user_id AND m.status = 'approved'
            ORDER BY m.joined_at
            """,
            {"user_id": user["id"]}
        )
        events_registered = await database.fetch_val(
            "SELECT COUNT(*) FROM event_registrations WHERE user_id = :user_id AND status != 'cancelled'",
            {"user_id": user["id"]}
        )
        certificates = await database.fetch_val(
            "SELECT COUNT(*) FROM certificates WHERE user_id = :user_id",
            {"user_id": user["id"]}
        )

        clubs = [dict(c) for c in clubs]
        lead_of = [c["club_id"] for c in clubs if c["role"] == "lead"]

        return {
            **user,
            "admin_club_id": lead_of[0] if lead_of else None,
            "clubs": clubs,
            "events_registered": events_registered or 0,
            "certificates": certificates or 0,
        }

    @staticmethod
    async def update_profile(principal: dict, data: UpdateProfileRequest) -> dict:
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if updates:
            assignments = ", ".join(f"{field} = :{field}" for field in updates)
            await database.execute(
                f"UPDATE users SET {assignments} WHERE id = :id",
                {**updates, "id": principal["id"]}
            )

        user = await database.fetch_one(
            f"SELECT {PUBLIC_USER_COLUMNS} FROM users WHERE id = :id",
            {"id": principal["id"]}
        )
        return dict(user)


# Create singleton instance
auth_service = AuthService()

"""
Certificate Service
Issues participation certificates from recorded attendance
"""

import logging
import secrets
from uuid import uuid4

from fastapi import HTTPException, status

from app.database import database, utcnow
from app.services.locks import row_locks
from app.services.membership_service import membership_service
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def generate_verification_code() -> str:
    """Public verification code, e.g. CH-3F9A0C1B2D4E5F60"""
    return "CH-" + secrets.token_hex(8).upper()


class CertificateService:
    """Service for certificate issuance and verification"""

    @staticmethod
    async def _get_event(event_id: str) -> dict:
        event = await database.fetch_one(
            "SELECT id, club_id, title, event_date FROM events WHERE id = :id",
            {"id": str(event_id)}
        )
        if not event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Event not found."
            )
        return dict(event)

    @staticmethod
    async def _create(event: dict, user_id: str, certificate_type: str, issued_by: str):
        """
        Insert one certificate under the (user, event) row lock

        Returns:
            The certificate dict, or None if one already existed
        """
        event_id = str(event["id"])
        async with row_locks.hold(("certificates", user_id, event_id)):
            certificate_id = str(uuid4())
            await database.execute(
                """
                INSERT INTO certificates (id, user_id, event_id, certificate_type, verification_code, issued_by, issued_at)
                VALUES (:id, :user_id, :event_id, :certificate_type, :verification_code, :issued_by, :issued_at)
                ON CONFLICT (user_id, event_id) DO NOTHING
                """,
                {
                    "id": certificate_id,
                    "user_id": user_id,
                    "event_id": event_id,
                    "certificate_type": certificate_type,
                    "verification_code": generate_verification_code(),
                    "issued_by": issued_by,
                    "issued_at": utcnow()
                }
            )
            certificate = await database.fetch_one(
                "SELECT * FROM certificates WHERE user_id = :user_id AND event_id = :event_id",
                {"user_id": user_id, "event_id": event_id}
            )

        if not certificate or str(certificate["id"]) != certificate_id:
            return None

        await notification_service.notify(
            user_id, "certificate_ready", "Certificate Ready!",
            f"Your {certificate_type} certificate for \"{event['title']}\" is ready.", "🏆"
        )
        return dict(certificate)

    @staticmethod
    async def issue(event_id: str, user_id: str, certificate_type: str, actor: dict) -> dict:
        """
        Issue a certificate to one attendee (club staff)

        Raises:
            HTTPException: 404 unknown event, 403 not staff, 400 the user did
                not attend, 409 already issued
        """
        event = await CertificateService._get_event(event_id)
        await membership_service.require_club_staff(
            actor, str(event["club_id"]), detail="Only club staff can issue certificates."
        )

        registration = await database.fetch_one(
            "SELECT status FROM event_registrations WHERE event_id = :event_id AND user_id = :user_id",
            {"event_id": str(event_id), "user_id": str(user_id)}
        )
        if not registration or registration["status"] != "attended":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User has not attended this event."
            )

        certificate = await CertificateService._create(event, str(user_id), certificate_type, actor["id"])
        if certificate is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Certificate already issued."
            )

        logger.info("Certificate %s issued to %s for event %s", certificate["verification_code"], user_id, event_id)
        return certificate

    @staticmethod
    async def bulk_issue(event_id: str, certificate_type: str, actor: dict) -> dict:
        """Issue to every attendee not yet certified; existing ones are skipped"""
        event = await CertificateService._get_event(event_id)
        await membership_service.require_club_staff(
            actor, str(event["club_id"]), detail="Only club staff can issue certificates."
        )

        attendees = await database.fetch_all(
            "SELECT user_id FROM event_registrations WHERE event_id = :event_id AND status = 'attended'",
            {"event_id": str(event_id)}
        )

        generated = 0
        skipped = 0
        for row in attendees:
            certificate = await CertificateService._create(event, str(row["user_id"]), certificate_type, actor["id"])
            if certificate is None:
                skipped += 1
            else:
                generated += 1

        logger.info("Bulk issue for event %s: %d generated, %d skipped", event_id, generated, skipped)
        return {
            "message": f"{generated} certificates generated.",
            "generated": generated,
            "skipped": skipped,
            "total_attendees": len(attendees),
        }

    @staticmethod
    async def verify(code: str) -> dict:
        """Public lookup by verification code; exposes no contact details"""
        certificate = await database.fetch_one(
            """
            SELECT c.certificate_type, c.issued_at, c.verification_code,
                   u.name AS holder_name, e.title AS event_title, e.event_date
            FROM certificates c
            JOIN users u ON u.id = c.user_id
            JOIN events e ON e.id = c.event_id
            WHERE c.verification_code = :code
            """,
            {"code": code.strip().upper()}
        )
        if not certificate:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Certificate not found or invalid."
            )

        return {"valid": True, **dict(certificate)}

    @staticmethod
    async def my_certificates(user_id: str) -> list:
        rows = await database.fetch_all(
            """
            SELECT c.*, e.title AS event_title, e.event_date, cl.name AS club_name
            FROM certificates c
            JOIN events e ON e.id = c.event_id
            JOIN clubs cl ON cl.id = e.club_id
            WHERE c.user_id = :user_id
            ORDER BY c.issued_at DESC
            """,
            {"user_id": str(user_id)}
        )
        return [dict(r) for r in rows]


# Create singleton instance
certificate_service = CertificateService()

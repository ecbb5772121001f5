"""
Feedback Service
Post-event ratings and the club rating cache
"""

import logging
from uuid import uuid4

from fastapi import HTTPException, status

from app.database import database, utcnow

logger = logging.getLogger(__name__)


class FeedbackService:

    @staticmethod
    async def refresh_club_rating(club_id: str) -> None:
        """Recompute the club's cached average rating across its events"""
        average = await database.fetch_val(
            """
            SELECT AVG(f.rating) FROM feedback f
            JOIN events e ON e.id = f.event_id
            WHERE e.club_id = :club_id
            """,
            {"club_id": str(club_id)}
        )
        await database.execute(
            "UPDATE clubs SET rating = :rating WHERE id = :id",
            {"rating": round(float(average), 1) if average is not None else 0, "id": str(club_id)}
        )

    @staticmethod
    async def submit(event_id: str, user: dict, rating: int, comment: str = None) -> tuple:
        """
        Create or replace the caller's feedback for an event

        Returns:
            (feedback dict, created flag)
        """
        if rating is None or not 1 <= rating <= 5:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Rating must be between 1 and 5."
            )

        event = await database.fetch_one(
            "SELECT id, club_id FROM events WHERE id = :id",
            {"id": str(event_id)}
        )
        if not event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Event not found."
            )

        registration = await database.fetch_one(
            "SELECT id FROM event_registrations WHERE event_id = :event_id AND user_id = :user_id",
            {"event_id": str(event_id), "user_id": user["id"]}
        )
        if not registration:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You must be registered for this event to give feedback."
            )

        existing = await database.fetch_one(
            "SELECT id FROM feedback WHERE event_id = :event_id AND user_id = :user_id",
            {"event_id": str(event_id), "user_id": user["id"]}
        )

        await database.execute(
            """
            INSERT INTO feedback (id, event_id, user_id, rating, comment, submitted_at)
            VALUES (:id, :event_id, :user_id, :rating, :comment, :submitted_at)
            ON CONFLICT (event_id, user_id)
            DO UPDATE SET rating = excluded.rating, comment = excluded.comment, submitted_at = excluded.submitted_at
            """,
            {
                "id": str(uuid4()),
                "event_id": str(event_id),
                "user_id": user["id"],
                "rating": rating,
                "comment": comment,
                "submitted_at": utcnow()
            }
        )

        await FeedbackService.refresh_club_rating(str(event["club_id"]))

        feedback = await database.fetch_one(
            "SELECT * FROM feedback WHERE event_id = :event_id AND user_id = :user_id",
            {"event_id": str(event_id), "user_id": user["id"]}
        )
        return dict(feedback), existing is None

    @staticmethod
    async def list_feedback(event_id: str) -> dict:
        """Reviews newest first plus average and 1-5 distribution"""
        rows = await database.fetch_all(
            """
            SELECT f.*, u.name AS user_name, u.profile_image
            FROM feedback f
            JOIN users u ON u.id = f.user_id
            WHERE f.event_id = :event_id
            ORDER BY f.submitted_at DESC
            """,
            {"event_id": str(event_id)}
        )
        reviews = [dict(r) for r in rows]

        distribution = {score: 0 for score in range(1, 6)}
        for review in reviews:
            distribution[review["rating"]] += 1

        total = len(reviews)
        average = round(sum(r["rating"] for r in reviews) / total, 1) if total else 0

        return {
            "reviews": reviews,
            "summary": {
                "average_rating": average,
                "total_reviews": total,
                "distribution": distribution,
            },
        }


# Create singleton instance
feedback_service = FeedbackService()

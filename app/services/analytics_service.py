"""
Analytics Service
Read-only rollups: platform overview, per-user activity, leaderboard,
event insights, club suggestions and description drafts
"""

import logging
import random
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import HTTPException, status

from app.database import database, utcnow, parse_timestamp

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 20
SUGGESTION_COUNT = 5
TREND_MONTHS = 6

EVENT_TEMPLATES = [
    "Join us for \"{name}\", a {category} event organised by {club}. Learn something new, meet people "
    "who share your interests and leave with ideas worth building on. Beginners welcome, seats are limited!",
    "{name} is here! {club} brings together students from every department for hands-on sessions, "
    "mentors and a few challenges along the way. Bring a friend and register early.",
    "Calling all {category} enthusiasts: \"{name}\" by {club} is the event you have been waiting for. "
    "Practical sessions, teamwork and certificates for every participant.",
]

CLUB_TEMPLATES = [
    "Welcome to {name}! We are a student community built around {category}. Workshops, projects, "
    "competitions and socials give members room to explore, build skills and make friends.",
    "{name} is where curiosity meets community. From beginner-friendly sessions to advanced projects, "
    "there is always something happening. Join us and find your people.",
    "At {name} we learn by doing: real projects, speaker sessions and friendly competitions around "
    "{category}. New or experienced, there is a place for you here.",
]


def _month_start(moment: datetime, months_back: int = 0) -> datetime:
    year, month = moment.year, moment.month - months_back
    while month <= 0:
        month += 12
        year -= 1
    return datetime(year, month, 1, tzinfo=timezone.utc)


def _next_month(start: datetime) -> datetime:
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def activity_score(clubs: int, attended: int, certificates: int, feedback: int) -> int:
    """Engagement score capped at 100"""
    return min(100, clubs * 10 + attended * 8 + certificates * 15 + feedback * 5)


def leaderboard_score(attended: int, certificates: int, clubs: int) -> int:
    return attended * 10 + certificates * 15 + clubs * 5


async def _count(query: str, values: Optional[dict] = None) -> int:
    return await database.fetch_val(query, values or {}) or 0


class AnalyticsService:
    """Service for read-only rollups and club or event suggestions"""

    @staticmethod
    async def platform_stats() -> dict:
        """Public headline counters"""
        return {
            "clubs": await _count("SELECT COUNT(*) FROM clubs WHERE status = 'active'"),
            "events": await _count("SELECT COUNT(*) FROM events"),
            "users": await _count("SELECT COUNT(*) FROM users"),
            "certificates": await _count("SELECT COUNT(*) FROM certificates"),
        }

    @staticmethod
    async def overview() -> dict:
        now = utcnow()
        totals = await AnalyticsService.platform_stats()
        totals["upcoming_events"] = await _count(
            "SELECT COUNT(*) FROM events WHERE status = 'upcoming' AND event_date >= :today",
            {"today": now.date()}
        )

        average = await database.fetch_val("SELECT AVG(rating) FROM feedback")
        engagement = {
            "average_rating": round(float(average), 1) if average is not None else 0,
            "recent_registrations_7d": await _count(
                "SELECT COUNT(*) FROM event_registrations WHERE registered_at >= :since",
                {"since": now - timedelta(days=7)}
            ),
            "new_members_this_month": await _count(
                "SELECT COUNT(*) FROM club_memberships WHERE status = 'approved' AND joined_at >= :since",
                {"since": _month_start(now)}
            ),
        }

        top_clubs = await database.fetch_all(
            """
            SELECT id, name, icon, member_count, rating FROM clubs
            WHERE status = 'active'
            ORDER BY member_count DESC, rating DESC
            LIMIT 5
            """
        )

        event_types = await database.fetch_all(
            "SELECT event_type, COUNT(*) AS total FROM events GROUP BY event_type"
        )
        categories = await database.fetch_all(
            "SELECT category, COUNT(*) AS total FROM clubs WHERE status = 'active' GROUP BY category"
        )

        monthly_trend = []
        for months_back in range(TREND_MONTHS - 1, -1, -1):
            start = _month_start(now, months_back)
            registrations = await _count(
                "SELECT COUNT(*) FROM event_registrations WHERE registered_at >= :start AND registered_at < :end",
                {"start": start, "end": _next_month(start)}
            )
            monthly_trend.append({"month": start.strftime("%b"), "registrations": registrations})

        return {
            "totals": totals,
            "engagement": engagement,
            "top_clubs": [dict(c) for c in top_clubs],
            "events_by_type": {r["event_type"]: r["total"] for r in event_types},
            "clubs_by_category": {r["category"]: r["total"] for r in categories},
            "monthly_trend": monthly_trend,
        }

    @staticmethod
    async def user_analytics(user_id: str, viewer: dict) -> dict:
        """Activity summary for one user; others' summaries are admin-only"""
        user_id = viewer["id"] if user_id == "me" else str(user_id)
        if user_id != viewer["id"] and viewer.get("role") != "admin":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only view your own analytics."
            )

        clubs = await database.fetch_all(
            """
            SELECT m.club_id, m.role, m.joined_at, c.name, c.icon
            FROM club_memberships m JOIN clubs c ON c.id = m.club_id
            WHERE m.user_id = :user_id AND m.status = 'approved'
            """,
            {"user_id": user_id}
        )
        registrations = await database.fetch_all(
            """
            SELECT r.status, r.registered_at, e.title, e.event_date, e.icon
            FROM event_registrations r JOIN events e ON e.id = r.event_id
            WHERE r.user_id = :user_id
            ORDER BY r.registered_at DESC
            """,
            {"user_id": user_id}
        )
        certificates = await database.fetch_all(
            """
            SELECT c.certificate_type, c.issued_at, c.verification_code, e.title
            FROM certificates c JOIN events e ON e.id = c.event_id
            WHERE c.user_id = :user_id
            """,
            {"user_id": user_id}
        )
        ratings = [
            r["rating"] for r in await database.fetch_all(
                "SELECT rating FROM feedback WHERE user_id = :user_id",
                {"user_id": user_id}
            )
        ]

        total = len(registrations)
        attended = sum(1 for r in registrations if r["status"] == "attended")

        return {
            "clubs_joined": len(clubs),
            "events_registered": total,
            "events_attended": attended,
            "attendance_rate": f"{round(attended / total * 100)}%" if total else "N/A",
            "certificates_earned": len(certificates),
            "feedback_given": len(ratings),
            "average_rating_given": round(sum(ratings) / len(ratings), 1) if ratings else None,
            "activity_score": activity_score(len(clubs), attended, len(certificates), len(ratings)),
            "clubs": [dict(c) for c in clubs],
            "recent_events": [dict(r) for r in registrations[:10]],
            "certificates": [dict(c) for c in certificates],
        }

    @staticmethod
    async def leaderboard() -> dict:
        rows = await database.fetch_all(
            """
            SELECT u.id, u.name, u.department, u.year, u.profile_image,
                   (SELECT COUNT(*) FROM event_registrations r
                    WHERE r.user_id = u.id AND r.status = 'attended') AS events_attended,
                   (SELECT COUNT(*) FROM certificates c WHERE c.user_id = u.id) AS certificates,
                   (SELECT COUNT(*) FROM club_memberships m
                    WHERE m.user_id = u.id AND m.status = 'approved') AS clubs
            FROM users u
            """
        )

        entries = []
        for row in rows:
            entry = dict(row)
            entry["score"] = leaderboard_score(entry["events_attended"], entry["certificates"], entry["clubs"])
            entries.append(entry)

        entries.sort(key=lambda e: (-e["score"], e["name"]))
        return {"leaderboard": entries[:LEADERBOARD_SIZE], "updated_at": utcnow()}

    @staticmethod
    async def event_insights(event_id: str) -> dict:
        event = await database.fetch_one(
            "SELECT e.*, c.name AS club_name FROM events e JOIN clubs c ON c.id = e.club_id WHERE e.id = :id",
            {"id": str(event_id)}
        )
        if not event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Event not found."
            )

        registrations = await database.fetch_all(
            """
            SELECT r.status, r.registered_at, u.department, u.year
            FROM event_registrations r JOIN users u ON u.id = r.user_id
            WHERE r.event_id = :event_id
            """,
            {"event_id": str(event_id)}
        )
        active = [r for r in registrations if r["status"] != "cancelled"]
        total_registered = len(active)
        attended = sum(1 for r in active if r["status"] == "attended")

        departments = Counter(r["department"] or "Unknown" for r in active)
        years = Counter(r["year"] or "Unknown" for r in active)
        daily = Counter(
            parse_timestamp(r["registered_at"]).date().isoformat()
            for r in registrations if r["registered_at"]
        )

        average = await database.fetch_val(
            "SELECT AVG(rating) FROM feedback WHERE event_id = :event_id",
            {"event_id": str(event_id)}
        )
        average = round(float(average), 1) if average is not None else None

        capacity = event["max_participants"]
        fill_rate = round(total_registered / capacity * 100) if capacity else 0

        insights = []
        if fill_rate > 90:
            insights.append("🔥 This event is almost full! High demand.")
        elif fill_rate > 50:
            insights.append("📈 Over 50% capacity filled. Good engagement.")
        elif fill_rate < 20:
            insights.append("⚠️ Low registrations. Consider more promotion.")
        if attended and total_registered:
            insights.append(f"📊 Attendance rate: {round(attended / total_registered * 100)}%")
        if average is not None and average >= 4.5:
            insights.append("⭐ Highly rated event!")
        if departments:
            top_department, _ = departments.most_common(1)[0]
            insights.append(f"🏆 Most registrations from {top_department} department")

        return {
            "event": event["title"],
            "club": event["club_name"],
            "stats": {
                "total_registered": total_registered,
                "attended": attended,
                "max_capacity": capacity,
                "fill_rate": f"{fill_rate}%",
                "average_rating": average,
            },
            "department_breakdown": dict(departments),
            "year_breakdown": dict(years),
            "daily_registrations": dict(sorted(daily.items())),
            "insights": insights,
        }

    @staticmethod
    async def suggest_clubs(user_id: str, interests: Optional[List[str]] = None) -> dict:
        """Active clubs the user has no membership row in, interest matches first"""
        rows = await database.fetch_all(
            """
            SELECT * FROM clubs c
            WHERE c.status = 'active'
              AND NOT EXISTS (
                  SELECT 1 FROM club_memberships m
                  WHERE m.club_id = c.id AND m.user_id = :user_id
              )
            ORDER BY c.rating DESC, c.member_count DESC
            """,
            {"user_id": str(user_id)}
        )
        available = [dict(r) for r in rows]

        terms = [i.strip().lower() for i in (interests or []) if i and i.strip()]

        def matches(club: dict) -> bool:
            haystack = " ".join([club["category"], club["name"], club.get("description") or ""]).lower()
            return any(term in haystack for term in terms)

        # stable sort keeps rating order within each group
        ranked = sorted(available, key=lambda c: not matches(c)) if terms else available

        return {
            "recommendations": ranked[:SUGGESTION_COUNT],
            "total_available": len(available),
        }

    @staticmethod
    def generate_description(kind: str, name: str, club_name: Optional[str] = None,
                             category: Optional[str] = None) -> dict:
        """Draft description for a club or event, picked from fixed templates"""
        name = name.strip()
        if not name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Name is required."
            )
        templates = CLUB_TEMPLATES if kind == "club" else EVENT_TEMPLATES
        description = random.choice(templates).format(
            name=name,
            club=club_name or "our club",
            category=category or "campus",
        )
        return {
            "description": description,
            "generated_at": utcnow(),
            "note": "Generated description. Feel free to edit!",
        }


# Create singleton instance
analytics_service = AnalyticsService()

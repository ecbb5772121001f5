"""
Database Models
Import all models here for Alembic migrations
"""

from app.models.user import User
from app.models.club import Club, ClubMembership
from app.models.event import Event, EventRegistration, Feedback
from app.models.certificate import Certificate
from app.models.notification import Notification
from app.models.chat import ChatMessage

__all__ = [
    "User",
    "Club",
    "ClubMembership",
    "Event",
    "EventRegistration",
    "Feedback",
    "Certificate",
    "Notification",
    "ChatMessage",
]

"""
Club Models
Clubs and the membership rows linking users to them
"""

from sqlalchemy import Column, String, Integer, Float, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class Club(Base):
    __tablename__ = "clubs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    objectives = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)
    icon = Column(String(20), nullable=True)
    color = Column(String(50), nullable=True)

    # 'pending', 'active' or 'inactive'
    status = Column(String(20), nullable=False, default="pending", index=True)

    # Derived caches, refreshed by the membership and feedback services
    member_count = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0)

    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("User", backref="created_clubs")


class ClubMembership(Base):
    __tablename__ = "club_memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "club_id", name="uq_club_memberships_user_club"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    club_id = Column(UUID(as_uuid=True), ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)

    # 'member', 'co_lead' or 'lead'
    role = Column(String(20), nullable=False, default="member")
    # 'pending', 'approved' or 'rejected'
    status = Column(String(20), nullable=False, default="pending")
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="memberships")
    club = relationship("Club", backref="memberships")

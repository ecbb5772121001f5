"""
User Model
Students, club leads and admins
"""

from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
import uuid
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)

    # Profile
    department = Column(String(100), nullable=True)
    year = Column(String(20), nullable=True)
    college_id = Column(String(50), nullable=True)
    profile_image = Column(String, nullable=True)

    # 'student', 'club_lead' or 'admin'
    role = Column(String(20), nullable=False, default="student")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

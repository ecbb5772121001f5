"""
Chat Message Model
Club chat, delivered by polling
"""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    club_id = Column(UUID(as_uuid=True), ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    message = Column(Text, nullable=False)
    message_type = Column(String(20), nullable=False, default="text")
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    club = relationship("Club", backref="chat_messages")
    sender = relationship("User", backref="chat_messages")

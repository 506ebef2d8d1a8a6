from sqlalchemy import Column, String, Boolean, DateTime, Integer, BigInteger, ForeignKey, JSON, Text, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class ChatSessionStatus(str, enum.Enum):
    """
    draft    - created when the builder opens, before the first message
    active   - has at least one message
    archived - hidden from the default list
    deleted  - soft deleted
    """
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class ChatSession(Base):
    """A builder conversation. The id is generated by the browser."""
    __tablename__ = "chat_sessions"

    id = Column(GUID, primary_key=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=True)
    status = Column(String(20), default=ChatSessionStatus.ACTIVE.value, nullable=False, index=True)
    current_stage = Column(Integer, default=1, nullable=False)  # 1-6

    # Presentation outputs
    strawman_preview_url = Column(Text, nullable=True)
    final_presentation_url = Column(Text, nullable=True)
    strawman_presentation_id = Column(String(255), nullable=True)
    final_presentation_id = Column(String(255), nullable=True)
    slide_count = Column(Integer, nullable=True)

    is_favorite = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    first_message_at = Column(DateTime, nullable=True)
    last_message_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="chat_sessions")
    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ChatMessage.timestamp",
    )
    uploaded_files = relationship("UploadedFile", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_chat_sessions_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<ChatSession {self.id} ({self.status})>"


class ChatMessage(Base):
    """A message exchanged in a chat session. Ids come from the client so saves can be retried."""
    __tablename__ = "chat_messages"

    id = Column(String(255), primary_key=True)
    session_id = Column(GUID, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)

    message_type = Column(String(50), nullable=False)
    timestamp = Column(DateTime, nullable=False)
    payload = Column(JSON, nullable=False)
    user_text = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("ChatSession", back_populates="messages")

    def __repr__(self):
        return f"<ChatMessage {self.id} {self.message_type}>"


class UploadedFile(Base):
    """File attached to a chat session and pushed to the knowledge store"""
    __tablename__ = "uploaded_files"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    session_id = Column(GUID, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    file_name = Column(String(512), nullable=False)
    file_size = Column(BigInteger, nullable=False)  # bytes
    file_type = Column(String(255), nullable=True)  # MIME type
    store_name = Column(String(255), nullable=True)
    store_file_id = Column(String(255), nullable=True)

    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("ChatSession", back_populates="uploaded_files")

    def __repr__(self):
        return f"<UploadedFile {self.file_name}>"

from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class AuditLog(Base):
    """Admin actions: approvals, revocations and session cleanups"""
    __tablename__ = "audit_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    # Null when the action was triggered by the cron secret rather than a signed-in admin
    admin_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    action = Column(String(100), nullable=False)  # e.g. 'user_approved', 'sessions_cleaned'
    target_type = Column(String(50), nullable=False)  # 'user', 'chat_session'
    target_id = Column(String(255), nullable=True)

    details = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    admin = relationship("User", foreign_keys=[admin_id])

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.admin_id}>"

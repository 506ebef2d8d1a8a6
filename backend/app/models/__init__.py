# Re-export all models for convenient imports
from app.models.user import User, UserRole, UserTier
from app.models.chat_session import ChatSession, ChatSessionStatus, ChatMessage, UploadedFile
from app.models.billing import (
    Subscription,
    Payment,
    PaymentStatus,
    BillingCycle,
    ACTIVE_SUBSCRIPTION_STATUSES,
)
from app.models.audit_log import AuditLog

__all__ = [
    # User
    "User",
    "UserRole",
    "UserTier",
    # Chat sessions
    "ChatSession",
    "ChatSessionStatus",
    "ChatMessage",
    "UploadedFile",
    # Billing
    "Subscription",
    "Payment",
    "PaymentStatus",
    "BillingCycle",
    "ACTIVE_SUBSCRIPTION_STATUSES",
    # Admin
    "AuditLog",
]

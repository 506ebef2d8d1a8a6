from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class BillingCycle(str, enum.Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class PaymentStatus(str, enum.Enum):
    PAID = "paid"
    FAILED = "failed"


# Stripe subscription statuses that grant the paid tier
ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")


class Subscription(Base):
    """Mirror of a Stripe subscription, upserted from webhooks"""
    __tablename__ = "subscriptions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    stripe_subscription_id = Column(String(255), unique=True, nullable=False)
    stripe_customer_id = Column(String(255), nullable=False)
    stripe_price_id = Column(String(255), nullable=False)
    stripe_product_id = Column(String(255), nullable=True)

    # Stripe status string: active, trialing, past_due, canceled, ...
    status = Column(String(50), nullable=False)
    tier = Column(String(20), default="pro", nullable=False)
    billing_cycle = Column(String(20), default=BillingCycle.MONTHLY.value, nullable=False)

    current_period_start = Column(DateTime, nullable=True)
    current_period_end = Column(DateTime, nullable=True)
    cancel_at_period_end = Column(Boolean, default=False, nullable=False)
    canceled_at = Column(DateTime, nullable=True)
    trial_start = Column(DateTime, nullable=True)
    trial_end = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="subscriptions")

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_SUBSCRIPTION_STATUSES

    def __repr__(self):
        return f"<Subscription {self.stripe_subscription_id} ({self.status})>"


class Payment(Base):
    """Invoice payment recorded from invoice.payment_* webhooks"""
    __tablename__ = "payments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    stripe_invoice_id = Column(String(255), nullable=False, index=True)
    stripe_payment_intent_id = Column(String(255), nullable=True)
    stripe_subscription_id = Column(String(255), nullable=True)

    amount = Column(Integer, nullable=False)  # smallest currency unit
    currency = Column(String(10), nullable=False)
    status = Column(String(20), nullable=False)

    invoice_url = Column(Text, nullable=True)
    invoice_pdf = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="payments")

    def __repr__(self):
        return f"<Payment {self.stripe_invoice_id} {self.amount} {self.currency} ({self.status})>"

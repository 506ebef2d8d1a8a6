from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime


class CheckoutSessionRequest(BaseModel):
    price_id: str = Field(..., min_length=1)
    billing_cycle: Literal["monthly", "yearly"] = "monthly"


class CheckoutSessionResponse(BaseModel):
    session_id: str
    url: Optional[str]


class PortalSessionResponse(BaseModel):
    url: str


class SubscriptionResponse(BaseModel):
    id: str
    stripe_subscription_id: str
    stripe_price_id: str
    status: str
    tier: str
    billing_cycle: str
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]
    cancel_at_period_end: bool
    canceled_at: Optional[datetime]
    trial_end: Optional[datetime]

    class Config:
        from_attributes = True


class SubscriptionStatusResponse(BaseModel):
    """tier mirrors the user row; subscription is null on the free tier"""
    tier: str
    subscription: Optional[SubscriptionResponse] = None


class WebhookResponse(BaseModel):
    received: bool = True

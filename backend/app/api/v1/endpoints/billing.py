"""
Billing API endpoints - Stripe checkout, customer portal, subscription status
and the webhook receiver.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import DecksterError
from app.core.logging_config import logger
from app.core.rate_limiter import billing_rate_limit
from app.models.user import User
from app.modules.auth.dependencies import get_approved_user
from app.schemas.billing import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    PortalSessionResponse,
    SubscriptionResponse,
    SubscriptionStatusResponse,
    WebhookResponse,
)
from app.services.stripe_service import StripeBillingService, get_billing_service

router = APIRouter()


@router.post("/checkout-session", response_model=CheckoutSessionResponse)
@billing_rate_limit()
async def create_checkout_session(
    request: Request,
    checkout: CheckoutSessionRequest,
    current_user: User = Depends(get_approved_user),
    db: AsyncSession = Depends(get_db),
    billing: StripeBillingService = Depends(get_billing_service)
):
    """Start a Stripe Checkout subscription for one of the configured Pro prices"""
    session = await billing.create_checkout_session(db, current_user, checkout.price_id, checkout.billing_cycle)
    await db.commit()
    return session


@router.post("/portal-session", response_model=PortalSessionResponse)
async def create_portal_session(
    current_user: User = Depends(get_approved_user),
    billing: StripeBillingService = Depends(get_billing_service)
):
    """Stripe customer portal for managing payment methods and cancelling"""
    url = await billing.create_portal_session(current_user)
    return PortalSessionResponse(url=url)


@router.get("/subscription", response_model=SubscriptionStatusResponse)
async def get_subscription(
    current_user: User = Depends(get_approved_user),
    db: AsyncSession = Depends(get_db),
    billing: StripeBillingService = Depends(get_billing_service)
):
    subscription = await billing.get_user_subscription(db, current_user)
    return SubscriptionStatusResponse(
        tier=current_user.tier.value,
        subscription=SubscriptionResponse.model_validate(subscription) if subscription else None,
    )


@router.post("/webhook", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    billing: StripeBillingService = Depends(get_billing_service)
):
    """
    Stripe webhook receiver.

    The raw body is needed for signature verification, so the event is read
    from the request rather than a parsed model. Handler failures roll back
    and return 500 so Stripe retries the delivery.
    """
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing stripe-signature header"
        )

    payload = await request.body()
    event = billing.construct_event(payload, signature)

    try:
        await billing.handle_event(db, event)
        await db.commit()
    except DecksterError:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"[Billing] Webhook handler failed for {event.get('type')}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook handler failed"
        )

    return WebhookResponse()

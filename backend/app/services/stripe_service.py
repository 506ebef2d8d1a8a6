"""
Stripe Billing Service
======================
Pro subscriptions through Stripe Checkout, the customer portal, and the
webhook handlers that keep users and subscriptions in sync.

Flow:
1. Frontend calls /billing/checkout-session with a configured price id
2. User pays on the Stripe-hosted checkout page
3. Stripe sends customer.subscription.* and invoice.* webhooks
4. Handlers upsert Subscription rows, set the user tier and record Payments

The service is built once at startup with explicit keys. Stripe SDK calls
are blocking, so they run in a worker thread.
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional

import stripe
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from fastapi import Request

from app.core.config import settings
from app.core.exceptions import BillingError, BillingNotConfiguredError, ValidationError, WebhookSignatureError
from app.core.logging_config import logger
from app.models.billing import (
    ACTIVE_SUBSCRIPTION_STATUSES,
    BillingCycle,
    Payment,
    PaymentStatus,
    Subscription,
)
from app.models.user import User, UserTier


def _from_timestamp(value: Optional[int]) -> Optional[datetime]:
    return datetime.utcfromtimestamp(value) if value else None


def _first_price(subscription: Dict[str, Any]) -> Dict[str, Any]:
    items = (subscription.get("items") or {}).get("data") or []
    if not items:
        return {}
    return items[0].get("price") or {}


def _period(subscription: Dict[str, Any], key: str) -> Optional[int]:
    # Newer API versions moved billing periods from the subscription onto its items
    value = subscription.get(key)
    if value is None:
        items = (subscription.get("items") or {}).get("data") or []
        if items:
            value = items[0].get(key)
    return value


class StripeBillingService:

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        monthly_price_id: str,
        yearly_price_id: str,
        app_url: str,
    ):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.monthly_price_id = monthly_price_id
        self.yearly_price_id = yearly_price_id
        self.app_url = app_url.rstrip("/")

    @classmethod
    def from_settings(cls) -> "StripeBillingService":
        return cls(
            secret_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            monthly_price_id=settings.STRIPE_PRO_MONTHLY_PRICE_ID,
            yearly_price_id=settings.STRIPE_PRO_YEARLY_PRICE_ID,
            app_url=settings.APP_URL,
        )

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    @property
    def price_ids(self) -> list:
        return [price_id for price_id in (self.monthly_price_id, self.yearly_price_id) if price_id]

    def _require_configured(self) -> None:
        if not self.configured:
            raise BillingNotConfiguredError()

    def billing_cycle_for(self, price_id: Optional[str]) -> str:
        if price_id and price_id == self.yearly_price_id:
            return BillingCycle.YEARLY.value
        return BillingCycle.MONTHLY.value

    # ============================================
    # Stripe SDK calls
    # ============================================

    async def _create_customer(self, user: User) -> str:
        customer = await run_in_threadpool(
            stripe.Customer.create,
            email=user.email,
            name=user.full_name or None,
            metadata={"userId": str(user.id)},
            api_key=self.secret_key,
        )
        return customer["id"]

    async def get_or_create_customer(self, db: AsyncSession, user: User) -> str:
        if user.stripe_customer_id:
            return user.stripe_customer_id

        self._require_configured()
        try:
            customer_id = await self._create_customer(user)
        except stripe.StripeError as e:
            logger.error(f"[Billing] Customer creation failed for {user.id}: {e}")
            raise BillingError("Failed to create customer") from e

        user.stripe_customer_id = customer_id
        await db.flush()
        logger.log_billing_event("customer_created", user_id=str(user.id), stripe_customer_id=customer_id)
        return customer_id

    async def create_checkout_session(
        self, db: AsyncSession, user: User, price_id: str, billing_cycle: str
    ) -> Dict[str, Any]:
        self._require_configured()
        if price_id not in self.price_ids:
            raise ValidationError("Invalid price ID", field="price_id")

        customer_id = await self.get_or_create_customer(db, user)

        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                customer=customer_id,
                mode="subscription",
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=f"{self.app_url}/billing?success=true&session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{self.app_url}/pricing?canceled=true",
                metadata={"userId": str(user.id), "billingCycle": billing_cycle},
                allow_promotion_codes=True,
                billing_address_collection="auto",
                customer_update={"address": "auto"},
                api_key=self.secret_key,
            )
        except stripe.StripeError as e:
            logger.error(f"[Billing] Checkout session failed for {user.id}: {e}")
            raise BillingError("Failed to create checkout session") from e

        logger.log_billing_event("checkout_created", user_id=str(user.id), price_id=price_id)
        return {"session_id": session["id"], "url": session["url"]}

    async def create_portal_session(self, user: User) -> str:
        self._require_configured()
        if not user.stripe_customer_id:
            raise ValidationError("No billing account found", field="stripe_customer_id")

        try:
            portal = await run_in_threadpool(
                stripe.billing_portal.Session.create,
                customer=user.stripe_customer_id,
                return_url=f"{self.app_url}/billing",
                api_key=self.secret_key,
            )
        except stripe.StripeError as e:
            logger.error(f"[Billing] Portal session failed for {user.id}: {e}")
            raise BillingError("Failed to create portal session") from e
        return portal["url"]

    def construct_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Verify the Stripe-Signature header and return the event as plain dicts"""
        if not self.webhook_secret:
            raise BillingNotConfiguredError()
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as e:
            raise WebhookSignatureError("Invalid payload") from e
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError() from e
        return json.loads(payload)

    # ============================================
    # Queries
    # ============================================

    @staticmethod
    async def get_user_subscription(db: AsyncSession, user: User) -> Optional[Subscription]:
        result = await db.execute(
            select(Subscription)
            .where(
                Subscription.user_id == user.id,
                Subscription.status.in_(ACTIVE_SUBSCRIPTION_STATUSES),
            )
            .order_by(Subscription.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _user_by_customer(db: AsyncSession, customer_id: Optional[str]) -> Optional[User]:
        if not customer_id:
            return None
        result = await db.execute(select(User).where(User.stripe_customer_id == customer_id))
        return result.scalar_one_or_none()

    # ============================================
    # Webhook handlers
    # ============================================

    async def handle_event(self, db: AsyncSession, event: Dict[str, Any]) -> None:
        event_type = event.get("type", "")
        obj = (event.get("data") or {}).get("object") or {}
        logger.info(f"[Billing] Webhook received: {event_type}")

        if event_type == "checkout.session.completed":
            await self._checkout_completed(obj)
        elif event_type in ("customer.subscription.created", "customer.subscription.updated"):
            await self._subscription_updated(db, obj)
        elif event_type == "customer.subscription.deleted":
            await self._subscription_deleted(db, obj)
        elif event_type == "invoice.payment_succeeded":
            await self._record_payment(db, obj, PaymentStatus.PAID)
        elif event_type == "invoice.payment_failed":
            await self._record_payment(db, obj, PaymentStatus.FAILED)
        else:
            logger.info(f"[Billing] Unhandled event type: {event_type}")

    async def _checkout_completed(self, session: Dict[str, Any]) -> None:
        user_id = (session.get("metadata") or {}).get("userId")
        if not user_id:
            logger.error(f"[Billing] No userId in checkout session {session.get('id')} metadata")
            return
        logger.log_billing_event("checkout_completed", user_id=user_id, subscription=session.get("subscription"))

    async def _subscription_updated(self, db: AsyncSession, subscription: Dict[str, Any]) -> None:
        customer_id = subscription.get("customer")
        user = await self._user_by_customer(db, customer_id)
        user_id = (subscription.get("metadata") or {}).get("userId") or (user.id if user else None)
        if not user_id:
            logger.error(f"[Billing] No user found for subscription {subscription.get('id')}")
            return

        price = _first_price(subscription)
        price_id = price.get("id")
        product = price.get("product")
        product_id = product.get("id") if isinstance(product, dict) else product
        status = subscription.get("status", "")
        period_start = _from_timestamp(_period(subscription, "current_period_start"))
        period_end = _from_timestamp(_period(subscription, "current_period_end"))

        result = await db.execute(
            select(Subscription).where(Subscription.stripe_subscription_id == subscription["id"])
        )
        record = result.scalar_one_or_none()
        if record is None:
            record = Subscription(
                user_id=user_id,
                stripe_subscription_id=subscription["id"],
                stripe_customer_id=customer_id,
                tier=UserTier.PRO.value,
            )
            db.add(record)

        record.status = status
        record.stripe_price_id = price_id
        record.billing_cycle = self.billing_cycle_for(price_id)
        record.stripe_product_id = product_id
        record.current_period_start = period_start
        record.current_period_end = period_end
        record.cancel_at_period_end = bool(subscription.get("cancel_at_period_end"))
        record.canceled_at = _from_timestamp(subscription.get("canceled_at"))
        record.trial_start = _from_timestamp(subscription.get("trial_start"))
        record.trial_end = _from_timestamp(subscription.get("trial_end"))

        new_tier = UserTier.PRO if status in ACTIVE_SUBSCRIPTION_STATUSES else UserTier.FREE
        if user is not None:
            user.tier = new_tier
            user.stripe_subscription_id = subscription["id"]
            user.stripe_price_id = price_id
            user.stripe_current_period_end = period_end

        await db.flush()
        logger.log_billing_event("subscription_updated", user_id=str(user_id), status=status, tier=new_tier.value)

    async def _subscription_deleted(self, db: AsyncSession, subscription: Dict[str, Any]) -> None:
        result = await db.execute(
            select(Subscription).where(Subscription.stripe_subscription_id == subscription.get("id"))
        )
        record = result.scalar_one_or_none()
        if record is not None:
            record.status = "canceled"
            record.canceled_at = datetime.utcnow()

        user = await self._user_by_customer(db, subscription.get("customer"))
        if user is not None:
            user.tier = UserTier.FREE
            user.stripe_subscription_id = None
            user.stripe_price_id = None
            user.stripe_current_period_end = None

        await db.flush()
        logger.log_billing_event("subscription_deleted", user_id=str(user.id) if user else None)

    async def _record_payment(self, db: AsyncSession, invoice: Dict[str, Any], status: PaymentStatus) -> None:
        user = await self._user_by_customer(db, invoice.get("customer"))
        if user is None:
            logger.error(f"[Billing] No user found for invoice {invoice.get('id')}")
            return

        paid = status == PaymentStatus.PAID
        db.add(Payment(
            user_id=user.id,
            stripe_invoice_id=invoice.get("id"),
            stripe_payment_intent_id=invoice.get("payment_intent"),
            stripe_subscription_id=invoice.get("subscription"),
            amount=invoice.get("amount_paid" if paid else "amount_due") or 0,
            currency=invoice.get("currency") or "usd",
            status=status.value,
            invoice_url=invoice.get("hosted_invoice_url"),
            invoice_pdf=invoice.get("invoice_pdf") if paid else None,
        ))
        await db.flush()
        logger.log_billing_event(f"payment_{status.value}", user_id=str(user.id), invoice=invoice.get("id"))


def get_billing_service(request: Request) -> StripeBillingService:
    return request.app.state.billing

"""
Unit Tests for Billing API Endpoints

Stripe SDK calls are patched; webhooks are signed with the test secret
the same way Stripe signs them.
"""
import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.core.config import settings
from app.main import app
from app.models.billing import Payment, Subscription
from app.models.user import UserTier
from app.services.stripe_service import StripeBillingService, get_billing_service


@pytest.fixture
def billing(client: AsyncClient) -> StripeBillingService:
    service = StripeBillingService.from_settings()
    app.dependency_overrides[get_billing_service] = lambda: service
    return service


def signed(event: dict, secret: str = None):
    """Body and Stripe-Signature header for a webhook event"""
    payload = json.dumps(event)
    timestamp = int(time.time())
    signature = hmac.new(
        (secret or settings.STRIPE_WEBHOOK_SECRET).encode('utf-8'),
        f'{timestamp}.{payload}'.encode('utf-8'),
        hashlib.sha256,
    ).hexdigest()
    return payload, {'stripe-signature': f't={timestamp},v1={signature}', 'content-type': 'application/json'}


def subscription_event(event_type: str, customer: str, status: str = 'active',
                       price_id: str = 'price_monthly_test') -> dict:
    return {
        'id': 'evt_1',
        'object': 'event',
        'type': event_type,
        'data': {'object': {
            'id': 'sub_123',
            'object': 'subscription',
            'customer': customer,
            'status': status,
            'cancel_at_period_end': False,
            'current_period_start': 1735689600,
            'current_period_end': 1738368000,
            'items': {'data': [{'price': {'id': price_id, 'product': 'prod_pro'}}]},
            'metadata': {},
        }},
    }


class TestCheckoutSession:

    @pytest.mark.asyncio
    async def test_creates_customer_and_session(self, client: AsyncClient, db_session, test_user, auth_headers, billing):
        with patch('app.services.stripe_service.stripe.Customer.create', return_value={'id': 'cus_new'}) as customer, \
                patch('app.services.stripe_service.stripe.checkout.Session.create',
                      return_value={'id': 'cs_1', 'url': 'https://checkout.stripe.com/c/cs_1'}) as session:
            response = await client.post(
                '/api/v1/billing/checkout-session',
                json={'price_id': 'price_yearly_test', 'billing_cycle': 'yearly'},
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert response.json() == {'session_id': 'cs_1', 'url': 'https://checkout.stripe.com/c/cs_1'}
        customer.assert_called_once()
        kwargs = session.call_args.kwargs
        assert kwargs['customer'] == 'cus_new'
        assert kwargs['mode'] == 'subscription'
        assert kwargs['line_items'] == [{'price': 'price_yearly_test', 'quantity': 1}]
        assert kwargs['metadata'] == {'userId': test_user.id, 'billingCycle': 'yearly'}

        await db_session.refresh(test_user)
        assert test_user.stripe_customer_id == 'cus_new'

    @pytest.mark.asyncio
    async def test_existing_customer_is_reused(self, client: AsyncClient, db_session, test_user, auth_headers, billing):
        test_user.stripe_customer_id = 'cus_existing'
        await db_session.commit()

        with patch('app.services.stripe_service.stripe.Customer.create') as customer, \
                patch('app.services.stripe_service.stripe.checkout.Session.create',
                      return_value={'id': 'cs_2', 'url': 'u'}) as session:
            await client.post(
                '/api/v1/billing/checkout-session', json={'price_id': 'price_monthly_test'}, headers=auth_headers
            )

        customer.assert_not_called()
        assert session.call_args.kwargs['customer'] == 'cus_existing'

    @pytest.mark.asyncio
    async def test_unknown_price_rejected(self, client: AsyncClient, auth_headers, billing):
        response = await client.post(
            '/api/v1/billing/checkout-session', json={'price_id': 'price_free_lunch'}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()['error']['details']['field'] == 'price_id'

    @pytest.mark.asyncio
    async def test_not_configured(self, client: AsyncClient, auth_headers, billing):
        billing.secret_key = ''

        response = await client.post(
            '/api/v1/billing/checkout-session', json={'price_id': 'price_monthly_test'}, headers=auth_headers
        )

        assert response.status_code == 503
        assert response.json()['error']['code'] == 'BILLING_NOT_CONFIGURED'

    @pytest.mark.asyncio
    async def test_pending_user_rejected(self, client: AsyncClient, pending_auth_headers, billing):
        response = await client.post(
            '/api/v1/billing/checkout-session', json={'price_id': 'price_monthly_test'}, headers=pending_auth_headers
        )
        assert response.status_code == 403


class TestPortalAndSubscription:

    @pytest.mark.asyncio
    async def test_portal_requires_customer(self, client: AsyncClient, auth_headers, billing):
        response = await client.post('/api/v1/billing/portal-session', headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_portal_url(self, client: AsyncClient, db_session, test_user, auth_headers, billing):
        test_user.stripe_customer_id = 'cus_1'
        await db_session.commit()

        with patch('app.services.stripe_service.stripe.billing_portal.Session.create',
                   return_value={'url': 'https://billing.stripe.com/p/session'}):
            response = await client.post('/api/v1/billing/portal-session', headers=auth_headers)

        assert response.json() == {'url': 'https://billing.stripe.com/p/session'}

    @pytest.mark.asyncio
    async def test_subscription_status(self, client: AsyncClient, db_session, test_user, auth_headers, billing):
        empty = await client.get('/api/v1/billing/subscription', headers=auth_headers)
        assert empty.json() == {'tier': 'free', 'subscription': None}

        db_session.add(Subscription(
            user_id=test_user.id,
            stripe_subscription_id='sub_9',
            stripe_customer_id='cus_9',
            stripe_price_id='price_monthly_test',
            status='trialing',
        ))
        await db_session.commit()

        response = await client.get('/api/v1/billing/subscription', headers=auth_headers)
        assert response.json()['subscription']['status'] == 'trialing'


class TestWebhook:

    @pytest.mark.asyncio
    async def test_missing_signature(self, client: AsyncClient, billing):
        response = await client.post('/api/v1/billing/webhook', content=b'{}')

        assert response.status_code == 400
        assert response.json()['detail'] == 'Missing stripe-signature header'

    @pytest.mark.asyncio
    async def test_bad_signature(self, client: AsyncClient, billing):
        payload, headers = signed({'type': 'invoice.payment_succeeded'}, secret='whsec_someone_else')

        response = await client.post('/api/v1/billing/webhook', content=payload, headers=headers)

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_SIGNATURE'

    @pytest.mark.asyncio
    async def test_subscription_created_upgrades_user(self, client: AsyncClient, db_session, test_user, billing):
        test_user.stripe_customer_id = 'cus_42'
        await db_session.commit()
        payload, headers = signed(subscription_event(
            'customer.subscription.created', 'cus_42', price_id='price_yearly_test'
        ))

        response = await client.post('/api/v1/billing/webhook', content=payload, headers=headers)

        assert response.status_code == 200
        assert response.json() == {'received': True}

        await db_session.refresh(test_user)
        assert test_user.tier == UserTier.PRO
        assert test_user.stripe_subscription_id == 'sub_123'

        result = await db_session.execute(select(Subscription).where(Subscription.stripe_subscription_id == 'sub_123'))
        record = result.scalar_one()
        assert record.status == 'active'
        assert record.billing_cycle == 'yearly'
        assert record.stripe_product_id == 'prod_pro'

    @pytest.mark.asyncio
    async def test_past_due_downgrades(self, client: AsyncClient, db_session, test_user, billing):
        test_user.stripe_customer_id = 'cus_42'
        await db_session.commit()
        for status in ('active', 'past_due'):
            payload, headers = signed(subscription_event('customer.subscription.updated', 'cus_42', status=status))
            await client.post('/api/v1/billing/webhook', content=payload, headers=headers)

        await db_session.refresh(test_user)
        assert test_user.tier == UserTier.FREE

    @pytest.mark.asyncio
    async def test_plan_change_updates_billing_cycle(self, client: AsyncClient, db_session, test_user, billing):
        test_user.stripe_customer_id = 'cus_42'
        await db_session.commit()
        for event_type, price_id in (('customer.subscription.created', 'price_monthly_test'),
                                     ('customer.subscription.updated', 'price_yearly_test')):
            payload, headers = signed(subscription_event(event_type, 'cus_42', price_id=price_id))
            response = await client.post('/api/v1/billing/webhook', content=payload, headers=headers)
            assert response.status_code == 200

        record = (await db_session.execute(select(Subscription))).scalar_one()
        await db_session.refresh(record)
        assert record.billing_cycle == 'yearly'
        assert record.stripe_price_id == 'price_yearly_test'

    @pytest.mark.asyncio
    async def test_subscription_deleted(self, client: AsyncClient, db_session, test_user, billing):
        test_user.stripe_customer_id = 'cus_42'
        await db_session.commit()
        payload, headers = signed(subscription_event('customer.subscription.created', 'cus_42'))
        await client.post('/api/v1/billing/webhook', content=payload, headers=headers)

        payload, headers = signed(subscription_event('customer.subscription.deleted', 'cus_42'))
        response = await client.post('/api/v1/billing/webhook', content=payload, headers=headers)

        assert response.status_code == 200
        await db_session.refresh(test_user)
        assert test_user.tier == UserTier.FREE
        assert test_user.stripe_subscription_id is None
        record = (await db_session.execute(select(Subscription))).scalar_one()
        assert record.status == 'canceled'

    @pytest.mark.asyncio
    async def test_invoice_payment_recorded(self, client: AsyncClient, db_session, test_user, billing):
        test_user.stripe_customer_id = 'cus_42'
        await db_session.commit()
        payload, headers = signed({
            'id': 'evt_2',
            'type': 'invoice.payment_succeeded',
            'data': {'object': {
                'id': 'in_1',
                'customer': 'cus_42',
                'subscription': 'sub_123',
                'amount_paid': 1900,
                'currency': 'usd',
                'hosted_invoice_url': 'https://invoice.stripe.com/i/in_1',
                'invoice_pdf': 'https://invoice.stripe.com/i/in_1/pdf',
            }},
        })

        response = await client.post('/api/v1/billing/webhook', content=payload, headers=headers)

        assert response.status_code == 200
        payment = (await db_session.execute(select(Payment))).scalar_one()
        assert payment.amount == 1900
        assert payment.status == 'paid'
        assert payment.user_id == test_user.id

    @pytest.mark.asyncio
    async def test_unhandled_event_is_acknowledged(self, client: AsyncClient, billing):
        payload, headers = signed({'id': 'evt_3', 'type': 'customer.created', 'data': {'object': {}}})

        response = await client.post('/api/v1/billing/webhook', content=payload, headers=headers)

        assert response.status_code == 200

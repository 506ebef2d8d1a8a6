"""
Unit Tests for Authentication API Endpoints
"""
from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from faker import Faker
from sqlalchemy import select

from app.core.security import create_refresh_token, decode_token, token_claims_for
from app.main import app
from app.models.user import User
from app.modules.auth.dependencies import get_google_oauth

fake = Faker()

TEST_PASSWORD = 'testpassword123'


class TestUserRegistration:
    """Test user registration endpoint"""

    @pytest.mark.asyncio
    async def test_register_success(self, client: AsyncClient):
        """New accounts are created unapproved"""
        user_data = {
            'email': fake.email(),
            'password': 'securePassword123!',
            'full_name': fake.name(),
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 201
        data = response.json()
        assert data['email'] == user_data['email'].lower()
        assert data['full_name'] == user_data['full_name']
        assert data['approved'] is False
        assert data['tier'] == 'free'
        assert 'hashed_password' not in data

    @pytest.mark.asyncio
    async def test_register_bypass_email_is_approved(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json={
            'email': 'Owner@Deckster.io',
            'password': 'securePassword123!',
        })

        assert response.status_code == 201
        assert response.json()['approved'] is True

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, test_user):
        """Test registration with duplicate email fails"""
        response = await client.post('/api/v1/auth/register', json={
            'email': test_user.email,
            'password': 'securePassword123!',
        })

        assert response.status_code == 400
        assert 'already registered' in response.json()['detail'].lower()

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json={
            'email': 'not-an-email',
            'password': 'securePassword123!',
        })

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_register_with_short_password(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json={
            'email': fake.email(),
            'password': '123',
        })

        assert response.status_code == 422


class TestUserLogin:
    """Test user login endpoint"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, test_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': test_user.email,
            'password': TEST_PASSWORD,
        })

        assert response.status_code == 200
        data = response.json()
        assert data['token_type'] == 'bearer'
        assert data['user']['email'] == test_user.email

        claims = decode_token(data['access_token'])
        assert claims['sub'] == test_user.id
        assert claims['approved'] is True
        assert claims['tier'] == 'free'
        assert claims['type'] == 'access'

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, test_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': test_user.email,
            'password': 'wrongpassword',
        })

        assert response.status_code == 401
        assert response.json()['detail'] == 'Incorrect email or password'

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/login', json={
            'email': fake.email(),
            'password': TEST_PASSWORD,
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, db_session, test_user):
        test_user.is_active = False
        await db_session.commit()

        response = await client.post('/api/v1/auth/login', json={
            'email': test_user.email,
            'password': TEST_PASSWORD,
        })

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_pending_user_can_login(self, client: AsyncClient, pending_user):
        """Login works before approval; the token tells the frontend to show the waiting page"""
        response = await client.post('/api/v1/auth/login', json={
            'email': pending_user.email,
            'password': TEST_PASSWORD,
        })

        assert response.status_code == 200
        assert decode_token(response.json()['access_token'])['approved'] is False


class TestCurrentUserAndRefresh:

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, test_user, auth_headers):
        response = await client.get('/api/v1/auth/me', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['id'] == test_user.id

    @pytest.mark.asyncio
    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_me_with_invalid_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_picks_up_approval(self, client: AsyncClient, db_session, pending_user):
        refresh_token = create_refresh_token(token_claims_for(pending_user))
        pending_user.approved = True
        await db_session.commit()

        response = await client.post('/api/v1/auth/refresh', json={'refresh_token': refresh_token})

        assert response.status_code == 200
        assert decode_token(response.json()['access_token'])['approved'] is True

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, client: AsyncClient, auth_headers):
        access_token = auth_headers['Authorization'].split(' ', 1)[1]

        response = await client.post('/api/v1/auth/refresh', json={'refresh_token': access_token})

        assert response.status_code == 401


class TestGoogleSignIn:

    @pytest.fixture
    def google(self):
        provider = MagicMock()
        provider.configured = True
        app.dependency_overrides[get_google_oauth] = lambda: provider
        return provider

    @pytest.mark.asyncio
    async def test_first_sign_in_creates_unapproved_user(self, client: AsyncClient, db_session, google):
        google.verify_id_token.return_value = {
            'google_id': 'g-123',
            'email': 'New.Person@example.com',
            'email_verified': True,
            'full_name': 'New Person',
            'avatar_url': 'https://lh3.example.com/a.png',
        }

        response = await client.post('/api/v1/auth/google/token', json={'credential': 'id-token'})

        assert response.status_code == 200
        data = response.json()
        assert data['is_new_user'] is True
        assert data['user']['email'] == 'new.person@example.com'
        assert data['user']['approved'] is False
        assert data['user']['oauth_provider'] == 'google'
        google.verify_id_token.assert_called_once_with('id-token')

    @pytest.mark.asyncio
    async def test_existing_email_is_linked(self, client: AsyncClient, db_session, test_user, google):
        google.verify_id_token.return_value = {
            'google_id': 'g-456',
            'email': test_user.email,
            'full_name': 'Someone',
            'avatar_url': '',
        }

        response = await client.post('/api/v1/auth/google/token', json={'credential': 'id-token'})

        assert response.json()['is_new_user'] is False
        result = await db_session.execute(select(User).where(User.id == test_user.id))
        assert result.scalar_one().google_id == 'g-456'

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient, google):
        google.verify_id_token.return_value = None

        response = await client.post('/api/v1/auth/google/token', json={'credential': 'forged'})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_not_configured(self, client: AsyncClient, google):
        google.configured = False

        response = await client.post('/api/v1/auth/google/token', json={'credential': 'id-token'})

        assert response.status_code == 503

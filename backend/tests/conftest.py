"""
Deckster - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment before the app reads its settings
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['DEV_BYPASS_EMAIL'] = 'owner@deckster.io'
os.environ['CRON_SECRET'] = 'test-cron-secret'
os.environ['STRIPE_SECRET_KEY'] = 'sk_test_dummy'
os.environ['STRIPE_WEBHOOK_SECRET'] = 'whsec_test_dummy'
os.environ['STRIPE_PRO_MONTHLY_PRICE_ID'] = 'price_monthly_test'
os.environ['STRIPE_PRO_YEARLY_PRICE_ID'] = 'price_yearly_test'

from app.main import app
from app.core.database import Base, get_db
from app.models.user import User, UserRole
from app.core.security import get_password_hash, create_access_token, token_claims_for

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(db_session: AsyncSession, approved: bool = True,
                      role: UserRole = UserRole.USER, email: str = None) -> User:
    user = User(
        email=email or fake.unique.email(),
        hashed_password=get_password_hash(TEST_PASSWORD),
        full_name=fake.name(),
        role=role,
        is_active=True,
        approved=approved,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def headers_for(user: User) -> dict:
    return {'Authorization': f'Bearer {create_access_token(token_claims_for(user))}'}


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """An approved user"""
    return await create_user(db_session)


@pytest.fixture
async def pending_user(db_session: AsyncSession) -> User:
    """A registered user still waiting for approval"""
    return await create_user(db_session, approved=False)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest.fixture
def pending_auth_headers(pending_user: User) -> dict:
    return headers_for(pending_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest.fixture
def user_factory(db_session: AsyncSession):
    """Create extra users inside a test: await user_factory(approved=False)"""
    async def factory(**kwargs) -> User:
        return await create_user(db_session, **kwargs)
    return factory


@pytest.fixture
def token_headers():
    """Authorization headers for any user: token_headers(user)"""
    return headers_for

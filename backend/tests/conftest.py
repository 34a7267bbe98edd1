"""Fixtures for the SmartRent suite.

Each test gets its own in-memory SQLite database. HTTP tests drive the real
app through httpx with ``get_db`` pointed at that same session, so rows made
by the factories are visible to request handlers.
"""

from datetime import date, timedelta
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from smartrent.infra.database import Base, get_db

# Models must be imported so their tables exist on Base.metadata
import smartrent.domain.models  # noqa: F401

from smartrent.app.config import Settings
from smartrent.app.main import create_app
from smartrent.domain.enums import LeaseStatus, PropertyStatus, UserRole
from smartrent.domain.models import Lease, Property, User
from smartrent.services.auth_service import SessionTokens

TEST_SECRET = "test-secret"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Fresh in-memory database with the schema created; dropped afterwards."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(db_session):
    """Factory that creates a User row.

    Usage:
        landlord = await make_user(role="landlord")
        tenant = await make_user(role="tenant", landlord_id=landlord.id)
    """
    counter = {"n": 0}

    async def _factory(
        role: str = UserRole.TENANT.value,
        email: str | None = None,
        username: str | None = None,
        landlord_id: str | None = None,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role}{counter['n']}@test.com",
            username=username or f"{role.capitalize()} {counter['n']}",
            role=role,
            landlord_id=landlord_id,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _factory


@pytest.fixture
def make_property(db_session):
    """Factory that creates a Property owned by ``landlord``."""

    async def _factory(
        landlord: User,
        title: str = "Maple Court 2B",
        address: str = "12 Maple Ct",
        status: str = PropertyStatus.AVAILABLE.value,
    ) -> Property:
        prop = Property(
            landlord_id=landlord.id,
            title=title,
            address=address,
            city="Springfield",
            rent_amount=1200,
            status=status,
        )
        db_session.add(prop)
        await db_session.commit()
        return prop

    return _factory


@pytest.fixture
def make_lease(db_session):
    """Factory that creates a Lease row directly, bypassing the service checks."""

    async def _factory(
        prop: Property,
        tenant: User,
        status: str = LeaseStatus.PENDING.value,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Lease:
        today = date.today()
        lease = Lease(
            property_id=prop.id,
            tenant_id=tenant.id,
            landlord_id=prop.landlord_id,
            start_date=start_date or today - timedelta(days=30),
            end_date=end_date or today + timedelta(days=335),
            monthly_rent=1200.0,
            security_deposit=1200.0,
            payment_due_day=1,
            status=status,
        )
        db_session.add(lease)
        await db_session.commit()
        return lease

    return _factory


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def tokens():
    return SessionTokens(TEST_SECRET, "HS256", 1440)


@pytest.fixture
def bearer(tokens):
    """Authorization header carrying a local session token for ``user``."""

    def _header(user: User) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(user)}"}

    return _header


@pytest.fixture
def identity_provider():
    """Fake Firebase provider.

    Register valid tokens with ``identity_provider.tokens[token] = claims``;
    any other token raises like an expired Firebase ID token would.
    """
    provider = AsyncMock()
    provider.tokens = {}

    async def _verify(token: str) -> dict:
        if token not in provider.tokens:
            raise ValueError("Token expired")
        return provider.tokens[token]

    provider.verify = AsyncMock(side_effect=_verify)
    return provider


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret_key=TEST_SECRET,
        firebase_project_id="",
        debug=False,
    )


@pytest.fixture
def app(db_session, test_settings, identity_provider):
    test_app = create_app(test_settings, identity_provider=identity_provider)

    async def _override_get_db():
        yield db_session

    test_app.dependency_overrides[get_db] = _override_get_db
    return test_app


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac

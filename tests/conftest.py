"""
Square 15 - Test Configuration

Pytest fixtures and configuration.

Tests run against an in-memory SQLite database through aiosqlite; each test
gets a fresh schema.
"""

from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_async_session
from app.models.quotation import Quotation, QuotationStatus
from app.models.user import User, UserRole
from app.utils.security import create_access_token
from main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

COMPANY_ID = uuid4()
OTHER_COMPANY_ID = uuid4()


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session bound to the test database."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

async def create_user(
    db: AsyncSession,
    role: UserRole,
    email: str,
    first_name: str = "Test",
    last_name: str = "User",
    company_id=COMPANY_ID,
    **kwargs,
) -> User:
    user = User(
        id=uuid4(),
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        company_id=company_id,
        is_active=kwargs.pop("is_active", True),
        disabled_notification_types=kwargs.pop("disabled_notification_types", []),
        **kwargs,
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, UserRole.ADMIN, "admin@square15.co.za",
        first_name="Ada", last_name="Admin", company_id=None,
    )


@pytest_asyncio.fixture
async def contractor(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, UserRole.CONTRACTOR, "owner@builders.co.za",
        first_name="Connie", last_name="Owner",
    )


@pytest_asyncio.fixture
async def senior_manager(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, UserRole.CONTRACTOR_SENIOR_MANAGER, "senior@builders.co.za",
        first_name="Sam", last_name="Senior",
    )


@pytest_asyncio.fixture
async def junior_manager(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, UserRole.CONTRACTOR_JUNIOR_MANAGER, "junior@builders.co.za",
        first_name="Jo", last_name="Junior",
    )


@pytest_asyncio.fixture
async def artisan(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, UserRole.ARTISAN, "artisan@builders.co.za",
        first_name="Thabo", last_name="Artisan",
    )


@pytest_asyncio.fixture
async def property_manager(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, UserRole.PROPERTY_MANAGER, "pm@estates.co.za",
        first_name="Priya", last_name="Manager", company_id=None,
    )


@pytest_asyncio.fixture
async def quotation(db_session: AsyncSession, contractor: User, artisan: User) -> Quotation:
    """A DRAFT quotation created by the contractor and assigned to the artisan."""
    quote = Quotation(
        id=uuid4(),
        quote_number="QUO-00001",
        status=QuotationStatus.DRAFT,
        company_id=COMPANY_ID,
        assigned_to_id=artisan.id,
        created_by_id=contractor.id,
        customer_name="Priya Manager",
        customer_email="pm@estates.co.za",
        address="12 Long Street, Cape Town",
        description="Repaint the lobby",
        subtotal=Decimal("10000.00"),
        tax=Decimal("1500.00"),
        total=Decimal("11500.00"),
    )
    db_session.add(quote)
    await db_session.commit()
    return quote


def auth_headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}
